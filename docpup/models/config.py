# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_EXCLUDE_DIRS = [
    ".git",
    "node_modules",
    "images",
    "img",
    "media",
    "assets",
    "css",
    "fonts",
]
DEFAULT_OUTPUT_DIR = "docpup-build"
DEFAULT_SECTION_HEADER = "Docpup generated docs"

_REPO_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")
_EXTENSION_RE = re.compile(r"^\.[a-zA-Z0-9]+$")

# camelCase on disk, snake_case in Python
_CONFIG = ConfigDict(populate_by_name=True, extra="ignore")


class ContentType(str, Enum):
    docs = "docs"
    source = "source"


def _check_extensions(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    for ext in v:
        if not _EXTENSION_RE.match(ext):
            raise ValueError(f"Extension must start with '.' and be alphanumeric: {ext!r}")
    return v


class ScanConfig(BaseModel):
    """
    File selection rules for the directory scanner.

    When `extensions` is set it fully overrides the md/mdx flags.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    include_md: bool = Field(default=True, alias="includeMd")
    include_mdx: bool = Field(default=True, alias="includeMdx")
    include_hidden_dirs: bool = Field(default=False, alias="includeHiddenDirs")
    exclude_dirs: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS), alias="excludeDirs")
    extensions: Optional[List[str]] = None

    @field_validator("extensions")
    @classmethod
    def _valid_extensions(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_extensions(v)


class ScanOverride(BaseModel):
    """Per-repo partial ScanConfig; only explicitly set fields take effect."""
    model_config = _CONFIG

    include_md: Optional[bool] = Field(default=None, alias="includeMd")
    include_mdx: Optional[bool] = Field(default=None, alias="includeMdx")
    include_hidden_dirs: Optional[bool] = Field(default=None, alias="includeHiddenDirs")
    exclude_dirs: Optional[List[str]] = Field(default=None, alias="excludeDirs")
    extensions: Optional[List[str]] = None

    @field_validator("extensions")
    @classmethod
    def _valid_extensions(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_extensions(v)


class GitignoreConfig(BaseModel):
    model_config = _CONFIG

    add_docs_dir: bool = Field(default=True, alias="addDocsDir")
    add_docs_sub_dirs: bool = Field(default=False, alias="addDocsSubDirs")
    add_index_files: bool = Field(default=False, alias="addIndexFiles")
    section_header: str = Field(default=DEFAULT_SECTION_HEADER, min_length=1, alias="sectionHeader")


# ------------------------------ Preprocess ------------------------------


class SphinxPreprocess(BaseModel):
    """Build Markdown from a Sphinx project with sphinx-markdown-builder."""
    model_config = _CONFIG

    type: Literal["sphinx"] = "sphinx"
    work_dir: Optional[str] = Field(default=None, min_length=1, alias="workDir")
    builder: str = "markdown"
    output_dir: str = Field(default=DEFAULT_OUTPUT_DIR, min_length=1, alias="outputDir")


class HtmlPreprocess(BaseModel):
    """Convert a tree of built HTML pages to Markdown."""
    model_config = _CONFIG

    type: Literal["html"] = "html"
    work_dir: Optional[str] = Field(default=None, min_length=1, alias="workDir")
    output_dir: str = Field(default=DEFAULT_OUTPUT_DIR, min_length=1, alias="outputDir")
    selector: Optional[str] = None
    rewrite_links: bool = Field(default=True, alias="rewriteLinks")

    @field_validator("selector")
    @classmethod
    def _blank_selector(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


PreprocessDirective = Annotated[
    Union[SphinxPreprocess, HtmlPreprocess],
    Field(discriminator="type"),
]


# --------------------------------- Repos ---------------------------------


class RepoConfig(BaseModel):
    """
    One remote repository to fetch, (optionally) preprocess, scan and index.
    """
    model_config = _CONFIG

    name: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    source_path: Optional[str] = Field(default=None, min_length=1, alias="sourcePath")
    source_paths: Optional[List[Annotated[str, Field(min_length=1)]]] = Field(
        default=None, min_length=1, alias="sourcePaths"
    )
    ref: Optional[str] = Field(default=None, min_length=1)
    preprocess: Optional[PreprocessDirective] = None
    scan: Optional[ScanOverride] = None
    content_type: ContentType = Field(default=ContentType.docs, alias="contentType")

    @field_validator("name")
    @classmethod
    def _valid_name(cls, v: str) -> str:
        if not _REPO_NAME_RE.match(v):
            raise ValueError("Repo name must contain only letters, numbers, '.', '_', or '-'")
        return v

    @model_validator(mode="after")
    def _check_paths(self) -> "RepoConfig":
        if not self.source_path and not self.source_paths:
            raise ValueError("Either sourcePath or sourcePaths must be provided")
        if self.preprocess is not None and len(self.all_source_paths()) > 1:
            raise ValueError("preprocess is not supported with multiple sourcePaths")
        return self

    def all_source_paths(self) -> List[str]:
        if self.source_paths:
            return list(self.source_paths)
        if self.source_path:
            return [self.source_path]
        raise ValueError(f"Repo {self.name}: either sourcePath or sourcePaths required")

    def single_source_path(self) -> str:
        paths = self.all_source_paths()
        if len(paths) != 1:
            raise ValueError(f"Repo {self.name}: preprocess requires a single sourcePath")
        return paths[0]


class DocpupConfig(BaseModel):
    """
    Validated project configuration (docpup.config.yaml / .docpuprc*).
    """
    model_config = _CONFIG

    docs_dir: str = Field(default="documentation", min_length=1, alias="docsDir")
    indices_dir: str = Field(default="documentation/indices", min_length=1, alias="indicesDir")
    gitignore: GitignoreConfig = Field(default_factory=GitignoreConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    repos: List[RepoConfig] = Field(min_length=1)
    concurrency: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _unique_names(self) -> "DocpupConfig":
        seen = set()
        for repo in self.repos:
            if repo.name in seen:
                raise ValueError(f"Duplicate repo name: {repo.name}")
            seen.add(repo.name)
        return self
