# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Tuple

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .models.config import DocpupConfig

SEARCH_PLACES = (
    "docpup.config.yaml",
    "docpup.config.yml",
    ".docpuprc",
    ".docpuprc.json",
    ".docpuprc.yaml",
    ".docpuprc.yml",
)


class Settings(BaseSettings):
    """
    Process-level knobs (environment / .env, prefix DOCPUP_).

    Project configuration (repos, scan rules, output dirs) lives in the
    docpup config file instead; see `load_config`.
    """

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # External tools
    GIT_BIN: str = "git"
    PYTHON_BIN: str = Field(default="python", description="Interpreter used for `python -m sphinx`")

    # Run
    DEFAULT_CONCURRENCY: int = Field(default=2, gt=0)
    TMP_PREFIX: str = "docpup-"

    model_config = SettingsConfigDict(
        env_prefix="DOCPUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper() or "INFO"


# ------------------------------ Config file ------------------------------


def find_config(base_dir: Path) -> Optional[Path]:
    for name in SEARCH_PLACES:
        candidate = base_dir / name
        if candidate.is_file():
            return candidate
    return None


def _read_config_file(path: Path) -> Any:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    try:
        # JSON is a YAML subset, so .docpuprc.json goes through the same parser
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config: cannot parse {path}: {e}") from e


def load_config(config_path: Optional[str] = None, base_dir: Optional[Path] = None) -> Tuple[DocpupConfig, Path]:
    """
    Locate, parse and validate the docpup config.

    Returns (config, directory containing the config file).
    Raises ConfigError when nothing is found or validation fails.
    """
    base = Path(base_dir or Path.cwd()).resolve()
    if config_path:
        path = (base / config_path).resolve()
        if not path.is_file():
            raise ConfigError(f"No config found at {path}")
    else:
        found = find_config(base)
        if found is None:
            raise ConfigError("No docpup config found. Expected docpup.config.yaml or .docpuprc.*")
        path = found

    data = _read_config_file(path)
    if data is None or data == {}:
        raise ConfigError(f"No config found at {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config: expected a mapping at the top level of {path}")

    try:
        config = DocpupConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e
    return config, path.parent
