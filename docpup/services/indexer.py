# SPDX-License-Identifier: Apache-2.0
"""
Compact single-line index documents for agents.

Layout (no newlines):

    <!-- NAME-AGENTS-MD-START -->[Name Docs Index]|root: path|WARNING|dir:{a.md,b.md}|...<!-- NAME-AGENTS-MD-END -->

Filenames are not escaped; names containing '|', ',', '{' or '}' make the
document ambiguous.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Union

from ..models.config import ContentType

ROOT_TOKEN = "(root)"

_TITLES: Dict[ContentType, str] = {
    ContentType.docs: "{name} Docs Index",
    ContentType.source: "{name} Source Index",
}

_WARNINGS: Dict[ContentType, str] = {
    ContentType.docs: (
        "IMPORTANT: Prefer retrieval-led reasoning over pre-training-led reasoning. "
        "These docs may be newer than what you remember; read the relevant files before acting."
    ),
    ContentType.source: (
        "IMPORTANT: Prefer retrieval-led reasoning over pre-training-led reasoning. "
        "Read the relevant source files before relying on APIs or behavior."
    ),
}


def start_marker(name: str) -> str:
    return f"<!-- {name.upper()}-AGENTS-MD-START -->"


def end_marker(name: str) -> str:
    return f"<!-- {name.upper()}-AGENTS-MD-END -->"


def index_file_name(name: str) -> str:
    return f"{name}-index.md"


def build_index(
    tree: Mapping[str, Sequence[str]],
    name: str,
    root_path: str,
    content_type: Union[ContentType, str] = ContentType.docs,
) -> str:
    """
    Serialize a DirectoryTree into the one-line index document for `name`.
    Directory and file order follow the iteration order of `tree`.
    """
    kind = ContentType(content_type)
    parts: List[str] = [
        f"[{_TITLES[kind].format(name=name)}]",
        f"root: {root_path}",
        _WARNINGS[kind],
    ]
    for directory, files in tree.items():
        label = directory or ROOT_TOKEN
        parts.append(f"{label}:{{{','.join(files)}}}")
    return f"{start_marker(name)}{'|'.join(parts)}{end_marker(name)}"
