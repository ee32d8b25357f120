# SPDX-License-Identifier: Apache-2.0
"""
Directory scanner: walk a checked-out tree and select documentation files.

The result is a DirectoryTree, an insertion-ordered mapping of
posix-style relative directory ("" is the scan root) to the filenames
selected directly inside it. Directories without selected files never
appear as keys.
"""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..models.config import ScanConfig, ScanOverride
from ..utils.fs import relative_posix

log = logging.getLogger("docpup.services.scanner")

DirectoryTree = Dict[str, List[str]]


# ------------------------------ Config helpers ------------------------------


def merge_scan_config(base: ScanConfig, override: Optional[ScanOverride] = None) -> ScanConfig:
    """
    Apply a repo-level override on top of the global scan rules.
    Set flags win; excludeDirs is the union of both lists (base order first).
    """
    if override is None:
        return base
    updates = override.model_dump(exclude_unset=True, exclude_none=True)
    if override.exclude_dirs is not None:
        updates["exclude_dirs"] = list(dict.fromkeys([*base.exclude_dirs, *override.exclude_dirs]))
    return base.model_copy(update=updates)


def _allowed_extensions(config: ScanConfig) -> FrozenSet[str]:
    if config.extensions is not None:
        return frozenset(ext.lower() for ext in config.extensions)
    allowed = set()
    if config.include_md:
        allowed.add(".md")
    if config.include_mdx:
        allowed.add(".mdx")
    return frozenset(allowed)


def _skip_dir(name: str, config: ScanConfig, excluded: FrozenSet[str]) -> bool:
    if name in excluded:
        return True
    return name.startswith(".") and not config.include_hidden_dirs


def _add(tree: DirectoryTree, key: str, files: Iterable[str]) -> None:
    bucket = tree.setdefault(key, [])
    for name in files:
        if name not in bucket:
            bucket.append(name)


# --------------------------------- Scanning ---------------------------------


def scan_docs(root_dir: Path | str, config: ScanConfig) -> DirectoryTree:
    """
    Recursively collect files under `root_dir` that match `config`.

    A missing `root_dir` yields an empty tree. Only an unreadable root
    raises; unreadable subdirectories are logged and skipped.
    """
    root = Path(root_dir)
    allowed = _allowed_extensions(config)
    if not root.exists():
        return {}
    if root.is_file():
        return {"": [root.name]} if os.path.splitext(root.name)[1].lower() in allowed else {}

    excluded = frozenset(config.exclude_dirs)
    tree: DirectoryTree = {}
    # (absolute dir, relative posix key); popped LIFO with children pushed
    # in reverse so keys come out in sorted pre-order.
    pending: List[Tuple[Path, str]] = [(root, "")]

    while pending:
        current, rel = pending.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError:
            if current == root:
                raise
            log.warning("Skipping unreadable directory", extra={"path": str(current)})
            continue

        files: List[str] = []
        subdirs: List[Tuple[Path, str]] = []
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if _skip_dir(entry.name, config, excluded):
                    continue
                subdirs.append((Path(entry.path), posixpath.join(rel, entry.name) if rel else entry.name))
            elif entry.is_file():
                if os.path.splitext(entry.name)[1].lower() in allowed:
                    files.append(entry.name)

        if files:
            tree[rel] = files
        pending.extend(reversed(subdirs))

    return tree


def scan_multiple_paths(paths: Iterable[Path | str], config: ScanConfig, base_dir: Path | str) -> DirectoryTree:
    """
    Scan several checkout paths (directories or single files) and merge the
    results, keyed relative to `base_dir`.
    """
    merged: DirectoryTree = {}
    roots = list(paths)
    for raw in roots:
        p = Path(raw)
        rel = relative_posix(p, base_dir)
        if p.is_file():
            for files in scan_docs(p, config).values():
                _add(merged, posixpath.dirname(rel), files)
            continue
        for key, files in scan_docs(p, config).items():
            _add(merged, posixpath.join(rel, key) if rel and key else (rel or key), files)
    log.debug("Scanned checkout paths", extra={"paths": len(roots), "directories": len(merged)})
    return merged
