# SPDX-License-Identifier: Apache-2.0
"""
Filesystem utilities: path guards, posix-style relative paths, temp
workspaces and gitignore-friendly directory entries.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

log = logging.getLogger("docpup.utils.fs")


# -------------------------- Names & directories --------------------------


def to_posix(path: Path | str) -> str:
    s = Path(path).as_posix()
    return "" if s == "." else s


def with_trailing_slash(value: str) -> str:
    return value if value.endswith("/") else f"{value}/"


def ensure_dir(path: Path) -> Path:
    p = Path(path).expanduser().resolve()
    p.mkdir(parents=True, exist_ok=True)
    return p


def recreate_dir(path: Path) -> Path:
    """Remove `path` (if present) and create it again, empty."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ------------------------------- Path guards ------------------------------


def is_under(path: Path | str, root: Path | str) -> bool:
    p = Path(path).resolve()
    r = Path(root).resolve()
    try:
        p.relative_to(r)
        return True
    except ValueError:
        return False


def resolve_inside(root: Path | str, *segments: str) -> Path:
    """
    Resolve `segments` against `root` and refuse anything that lands outside it.
    The root itself is accepted.
    """
    r = Path(root).resolve()
    p = r.joinpath(*segments).resolve()
    if not is_under(p, r):
        raise PermissionError(f"Resolved path escapes root: {p}")
    return p


def relative_posix(path: Path | str, start: Path | str) -> str:
    """Posix relative path from `start` to `path`; "" when they are the same."""
    return to_posix(os.path.relpath(Path(path).resolve(), Path(start).resolve()))


# ---------------------------- Gitignore entries ---------------------------


def gitignore_dir_entry(root: Path | str, target_dir: Path | str) -> Optional[str]:
    """
    Directory entry for an ignore file, e.g. "documentation/nextjs/".
    Returns None when `target_dir` is the root itself.
    """
    relative = relative_posix(target_dir, root)
    if not relative:
        return None
    return with_trailing_slash(relative)


# ------------------------------ Temp workspace ------------------------------


def temp_workspace(prefix: str = "docpup-") -> Path:
    """
    Create and return a temporary workspace path (caller is responsible for cleanup).
    """
    p = Path(tempfile.mkdtemp(prefix=prefix)).resolve()
    log.debug("Created temp workspace", extra={"path": str(p)})
    return p


def cleanup_path(path: Path) -> None:
    shutil.rmtree(path, ignore_errors=True)
