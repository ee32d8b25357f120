# SPDX-License-Identifier: Apache-2.0
"""
Idempotent managed section inside a .gitignore-style file.

    # <section header>
    documentation/
    documentation/nextjs/

New entries go directly under the header line; entries already present
anywhere in the file (exact match after trimming) are left alone.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

log = logging.getLogger("docpup.services.gitignore")

_LINE_SPLIT = re.compile(r"\r?\n")


def _read_lines(path: Path) -> List[str]:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    if not content:
        return []
    lines = _LINE_SPLIT.split(content)
    if lines and lines[-1] == "":
        # trailing newline terminates the last line; it is not an extra blank one
        lines.pop()
    return lines


def update_gitignore(
    repo_root: Path | str,
    entries: Iterable[Optional[str]],
    section_header: str,
    filename: str = ".gitignore",
) -> bool:
    """
    Ensure every entry is present in `repo_root/filename`, under `# section_header`.

    Returns True when the file was written. With no (non-empty) entries the
    file is not touched at all.
    """
    wanted = [e for e in entries if e]
    if not wanted:
        return False

    path = Path(repo_root) / filename
    lines = _read_lines(path)
    header_line = f"# {section_header}"

    existing = {line.strip() for line in lines}
    header_index = next((i for i, line in enumerate(lines) if line.strip() == header_line), -1)

    if header_index == -1:
        if lines and lines[-1].strip() != "":
            lines.append("")
        lines.append(header_line)
        header_index = len(lines) - 1

    offset = 0
    for entry in wanted:
        if entry in existing:
            continue
        lines.insert(header_index + 1 + offset, entry)
        offset += 1
        existing.add(entry)

    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    log.info("Updated ignore file", extra={"path": str(path), "added": offset})
    return True
