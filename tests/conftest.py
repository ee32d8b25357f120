# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest

from .helpers import write_files


@pytest.fixture
def make_tree(tmp_path):
    """Write {relative path: content} under a fresh directory and return it."""

    def _make(files: Dict[str, str], name: str = "tree") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        write_files(root, files)
        return root

    return _make
