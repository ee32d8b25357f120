# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import pytest

from docpup.utils.fs import (
    gitignore_dir_entry,
    recreate_dir,
    relative_posix,
    resolve_inside,
    to_posix,
)


def test_resolve_inside_accepts_nested_and_root(tmp_path):
    assert resolve_inside(tmp_path, "a", "b") == (tmp_path / "a" / "b").resolve()
    assert resolve_inside(tmp_path) == tmp_path.resolve()


def test_resolve_inside_rejects_escape(tmp_path):
    with pytest.raises(PermissionError):
        resolve_inside(tmp_path / "out", "../elsewhere")


def test_relative_posix_and_gitignore_entry(tmp_path):
    docs = tmp_path / "documentation" / "nextjs"
    assert relative_posix(docs, tmp_path) == "documentation/nextjs"
    assert relative_posix(tmp_path, tmp_path) == ""
    assert gitignore_dir_entry(tmp_path, docs) == "documentation/nextjs/"
    assert gitignore_dir_entry(tmp_path, tmp_path) is None
    assert to_posix(".") == ""


def test_recreate_dir_empties_existing(tmp_path):
    target = tmp_path / "out"
    (target / "sub").mkdir(parents=True)
    (target / "sub" / "stale.md").write_text("x")
    recreate_dir(target)
    assert target.is_dir()
    assert list(target.iterdir()) == []
