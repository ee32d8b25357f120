# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from docpup.services.gitignore import update_gitignore

HEADER = "Docpup generated docs"


def test_creates_file_with_section(tmp_path):
    assert update_gitignore(tmp_path, ["documentation/"], HEADER) is True
    assert (tmp_path / ".gitignore").read_text() == "# Docpup generated docs\ndocumentation/\n"


def test_appends_section_after_existing_content(tmp_path):
    (tmp_path / ".gitignore").write_text("node_modules/\n.env\n")
    update_gitignore(tmp_path, ["documentation/", "documentation/indices/"], HEADER)
    assert (tmp_path / ".gitignore").read_text() == (
        "node_modules/\n.env\n\n# Docpup generated docs\ndocumentation/\ndocumentation/indices/\n"
    )


def test_is_idempotent(tmp_path):
    update_gitignore(tmp_path, ["documentation/"], HEADER)
    first = (tmp_path / ".gitignore").read_text()
    update_gitignore(tmp_path, ["documentation/"], HEADER)
    assert (tmp_path / ".gitignore").read_text() == first


def test_inserts_new_entries_under_existing_header(tmp_path):
    (tmp_path / ".gitignore").write_text("# Docpup generated docs\ndocumentation/\n\ndist/\n")
    update_gitignore(tmp_path, ["documentation/", "documentation/react/"], HEADER)
    assert (tmp_path / ".gitignore").read_text() == (
        "# Docpup generated docs\ndocumentation/react/\ndocumentation/\n\ndist/\n"
    )


def test_entry_present_elsewhere_is_not_duplicated(tmp_path):
    (tmp_path / ".gitignore").write_text("documentation/\r\n")
    update_gitignore(tmp_path, ["documentation/"], HEADER)
    lines = (tmp_path / ".gitignore").read_text().splitlines()
    assert lines.count("documentation/") == 1
    assert "# Docpup generated docs" in lines


def test_no_entries_leaves_file_untouched(tmp_path):
    assert update_gitignore(tmp_path, [None, ""], HEADER) is False
    assert not (tmp_path / ".gitignore").exists()


def test_disjoint_calls_share_one_header(tmp_path):
    update_gitignore(tmp_path, ["documentation/a/"], HEADER)
    update_gitignore(tmp_path, ["documentation/b/"], HEADER)
    content = (tmp_path / ".gitignore").read_text()
    assert content.count("# Docpup generated docs") == 1
    assert "documentation/a/\n" in content
    assert "documentation/b/\n" in content


def test_existing_blank_line_is_not_doubled(tmp_path):
    (tmp_path / ".gitignore").write_text("dist/\n\n")
    update_gitignore(tmp_path, ["documentation/"], HEADER)
    assert (tmp_path / ".gitignore").read_text() == "dist/\n\n# Docpup generated docs\ndocumentation/\n"


def test_no_entries_leaves_existing_bytes_identical(tmp_path):
    target = tmp_path / ".gitignore"
    target.write_bytes(b"a\r\nb")
    assert update_gitignore(tmp_path, ["", None], HEADER) is False
    assert target.read_bytes() == b"a\r\nb"
