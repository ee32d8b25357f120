# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from docpup.errors import PreprocessError
from docpup.models.config import RepoConfig
from docpup.services.preprocess import (
    collect_html_files,
    format_sphinx_failure,
    html_to_markdown,
    rewrite_href,
    run_preprocess,
)

PAGE = """<html><head><title>t</title><style>body{}</style></head>
<body>
  <nav>site menu</nav>
  <main>
    <h1>Install</h1>
    <p>See <a href="guide/setup.html#env">setup</a> or <a href="https://example.com/x.html">upstream</a>.</p>
    <script>alert("x")</script>
    <pre class="language-python">print("hi")</pre>
  </main>
</body></html>
"""


def _repo(preprocess, source_path="docs"):
    return RepoConfig.model_validate({
        "name": "demo",
        "repo": "https://github.com/acme/demo",
        "sourcePath": source_path,
        "preprocess": preprocess,
    })


# ------------------------------ Links ------------------------------


@pytest.mark.parametrize(
    "href,expected",
    [
        ("guide.html", "guide.md"),
        ("../api/ref.HTM#section", "../api/ref.md#section"),
        ("page.html?v=2#top", "page.md?v=2#top"),
        ("#anchor", None),
        ("https://example.com/page.html", None),
        ("mailto:someone@example.com", None),
        ("//cdn.example.com/page.html", None),
        ("image.png", None),
        ("", None),
    ],
)
def test_rewrite_href(href, expected):
    assert rewrite_href(href) == expected


# ------------------------------ HTML ------------------------------


def test_html_to_markdown_keeps_main_content():
    md = html_to_markdown(PAGE)
    assert md.startswith("# Install")
    assert md.endswith("\n")
    assert "[setup](guide/setup.md#env)" in md
    assert "(https://example.com/x.html)" in md
    assert "```python" in md
    assert "site menu" not in md
    assert "alert" not in md
    assert "body{}" not in md


def test_html_to_markdown_selector_and_no_rewrite():
    raw = '<body><div id="docs"><a href="a.html">A</a></div><div>other</div></body>'
    md = html_to_markdown(raw, selector="#docs", rewrite_links=False)
    assert md.strip() == "[A](a.html)"


def test_html_to_markdown_missing_selector_falls_back():
    raw = "<body><article><p>kept</p></article><footer>dropped</footer></body>"
    md = html_to_markdown(raw, selector=".nope")
    assert md.strip() == "kept"


def test_collect_html_files_skips_hidden_and_output(make_tree):
    root = make_tree({
        "index.html": "x",
        "guide/a.htm": "x",
        ".buildinfo/b.html": "x",
        "out/c.html": "x",
        "notes.txt": "x",
    })
    found = collect_html_files(root, skip_dir=root / "out")
    assert [p.relative_to(root).as_posix() for p in found] == ["index.html", "guide/a.htm"]


def test_run_html_preprocess_writes_markdown_tree(make_tree):
    checkout = make_tree({"site/index.html": PAGE, "site/guide/setup.html": "<main><p>Setup</p></main>"})
    out = run_preprocess(checkout, _repo({"type": "html"}, source_path="site"))

    assert out == (checkout / "docpup-build").resolve()
    assert (out / "index.md").read_text().startswith("# Install")
    assert (out / "guide" / "setup.md").read_text() == "Setup\n"


def test_run_html_preprocess_without_pages_fails(make_tree):
    checkout = make_tree({"site/readme.txt": "x"})
    with pytest.raises(PreprocessError, match="produced no markdown files for demo"):
        run_preprocess(checkout, _repo({"type": "html", "workDir": "site"}))


def test_output_dir_must_stay_inside_checkout(make_tree):
    checkout = make_tree({"site/index.html": PAGE})
    with pytest.raises(PreprocessError, match="escapes root"):
        run_preprocess(checkout, _repo({"type": "html", "workDir": "site", "outputDir": "../elsewhere"}))


def test_output_dir_must_not_contain_work_dir(make_tree):
    checkout = make_tree({"site/index.html": PAGE})
    with pytest.raises(PreprocessError, match="must not contain workDir"):
        run_preprocess(checkout, _repo({"type": "html", "workDir": "site", "outputDir": "."}))


def test_no_directive_returns_checkout_root(tmp_path):
    repo = RepoConfig(name="plain", repo="https://x/y", source_path="docs")
    assert run_preprocess(tmp_path, repo) == tmp_path.resolve()


# ------------------------------ Sphinx ------------------------------


def test_sphinx_invokes_markdown_builder(make_tree, monkeypatch):
    checkout = make_tree({"docs/conf.py": "", "docs/index.rst": "Title\n====="})
    calls = []

    def fake_run(cmd, cwd=None, **kwargs):
        calls.append((cmd, cwd))
        (Path(cwd) / cmd[-1] / "index.md").write_text("# Title\n")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr("docpup.services.preprocess.subprocess.run", fake_run)
    out = run_preprocess(checkout, _repo({"type": "sphinx"}), python_bin="python3")

    assert calls == [(["python3", "-m", "sphinx", "-b", "markdown", "docs", "docpup-build"], str(checkout.resolve()))]
    assert (out / "index.md").is_file()


def test_sphinx_missing_module_gets_install_hint(make_tree, monkeypatch):
    checkout = make_tree({"docs/conf.py": ""})

    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, "", "/usr/bin/python: No module named sphinx\n")

    monkeypatch.setattr("docpup.services.preprocess.subprocess.run", fake_run)
    with pytest.raises(PreprocessError, match="Sphinx is not installed"):
        run_preprocess(checkout, _repo({"type": "sphinx"}))


def test_sphinx_missing_interpreter(make_tree, monkeypatch):
    checkout = make_tree({"docs/conf.py": ""})

    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr("docpup.services.preprocess.subprocess.run", fake_run)
    with pytest.raises(PreprocessError, match="Python not found"):
        run_preprocess(checkout, _repo({"type": "sphinx"}))


def test_sphinx_rejects_other_builders(make_tree):
    checkout = make_tree({"docs/conf.py": ""})
    with pytest.raises(PreprocessError, match="Unsupported sphinx builder: html"):
        run_preprocess(checkout, _repo({"type": "sphinx", "builder": "html"}))


def test_sphinx_missing_work_dir(make_tree):
    checkout = make_tree({"README.md": ""})
    with pytest.raises(PreprocessError, match="Sphinx workDir not found"):
        run_preprocess(checkout, _repo({"type": "sphinx", "workDir": "docs/source"}))


def test_format_sphinx_failure_messages():
    assert "Markdown builder is unavailable" in format_sphinx_failure(
        "sphinx.errors.SphinxError: Builder name markdown not registered", "failed"
    )
    assert format_sphinx_failure("", "spawn python ENOENT").startswith("Python not found")
    assert format_sphinx_failure("some other error", "Command failed (2)") == "Command failed (2)"


def test_explicit_selector_ignores_sibling_main():
    raw = "<body><main><p>from main</p></main><article><h1>Intro</h1></article></body>"
    md = html_to_markdown(raw, selector="article")
    assert md == "# Intro\n"


def test_page_without_body_drops_head_text():
    raw = "<html><head><title>Site Title</title><meta charset='utf-8'></head><p>body text</p></html>"
    md = html_to_markdown(raw)
    assert "Site Title" not in md
    assert md == "body text\n"
