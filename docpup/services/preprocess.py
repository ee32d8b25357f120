# SPDX-License-Identifier: Apache-2.0
"""
Preprocessing: turn non-Markdown documentation into a directory of .md files
that the scanner can pick up.

Two directive kinds:
- sphinx: run `python -m sphinx -b markdown <workDir> <outputDir>` (needs
  sphinx and sphinx-markdown-builder in that interpreter)
- html: convert every .html/.htm page under workDir with BeautifulSoup +
  markdownify, keeping only the main content region and rewriting links
  between pages to their .md counterparts

Both resolve workDir/outputDir inside the checkout root, wipe outputDir
first, and return its absolute path.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Tag
from markdownify import ATX, MarkdownConverter

from ..errors import PreprocessError
from ..models.config import HtmlPreprocess, RepoConfig, SphinxPreprocess
from ..utils.fs import is_under, recreate_dir, relative_posix, resolve_inside

log = logging.getLogger("docpup.services.preprocess")

CONTENT_CANDIDATES = ("main", "article", "#content", ".content", ".document", "body")
HTML_EXTENSIONS = (".html", ".htm")

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_CODE_CLASS_PREFIXES = ("language-", "lang-", "highlight-")


# ------------------------------ Path helpers ------------------------------


def _resolve_dirs(
    checkout_root: Path,
    repo: RepoConfig,
    directive: Union[SphinxPreprocess, HtmlPreprocess],
) -> Tuple[Path, Path]:
    work_dir = directive.work_dir or repo.single_source_path()
    try:
        resolved_work = resolve_inside(checkout_root, work_dir)
        resolved_out = resolve_inside(checkout_root, directive.output_dir)
    except PermissionError as e:
        raise PreprocessError(f"Repo {repo.name}: {e}") from e
    if is_under(resolved_work, resolved_out):
        raise PreprocessError(
            f"Repo {repo.name}: outputDir {directive.output_dir!r} must not contain workDir {work_dir!r}"
        )
    return resolved_work, resolved_out


# --------------------------------- Sphinx ---------------------------------


def format_sphinx_failure(stderr: str, message: str, missing_interpreter: bool = False) -> str:
    """
    Map a failed sphinx invocation to a remediation hint; unknown failures
    keep their raw message.
    """
    combined = f"{stderr}\n{message}".lower()

    if missing_interpreter or "enoent" in combined:
        return 'Python not found. Install Python 3 and ensure "python" is on PATH.'

    if "no module named" in combined and ("sphinx" in combined or "sphinx_markdown_builder" in combined):
        return "Sphinx is not installed. Run: python -m pip install sphinx sphinx-markdown-builder"

    if "builder name" in combined and "markdown" in combined:
        return (
            "Markdown builder is unavailable. Install sphinx-markdown-builder "
            "and ensure it is accessible to Sphinx."
        )

    return message


def run_sphinx_preprocess(
    checkout_root: Path,
    repo: RepoConfig,
    directive: SphinxPreprocess,
    python_bin: str = "python",
) -> Path:
    if directive.builder != "markdown":
        raise PreprocessError(f'Unsupported sphinx builder: {directive.builder}. Only "markdown" is allowed.')

    work_dir, output_dir = _resolve_dirs(checkout_root, repo, directive)
    if not work_dir.is_dir():
        raise PreprocessError(f"Sphinx workDir not found: {work_dir}")

    recreate_dir(output_dir)

    cmd = [
        python_bin,
        "-m",
        "sphinx",
        "-b",
        "markdown",
        relative_posix(work_dir, checkout_root) or ".",
        relative_posix(output_dir, checkout_root) or ".",
    ]
    log.info("Running sphinx", extra={"repo": repo.name, "cmd": cmd})
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(checkout_root),
            check=False,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        detail = format_sphinx_failure("", str(e), missing_interpreter=True)
        raise PreprocessError(f"Sphinx preprocess failed for {repo.name}: {detail}") from e

    if proc.returncode != 0:
        message = f"Command failed ({proc.returncode}): $ {' '.join(cmd)}\n{(proc.stderr or proc.stdout).strip()}"
        detail = format_sphinx_failure(proc.stderr or "", message)
        raise PreprocessError(f"Sphinx preprocess failed for {repo.name}: {detail}")

    return output_dir


# ---------------------------------- HTML ----------------------------------


def rewrite_href(href: str) -> Optional[str]:
    """
    "guide.html#x" -> "guide.md#x". Returns None when the link should be
    left untouched: empty, fragment-only, protocol-relative, has a scheme,
    or does not point at an .html/.htm page.
    """
    trimmed = href.strip()
    if not trimmed or trimmed.startswith("#") or trimmed.startswith("//"):
        return None
    if _SCHEME_RE.match(trimmed):
        return None

    path_part, hash_sep, fragment = trimmed.partition("#")
    path_part, query_sep, query = path_part.partition("?")
    if not path_part:
        return None

    lowered = path_part.lower()
    for ext in HTML_EXTENSIONS:
        if lowered.endswith(ext):
            new_path = path_part[: -len(ext)] + ".md"
            return f"{new_path}{query_sep}{query}{hash_sep}{fragment}"
    return None


def select_content(soup: BeautifulSoup, selector: Optional[str] = None) -> Tag:
    """
    Pick the main content element: explicit selector, then the usual
    documentation containers, then <body>. Pages that omit <body> fall
    back to the document with <head> removed.
    """
    if selector:
        found = soup.select_one(selector)
        if found is not None:
            return found
    for candidate in CONTENT_CANDIDATES:
        found = soup.select_one(candidate)
        if found is not None:
            return found
    # html.parser does not synthesize <body> the way browsers do
    if soup.head is not None:
        soup.head.decompose()
    return soup.html or soup


def collect_html_files(root_dir: Path, skip_dir: Optional[Path] = None) -> List[Path]:
    """
    Every .html/.htm file under `root_dir`, skipping hidden directories and
    the `skip_dir` subtree.
    """
    results: List[Path] = []
    pending = [root_dir]
    while pending:
        current = pending.pop()
        if skip_dir is not None and is_under(current, skip_dir):
            continue
        with os.scandir(current) as it:
            entries = sorted(it, key=lambda e: e.name)
        subdirs = []
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if not entry.name.startswith("."):
                    subdirs.append(Path(entry.path))
            elif entry.is_file() and os.path.splitext(entry.name)[1].lower() in HTML_EXTENSIONS:
                results.append(Path(entry.path))
        pending.extend(reversed(subdirs))
    return results


def _code_language(el: Tag) -> str:
    # <pre class="language-py">, <pre><code class="language-py">, or Sphinx's
    # <div class="highlight-python"><div class="highlight"><pre>
    nodes = [el, el.find("code"), el.parent, el.parent.parent if el.parent is not None else None]
    for node in nodes:
        if not isinstance(node, Tag):
            continue
        for cls in node.get("class") or []:
            for prefix in _CODE_CLASS_PREFIXES:
                if cls.startswith(prefix) and len(cls) > len(prefix):
                    return cls[len(prefix):]
    return ""


def _converter() -> MarkdownConverter:
    return MarkdownConverter(
        heading_style=ATX,
        bullets="-",
        code_language_callback=_code_language,
        table_infer_header=True,
    )


def html_to_markdown(raw: str, selector: Optional[str] = None, rewrite_links: bool = True) -> str:
    soup = BeautifulSoup(raw, "html.parser")
    selection = select_content(soup, selector)

    for tag in selection.find_all(["script", "style"]):
        tag.decompose()

    if rewrite_links:
        anchors = selection.find_all("a", href=True)
        if selection.name == "a" and selection.has_attr("href"):
            anchors.insert(0, selection)
        for a in anchors:
            rewritten = rewrite_href(a["href"])
            if rewritten:
                a["href"] = rewritten

    markdown = _converter().convert(selection.decode_contents())
    return markdown.strip() + "\n"


def _no_markdown(repo: RepoConfig) -> PreprocessError:
    return PreprocessError(f"HTML preprocess produced no markdown files for {repo.name}. Check workDir and outputDir.")


def run_html_preprocess(checkout_root: Path, repo: RepoConfig, directive: HtmlPreprocess) -> Path:
    work_dir, output_dir = _resolve_dirs(checkout_root, repo, directive)
    if not work_dir.is_dir():
        raise PreprocessError(f"HTML workDir not found: {work_dir}")

    recreate_dir(output_dir)

    html_files = collect_html_files(work_dir, skip_dir=output_dir)
    if not html_files:
        raise _no_markdown(repo)

    written = 0
    for file_path in html_files:
        try:
            raw = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            log.warning("Skipping unreadable HTML file", extra={"path": str(file_path), "error": str(e)})
            continue
        markdown = html_to_markdown(raw, directive.selector, directive.rewrite_links)

        target = output_dir / file_path.relative_to(work_dir).with_suffix(".md")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(markdown, encoding="utf-8")
        written += 1

    if written == 0:
        raise _no_markdown(repo)

    log.info("Converted HTML pages", extra={"repo": repo.name, "written": written})
    return output_dir


# -------------------------------- Dispatch --------------------------------


def run_preprocess(checkout_root: Path | str, repo: RepoConfig, python_bin: str = "python") -> Path:
    """
    Run the repo's preprocess directive and return the directory to scan.
    Without a directive the checkout root itself is returned.
    """
    root = Path(checkout_root).resolve()
    directive = repo.preprocess
    if directive is None:
        return root
    if isinstance(directive, SphinxPreprocess):
        return run_sphinx_preprocess(root, repo, directive, python_bin=python_bin)
    if isinstance(directive, HtmlPreprocess):
        return run_html_preprocess(root, repo, directive)
    raise PreprocessError(f"Unsupported preprocess type: {getattr(directive, 'type', directive)!r}")
