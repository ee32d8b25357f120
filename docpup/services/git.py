# SPDX-License-Identifier: Apache-2.0
"""
Shallow, sparse retrieval of selected paths from a remote git repository.

Failures are returned as a CheckoutResult (ok=False, error=reason) rather
than raised, so one unreachable remote never aborts a whole run.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from ..models.results import CheckoutResult
from ..utils.fs import resolve_inside

log = logging.getLogger("docpup.services.git")


# ------------------------------ Git helpers ------------------------------


def _safe_git_url(url: str) -> str:
    s = url.strip()
    if not s:
        raise ValueError("Empty repository URL.")
    if s.startswith("-"):
        raise ValueError(f"Refusing repository URL that looks like an option: {s}")
    return s


def _sparse_pattern(source_path: str) -> Optional[str]:
    """Non-cone sparse pattern for a repo-relative path; None means the whole repo."""
    p = source_path.strip().replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    p = p.strip("/")
    if not p or p == ".":
        return None
    return f"/{p}"


def _run_git(git_bin: str, args: List[str], cwd: Path) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    # never block on credential prompts
    env["GIT_TERMINAL_PROMPT"] = "0"
    return subprocess.run(
        [git_bin, *args],
        cwd=str(cwd),
        check=False,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        env=env,
    )


def _describe_failure(args: List[str], proc: subprocess.CompletedProcess) -> str:
    detail = (proc.stderr or proc.stdout or "").strip()
    if detail:
        return detail.splitlines()[-1]
    return f"git {args[0]} failed with exit code {proc.returncode}"


# ------------------------------ Public API ------------------------------


def sparse_checkout_repo(
    repo_url: str,
    source_paths: Sequence[str],
    ref: Optional[str],
    temp_dir: Path | str,
    git_bin: str = "git",
) -> CheckoutResult:
    """
    Fetch `source_paths` of `repo_url` at `ref` (default branch when None)
    into `temp_dir` with depth 1.

    Returns one local path per requested source path, in order.
    """
    dest = Path(temp_dir)
    try:
        url = _safe_git_url(repo_url)
    except ValueError as e:
        return CheckoutResult.failure(str(e))

    patterns = [_sparse_pattern(p) for p in source_paths]
    sparse = bool(patterns) and all(p is not None for p in patterns)

    def step(*args: str) -> Optional[str]:
        proc = _run_git(git_bin, list(args), dest)
        return _describe_failure(list(args), proc) if proc.returncode != 0 else None

    log.info("Fetching repo", extra={"url": url, "ref": ref or "HEAD", "paths": list(source_paths)})
    try:
        error = step("init", "--quiet") or step("remote", "add", "origin", url)
        if not error and sparse:
            error = step("config", "core.sparseCheckout", "true") or step("config", "core.sparseCheckoutCone", "false")
            if not error:
                info = dest / ".git" / "info"
                info.mkdir(parents=True, exist_ok=True)
                (info / "sparse-checkout").write_text("\n".join(patterns) + "\n", encoding="utf-8")
        if not error:
            error = step("fetch", "--quiet", "--depth", "1", "--filter=blob:none", "origin", ref or "HEAD")
        if not error:
            error = step("checkout", "--quiet", "FETCH_HEAD")
        if error:
            return CheckoutResult.failure(error)
        rev = _run_git(git_bin, ["rev-parse", "HEAD"], dest)
    except FileNotFoundError:
        return CheckoutResult.failure(f"git not found. Install git and ensure '{git_bin}' is on PATH.")

    commit = rev.stdout.strip() if rev.returncode == 0 else None

    local_paths: List[str] = []
    for source_path in source_paths:
        try:
            local = resolve_inside(dest, source_path)
        except PermissionError as e:
            return CheckoutResult.failure(str(e))
        if not local.exists():
            return CheckoutResult.failure(f"Path not found in repository: {source_path}")
        local_paths.append(str(local))

    log.info("Checked out repo", extra={"url": url, "commit": commit})
    return CheckoutResult(ok=True, checkout_paths=local_paths, ref=commit)
