# SPDX-License-Identifier: Apache-2.0
"""
Orchestrator: fetch -> (preprocess) -> scan -> copy -> index, per repo.

Repositories run in a thread pool. A failing repository is recorded in the
summary and never stops its siblings; only configuration problems raise.
"""

from __future__ import annotations

import math
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

import structlog

from ..config import Settings, load_config
from ..errors import CheckoutError, ConfigError, PreprocessError
from ..models.config import DocpupConfig, RepoConfig
from ..models.results import CheckoutResult, GenerateSummary, RepoFailure
from ..utils.fs import (
    cleanup_path,
    ensure_dir,
    gitignore_dir_entry,
    recreate_dir,
    relative_posix,
    resolve_inside,
    temp_workspace,
)
from .git import sparse_checkout_repo
from .gitignore import update_gitignore
from .indexer import build_index, index_file_name
from .preprocess import run_preprocess
from .progress import NullProgress, ProgressReporter
from .scanner import DirectoryTree, merge_scan_config, scan_docs, scan_multiple_paths

log = structlog.get_logger("docpup.generate")

# (repo_url, source_paths, ref, temp_dir) -> CheckoutResult
CheckoutFn = Callable[[str, Sequence[str], Optional[str], Path], CheckoutResult]


class RepoStage(str, Enum):
    checkout = "checkout"
    preprocess = "preprocess"
    scan = "scan"
    copy = "copy"
    index = "index"
    succeeded = "succeeded"


# ------------------------------ Helpers ------------------------------


def parse_only(only: Optional[str]) -> List[str]:
    if not only:
        return []
    return [name.strip() for name in only.split(",") if name.strip()]


def resolve_concurrency(value: Any, default: int = 2) -> int:
    """Positive finite number -> int worker count; anything else -> default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        n = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(n) or n < 1:
        return default
    return int(n)


def copy_docs(source_root: Path, target_root: Path, tree: DirectoryTree) -> int:
    """
    Copy every file named in `tree` from `source_root` to `target_root`,
    keeping the relative layout. Targets outside `target_root` are refused.
    """
    copied = 0
    for directory, files in tree.items():
        source_dir = source_root / directory if directory else source_root
        target_dir = resolve_inside(target_root, directory) if directory else target_root
        target_dir.mkdir(parents=True, exist_ok=True)
        for name in files:
            target = resolve_inside(target_dir, name)
            shutil.copyfile(source_dir / name, target)
            copied += 1
    return copied


def gitignore_entries(
    config: DocpupConfig,
    repos: Sequence[RepoConfig],
    repo_root: Path,
    docs_root: Path,
    indices_root: Path,
) -> List[str]:
    entries: List[Optional[str]] = []
    if config.gitignore.add_docs_dir:
        entries.append(gitignore_dir_entry(repo_root, docs_root))
    if config.gitignore.add_docs_sub_dirs:
        entries.extend(gitignore_dir_entry(repo_root, docs_root / repo.name) for repo in repos)
    if config.gitignore.add_index_files:
        entries.append(gitignore_dir_entry(repo_root, indices_root))
    return [e for e in entries if e]


# ------------------------------ Run state ------------------------------


@dataclass
class _RunState:
    total: int
    started: int = 0
    completed: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: List[RepoFailure] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def summary(self) -> GenerateSummary:
        with self.lock:
            return GenerateSummary(
                total=self.total,
                succeeded=self.succeeded,
                failed=self.failed,
                failures=list(self.failures),
            )


@dataclass
class _RunContext:
    config: DocpupConfig
    settings: Settings
    repo_root: Path
    docs_root: Path
    indices_root: Path
    checkout: CheckoutFn
    progress: ProgressReporter
    state: _RunState


def _fail(ctx: _RunContext, repo: RepoConfig, stage: RepoStage, action: str, error: str) -> None:
    # the summary keeps the bare reason; the warning says what was being attempted
    with ctx.state.lock:
        ctx.state.failed += 1
        ctx.state.failures.append(RepoFailure(name=repo.name, error=error, stage=stage.value))
    log.warning("repo failed", repo=repo.name, stage=stage.value, error=error)
    ctx.progress.warn(f"failed to {action} {repo.name}: {error}")


def _process_repo(repo: RepoConfig, ctx: _RunContext) -> None:
    state = ctx.state
    with state.lock:
        state.started += 1
        started = state.started
    ctx.progress.repo_started(repo.name, started, state.total)

    stage = RepoStage.checkout
    temp_dir: Optional[Path] = None
    bound = log.bind(repo=repo.name)
    try:
        temp_dir = temp_workspace(prefix=ctx.settings.TMP_PREFIX)
        bound.debug("repo stage", stage=stage.value, workspace=str(temp_dir))
        checkout = ctx.checkout(repo.repo, repo.all_source_paths(), repo.ref, temp_dir)
        checkout.raise_for_error()

        scan_config = merge_scan_config(ctx.config.scan, repo.scan)
        if repo.preprocess is not None:
            stage = RepoStage.preprocess
            bound.debug("repo stage", stage=stage.value, kind=repo.preprocess.type)
            scan_root = run_preprocess(temp_dir, repo, python_bin=ctx.settings.PYTHON_BIN)
            stage = RepoStage.scan
            tree = scan_docs(scan_root, scan_config)
            if not tree:
                raise PreprocessError(
                    f"Preprocess produced no markdown files for {repo.name}. Check builder output and scan settings."
                )
        else:
            stage = RepoStage.scan
            scan_root = temp_dir
            tree = scan_multiple_paths(checkout.checkout_paths, scan_config, temp_dir)

        stage = RepoStage.copy
        output_repo_dir = resolve_inside(ctx.docs_root, repo.name)
        recreate_dir(output_repo_dir)
        copied = copy_docs(scan_root, output_repo_dir, tree)

        stage = RepoStage.index
        index = build_index(tree, repo.name, relative_posix(output_repo_dir, ctx.repo_root), repo.content_type)
        index_path = resolve_inside(ctx.indices_root, index_file_name(repo.name))
        index_path.parent.mkdir(parents=True, exist_ok=True)
        index_path.write_text(index, encoding="utf-8")

        with state.lock:
            state.succeeded += 1
        bound.info("repo done", stage=RepoStage.succeeded.value, files=copied, commit=checkout.ref)
    except CheckoutError as e:
        _fail(ctx, repo, stage, "clone", str(e))
    except Exception as e:
        _fail(ctx, repo, stage, "process", str(e))
    finally:
        with state.lock:
            state.completed += 1
            completed = state.completed
        ctx.progress.repo_finished(repo.name, completed, state.total)
        if temp_dir is not None:
            cleanup_path(temp_dir)


def _update_ignore(ctx: _RunContext, repos: Sequence[RepoConfig]) -> None:
    entries = gitignore_entries(ctx.config, repos, ctx.repo_root, ctx.docs_root, ctx.indices_root)
    if not entries:
        return
    try:
        update_gitignore(ctx.repo_root, entries, ctx.config.gitignore.section_header)
    except Exception as e:
        message = f"failed to update .gitignore: {e}"
        log.warning("gitignore update failed", error=str(e))
        ctx.progress.warn(message)


# ------------------------------ Public API ------------------------------


def generate_docs(
    config_path: Optional[str] = None,
    only: Optional[str] = None,
    concurrency: Any = None,
    cwd: Optional[Path | str] = None,
    checkout: Optional[CheckoutFn] = None,
    progress: Optional[ProgressReporter] = None,
    settings: Optional[Settings] = None,
) -> GenerateSummary:
    """
    Process every configured (or `only`-selected) repository.

    Raises ConfigError for a missing/invalid config or an `only` filter that
    matches nothing. Per-repository failures are reported in the summary.
    """
    progress = progress or NullProgress()
    repo_root = Path(cwd or Path.cwd()).resolve()
    # .env is read from the project root, same as the config file
    cfg = settings or Settings(_env_file=repo_root / ".env")
    config, _ = load_config(config_path, repo_root)

    repos = list(config.repos)
    only_names = parse_only(only)
    if only_names:
        wanted = set(only_names)
        repos = [repo for repo in repos if repo.name in wanted]
    if not repos:
        raise ConfigError("No repos matched the provided filter.")

    requested = concurrency if concurrency is not None else config.concurrency
    workers = resolve_concurrency(requested, default=cfg.DEFAULT_CONCURRENCY)

    docs_root = ensure_dir(repo_root / config.docs_dir)
    indices_root = ensure_dir(repo_root / config.indices_dir)

    ctx = _RunContext(
        config=config,
        settings=cfg,
        repo_root=repo_root,
        docs_root=docs_root,
        indices_root=indices_root,
        checkout=checkout or partial(sparse_checkout_repo, git_bin=cfg.GIT_BIN),
        progress=progress,
        state=_RunState(total=len(repos)),
    )

    log.info("generate started", repos=len(repos), concurrency=workers)
    progress.start(len(repos))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="docpup") as pool:
        futures = [pool.submit(_process_repo, repo, ctx) for repo in repos]
        # single writer for the shared ignore file, after every repo is scheduled
        _update_ignore(ctx, repos)
        for future in futures:
            future.result()

    summary = ctx.state.summary()
    log.info("generate finished", total=summary.total, succeeded=summary.succeeded, failed=summary.failed)
    progress.finish(summary)
    return summary
