# SPDX-License-Identifier: Apache-2.0
"""
Command line entry point.

    docpup [generate] [-c PATH] [--only a,b] [--concurrency N] [--log-level LEVEL]
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import Settings
from .errors import ConfigError
from .logging import setup_logging
from .services.generate import generate_docs
from .services.progress import ConsoleProgress

COMMANDS = ("generate",)


def _add_generate_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-c", "--config", default=None, help="Path to config file")
    p.add_argument("--only", default=None, help="Comma-separated list of repo names to process")
    p.add_argument("--concurrency", default=None, help="Number of repos to process in parallel")
    p.add_argument("--log-level", default=None, help="Log level (default: $DOCPUP_LOG_LEVEL or INFO)")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="docpup",
        description="Fetch GitHub documentation and generate compact AGENTS.md-style indexes",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="command")
    gen = sub.add_parser("generate", help="Fetch docs and generate indexes")
    _add_generate_args(gen)
    return ap


def _normalize_argv(argv: List[str]) -> List[str]:
    # `generate` is the default command
    if any(a in ("-h", "--help", "--version") for a in argv[:1]):
        return argv
    if argv and argv[0] in COMMANDS:
        return argv
    return ["generate", *argv]


def run_generate(args: argparse.Namespace, settings: Settings) -> int:
    try:
        generate_docs(
            config_path=args.config,
            only=args.only,
            concurrency=args.concurrency,
            progress=ConsoleProgress(),
            settings=settings,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    # per-repo failures are listed by ConsoleProgress, not fatal
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    raw = list(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(_normalize_argv(raw))

    settings = Settings()
    setup_logging(args.log_level or settings.LOG_LEVEL, json=settings.LOG_JSON)

    if args.command == "generate":
        return run_generate(args, settings)
    build_parser().print_help(sys.stderr)
    return 1
