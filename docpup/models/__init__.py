# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

# Re-export commonly used models for convenience
from .config import (
    ContentType,
    DocpupConfig,
    GitignoreConfig,
    HtmlPreprocess,
    PreprocessDirective,
    RepoConfig,
    ScanConfig,
    ScanOverride,
    SphinxPreprocess,
)
from .results import CheckoutResult, GenerateSummary, RepoFailure

__all__ = [
    "ContentType",
    "DocpupConfig",
    "GitignoreConfig",
    "HtmlPreprocess",
    "PreprocessDirective",
    "RepoConfig",
    "ScanConfig",
    "ScanOverride",
    "SphinxPreprocess",
    "CheckoutResult",
    "GenerateSummary",
    "RepoFailure",
]
