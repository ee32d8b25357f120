# SPDX-License-Identifier: Apache-2.0
"""
docpup

Fetches documentation folders from remote git repositories, optionally
converts Sphinx/HTML sources to Markdown, and writes compact one-line
indexes for coding agents.
"""
from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
