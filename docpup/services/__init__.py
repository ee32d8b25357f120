# SPDX-License-Identifier: Apache-2.0
"""Pipeline services: checkout, preprocess, scan, index, gitignore, generate."""
from __future__ import annotations

__all__ = []
