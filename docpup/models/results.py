# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..errors import CheckoutError


class CheckoutResult(BaseModel):
    """
    Outcome of fetching a repository's source paths into a temp workspace.
    """
    ok: bool
    checkout_paths: List[str] = Field(default_factory=list, description="One local path per requested source path")
    ref: Optional[str] = Field(default=None, description="Resolved commit SHA if known")
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "CheckoutResult":
        return cls(ok=False, error=error)

    def raise_for_error(self) -> None:
        if not self.ok:
            raise CheckoutError(self.error or "checkout failed")


class RepoFailure(BaseModel):
    name: str
    error: str
    stage: Optional[str] = Field(default=None, description="Pipeline stage that failed, e.g. checkout")


class GenerateSummary(BaseModel):
    """
    Result of one `generate` run: { total, succeeded, failed, failures[] }.
    """
    total: int = Field(ge=0)
    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    failures: List[RepoFailure] = Field(default_factory=list)
