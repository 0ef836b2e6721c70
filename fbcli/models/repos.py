"""Repository fleet models: handles, per-repository status and fleet reports."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DETACHED_HEAD = "(detached)"


class RepositoryHandle(BaseModel):
    """A discovered working copy. Immutable after discovery."""

    model_config = ConfigDict(frozen=True)

    path: Path
    name: str
    remote_url: Optional[str] = None
    error: Optional[str] = Field(
        default=None,
        description="Why git could not identify the working copy during discovery",
    )


class RepositoryStatus(BaseModel):
    """Branch, cleanliness and upstream divergence of one working copy."""

    handle: RepositoryHandle
    branch: str = DETACHED_HEAD
    dirty: bool = False
    ahead: int = Field(default=0, ge=0)
    behind: int = Field(default=0, ge=0)
    no_upstream: bool = False
    upstream: Optional[str] = Field(
        default=None,
        description='Upstream ref in short form, e.g. "origin/main"',
    )
    error: Optional[str] = None

    @property
    def detached(self) -> bool:
        return self.branch == DETACHED_HEAD

    @property
    def diverged(self) -> bool:
        return self.ahead > 0 and self.behind > 0


class OutcomeKind(str, Enum):
    listed = "listed"
    ok = "ok"
    up_to_date = "up_to_date"
    updated = "updated"
    would_update = "would_update"
    skipped_dirty = "skipped_dirty"
    skipped_diverged = "skipped_diverged"
    no_upstream = "no_upstream"
    error = "error"


class RepositoryOutcome(BaseModel):
    """Result of one fleet operation for one repository."""

    handle: RepositoryHandle
    kind: OutcomeKind
    status: Optional[RepositoryStatus] = None
    detail: str = ""
    error: Optional[str] = None
    public: Optional[bool] = None

    @property
    def name(self) -> str:
        return self.handle.name

    @property
    def is_error(self) -> bool:
        return self.kind == OutcomeKind.error


class FleetReport(BaseModel):
    """Ordered per-repository outcomes of one fleet command."""

    model_config = ConfigDict(frozen=True)

    operation: str
    root: Path
    dry_run: bool = False
    entries: list[RepositoryOutcome] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(1 for e in self.entries if e.is_error)

    @property
    def succeeded(self) -> int:
        return len(self.entries) - self.failed

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def names(self) -> list[str]:
        return [e.name for e in self.entries]
