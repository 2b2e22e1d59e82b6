"""Pydantic models for synchronization passes.

Defines the data contracts shared across the sync modules:

- ``SyncRequest``: Immutable input of one pass.
- ``Annotation``: Local materialization of one remote issue.
- ``RefreshMetadata``: Per-file record of the last reconciliation.
- ``FileAction`` / ``FileResult``: Outcome of one file.
- ``JobStatus`` / ``JobOutcome``: Aggregate outcome of a pass.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from ..core.errors import ErrorKind
from ..remote.models import Issue


class SyncRequest(BaseModel):
    """Input of one synchronization pass.

    Attributes:
        resources: Top-level resources, all belonging to one project.
        force: ``True`` for user-initiated passes (strict error
            visibility), ``False`` for automatic ones (best effort).
        recursive_visit: Whether containers are descended into.
        label: Task label reported to the progress monitor.
    """

    resources: tuple[Any, ...]
    force: bool = False
    recursive_visit: bool = True
    label: str = "Synchronize"

    model_config = {"frozen": True}


class Annotation(BaseModel):
    """A local, file-scoped marker for one remote issue."""

    issue_key: str
    line: int | None = None
    message: str = ""
    severity: str = "major"
    rule: str | None = None
    created_at: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_issue(cls, issue: Issue, created_at: str | None = None) -> Annotation:
        return cls(
            issue_key=issue.key,
            line=issue.line,
            message=issue.message,
            severity=issue.severity,
            rule=issue.rule,
            created_at=created_at,
        )


class RefreshMetadata(BaseModel):
    """What a file's annotations were computed from.

    Attributes:
        server_id: Identity of the server the issues came from.
        server_version: Server analysis version at that time.
        synced_at: Timezone-aware UTC time of the reconciliation.
    """

    server_id: str
    server_version: str
    synced_at: datetime

    model_config = {"frozen": True}


class FileAction(str, Enum):
    """What happened to one file during a pass."""

    REFRESHED = "refreshed"
    UP_TO_DATE = "up_to_date"
    SKIPPED = "skipped"
    FAILED = "failed"


class FileResult(BaseModel):
    """Result of processing one file.

    Attributes:
        path: Project-relative path of the file.
        action: What happened.
        issues: Number of annotations created (``REFRESHED`` only).
        error: Description of an absorbed failure.
        error_kind: Classification of the absorbed failure.
    """

    path: str
    action: FileAction
    issues: int = 0
    error: str | None = None
    error_kind: ErrorKind | None = None

    model_config = {"frozen": True}


class JobStatus(str, Enum):
    """Terminal state of a pass."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class JobOutcome(BaseModel):
    """Aggregate outcome of a pass, produced exactly once per run.

    Attributes:
        status: Terminal state.
        message: Short description (the failure message for ``FAILED``).
        error_kind: Classification of the failure for ``FAILED``.
        cause: The exception behind a ``FAILED`` outcome.
        force: Whether the pass was forced.
        results: Per-file results in processing order.
        started_at: ISO 8601 timestamp when the pass started.
        completed_at: ISO 8601 timestamp when the pass ended.
    """

    status: JobStatus
    message: str = ""
    error_kind: ErrorKind | None = None
    cause: BaseException | None = None
    force: bool = False
    results: tuple[FileResult, ...] = ()
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def ok(self) -> bool:
        return self.status != JobStatus.FAILED

    @property
    def refreshed(self) -> list[FileResult]:
        """Results where action is REFRESHED."""
        return [r for r in self.results if r.action == FileAction.REFRESHED]

    @property
    def up_to_date(self) -> list[FileResult]:
        """Results where action is UP_TO_DATE."""
        return [r for r in self.results if r.action == FileAction.UP_TO_DATE]

    @property
    def skipped(self) -> list[FileResult]:
        """Results where action is SKIPPED."""
        return [r for r in self.results if r.action == FileAction.SKIPPED]

    @property
    def failed_files(self) -> list[FileResult]:
        """Results where action is FAILED (absorbed per-file errors)."""
        return [r for r in self.results if r.action == FileAction.FAILED]

    def summary(self) -> str:
        """Format a human-readable summary of the pass.

        Returns:
            Multi-line summary string with counts by action.
        """
        lines = [
            f"Synchronization {self.status.value}"
            + (" (forced)" if self.force else ""),
            f"  Refreshed:  {len(self.refreshed)}",
            f"  Up to date: {len(self.up_to_date)}",
            f"  Skipped:    {len(self.skipped)}",
            f"  Failed:     {len(self.failed_files)}",
            f"  Total:      {len(self.results)}",
        ]
        return "\n".join(lines)
