"""Error taxonomy for synchronization passes.

Failures are classified by an explicit ``kind`` discriminant rather than
by matching on exception types at every call site:

- ``CONNECTIVITY`` -- the remote issue server could not be reached.
  Absorbed for automatic runs, escalated for forced runs.
- ``LOCAL_RECONCILIATION`` -- deleting/creating annotations or persisting
  refresh metadata failed for one file.  Always absorbed per file.
- ``UNCLASSIFIED`` -- anything else.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failure raised during a sync pass."""

    CONNECTIVITY = "connectivity"
    LOCAL_RECONCILIATION = "local_reconciliation"
    UNCLASSIFIED = "unclassified"


class SyncError(Exception):
    """Base class for classified sync failures.

    Args:
        message: Human-readable description.
        resource: Name of the resource involved, if any.
    """

    kind: ErrorKind = ErrorKind.UNCLASSIFIED

    def __init__(self, message: str, resource: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.resource = resource

    def __str__(self) -> str:
        if self.resource:
            return f"{self.message} ({self.resource})"
        return self.message


class ConnectivityError(SyncError):
    """The remote issue server is unreachable (network, auth, outage)."""

    kind = ErrorKind.CONNECTIVITY


class LocalReconciliationError(SyncError):
    """Replacing a file's annotations or its refresh metadata failed."""

    kind = ErrorKind.LOCAL_RECONCILIATION


def classify(exc: BaseException) -> ErrorKind:
    """Return the ``ErrorKind`` of *exc*.

    Exceptions outside the ``SyncError`` hierarchy are ``UNCLASSIFIED``.
    """
    match exc:
        case SyncError(kind=kind):
            return kind
        case _:
            return ErrorKind.UNCLASSIFIED
