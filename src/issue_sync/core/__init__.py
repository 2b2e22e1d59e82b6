"""Shared building blocks: error taxonomy, progress, background execution."""

from .async_utils import run_job, run_sync
from .errors import (
    ConnectivityError,
    ErrorKind,
    LocalReconciliationError,
    SyncError,
    classify,
)
from .progress import (
    LoggingProgressMonitor,
    NullProgressMonitor,
    ProgressMonitor,
)

__all__ = [
    "ConnectivityError",
    "ErrorKind",
    "LocalReconciliationError",
    "LoggingProgressMonitor",
    "NullProgressMonitor",
    "ProgressMonitor",
    "SyncError",
    "classify",
    "run_job",
    "run_sync",
]
