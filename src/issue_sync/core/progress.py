"""Progress reporting and cooperative cancellation for sync jobs.

The job reports one unit of work per top-level resource and polls
``is_cancelled()`` between units of work.  ``cancel()`` is thread-safe so
a host can stop a pass that runs on a worker thread.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

logger = logging.getLogger(__name__)


class ProgressMonitor(Protocol):
    """Progress and cancellation capability supplied by the host."""

    def begin_task(self, label: str, total: int) -> None: ...

    def worked(self, units: int) -> None: ...

    def sub_task(self, label: str) -> None: ...

    def is_cancelled(self) -> bool: ...

    def done(self) -> None: ...


class NullProgressMonitor:
    """Monitor that records progress without displaying it.

    Attributes:
        label: Label passed to ``begin_task``.
        total: Total units of work announced.
        completed: Units of work reported so far.
        current: Most recent sub-task label.
        finished: Number of ``done()`` calls received.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self.label = ""
        self.total = 0
        self.completed = 0
        self.current: str | None = None
        self.finished = 0

    def begin_task(self, label: str, total: int) -> None:
        self.label = label
        self.total = total
        self.completed = 0

    def worked(self, units: int) -> None:
        self.completed += units

    def sub_task(self, label: str) -> None:
        self.current = label

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Request cancellation; observed at the next polling point."""
        self._cancelled.set()

    def done(self) -> None:
        self.finished += 1


class LoggingProgressMonitor(NullProgressMonitor):
    """Monitor that also writes progress to the module logger."""

    def begin_task(self, label: str, total: int) -> None:
        super().begin_task(label, total)
        logger.info("%s: %d resource(s)", label, total)

    def worked(self, units: int) -> None:
        super().worked(units)
        logger.debug(
            "%s: %d/%d", self.label, self.completed, self.total
        )

    def sub_task(self, label: str) -> None:
        super().sub_task(label)
        logger.info("  %s", label)

    def cancel(self) -> None:
        super().cancel()
        logger.info("%s: cancellation requested", self.label)
