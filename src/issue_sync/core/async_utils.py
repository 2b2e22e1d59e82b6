"""Async utilities for running blocking sync passes from async hosts."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable, TypeVar

if TYPE_CHECKING:
    from ..sync.job import SynchronizationJob
    from ..sync.models import JobOutcome, SyncRequest
    from .progress import ProgressMonitor

T = TypeVar("T")
logger = logging.getLogger(__name__)


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def run_job(
    job: SynchronizationJob,
    request: SyncRequest,
    monitor: ProgressMonitor | None = None,
) -> JobOutcome:
    """Run one synchronization pass on a worker thread.

    The pass itself stays sequential; only the caller's event loop is
    kept free.  ``job.run()`` never raises, so neither does this.

    Example:
        outcome = await run_job(job, SyncRequest(resources=(root,), force=True))
    """
    logger.debug(
        "Scheduling sync of %d resource(s) on a worker thread",
        len(request.resources),
    )
    return await run_sync(job.run, request, monitor)
