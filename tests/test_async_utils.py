"""
Tests for async_utils module.

Covers run_sync and run_job.
"""

import threading

from issue_sync.core.async_utils import run_job, run_sync
from issue_sync.sync.models import JobStatus


def _sync_add(a: int, b: int) -> int:
    """Simple sync function for testing."""
    return a + b


async def test_run_sync_calls_function():
    """run_sync delegates to asyncio.to_thread with correct args."""
    result = await run_sync(_sync_add, 3, 4)
    assert result == 7


async def test_run_sync_passes_kwargs():
    """run_sync forwards keyword arguments."""

    def _kw_func(*, name: str) -> str:
        return f"hello {name}"

    result = await run_sync(_kw_func, name="world")
    assert result == "hello world"


async def test_run_sync_uses_worker_thread():
    """The callable does not run on the event loop thread."""
    main_thread = threading.get_ident()
    worker = await run_sync(threading.get_ident)
    assert worker != main_thread


async def test_run_job_returns_outcome(job, make_request):
    """run_job awaits a full pass and returns its outcome."""
    outcome = await run_job(job, make_request("src/a.py"))

    assert outcome.status == JobStatus.COMPLETED
    assert outcome.refreshed[0].path == "src/a.py"
