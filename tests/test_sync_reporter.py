"""Tests for outcome formatting functions.

Covers:
- format_outcome for completed, failed, and cancelled passes
- Verbose listing of refreshed, skipped, and failed files
- outcome_to_json structure and completeness
- JobOutcome convenience properties and summary()
"""

from __future__ import annotations

from issue_sync.core.errors import ConnectivityError, ErrorKind
from issue_sync.sync.models import FileAction, FileResult, JobOutcome, JobStatus
from issue_sync.sync.reporter import format_outcome, outcome_to_json

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_outcome(
    results: list[FileResult] | None = None,
    status: JobStatus = JobStatus.COMPLETED,
    **kwargs,
) -> JobOutcome:
    """Build a JobOutcome with sensible defaults."""
    return JobOutcome(
        status=status,
        results=tuple(results or []),
        started_at="2026-10-01T12:00:00+00:00",
        completed_at="2026-10-01T12:00:05+00:00",
        **kwargs,
    )


def _result(
    action: FileAction,
    path: str = "src/a.py",
    issues: int = 0,
    error: str | None = None,
    error_kind: ErrorKind | None = None,
) -> FileResult:
    return FileResult(
        path=path, action=action, issues=issues, error=error, error_kind=error_kind
    )


MIXED = [
    _result(FileAction.REFRESHED, "src/a.py", issues=2),
    _result(FileAction.REFRESHED, "src/b.py", issues=1),
    _result(FileAction.UP_TO_DATE, "src/c.py"),
    _result(FileAction.SKIPPED, "src/d.py"),
    _result(
        FileAction.FAILED,
        "src/e.py",
        error="Connection refused",
        error_kind=ErrorKind.CONNECTIVITY,
    ),
]


# ---------------------------------------------------------------------------
# format_outcome
# ---------------------------------------------------------------------------


class TestFormatOutcome:
    def test_completed_summary_line(self):
        text = format_outcome(_make_outcome(MIXED))
        assert text == (
            "Synchronized 5 files: 2 refreshed (3 issues), 1 up to date"
        )

    def test_completed_stays_quiet_about_absorbed_failures(self):
        assert "e.py" not in format_outcome(_make_outcome(MIXED))

    def test_verbose_lists_details(self):
        text = format_outcome(_make_outcome(MIXED), verbose=True)

        assert "Refreshed:" in text
        assert "  src/a.py: 2 issue(s)" in text
        assert "Skipped: 1 files (busy)" in text
        assert "Not synchronized:" in text
        assert "  src/e.py: Connection refused" in text

    def test_failed_names_cause_and_hint(self):
        cause = ConnectivityError("Connection refused", "https://x")
        outcome = _make_outcome(
            status=JobStatus.FAILED,
            message="Unable to contact issue server",
            error_kind=ErrorKind.CONNECTIVITY,
            cause=cause,
            force=True,
        )

        lines = format_outcome(outcome).splitlines()

        assert lines[0] == (
            "Synchronization failed: Unable to contact issue server"
        )
        assert lines[1] == "  Cause: Connection refused (https://x)"
        assert "issue server settings" in lines[2]

    def test_failed_without_kind_uses_generic_hint(self):
        outcome = _make_outcome(status=JobStatus.FAILED, message="boom")
        assert "--debug" in format_outcome(outcome)

    def test_cancelled(self):
        outcome = _make_outcome(MIXED, status=JobStatus.CANCELLED)
        assert format_outcome(outcome) == "Synchronization cancelled."


# ---------------------------------------------------------------------------
# outcome_to_json
# ---------------------------------------------------------------------------


class TestOutcomeToJson:
    def test_counts(self):
        data = outcome_to_json(_make_outcome(MIXED))

        assert data["status"] == "completed"
        assert data["counts"] == {
            "total": 5,
            "refreshed": 2,
            "up_to_date": 1,
            "skipped": 1,
            "failed": 1,
        }
        assert "error_kind" not in data

    def test_results(self):
        results = outcome_to_json(_make_outcome(MIXED))["results"]

        assert results[0] == {"path": "src/a.py", "action": "refreshed", "issues": 2}
        assert results[4]["error"] == "Connection refused"
        assert results[4]["error_kind"] == "connectivity"

    def test_failure_fields(self):
        outcome = _make_outcome(
            status=JobStatus.FAILED,
            message="Unable to contact issue server",
            error_kind=ErrorKind.CONNECTIVITY,
            cause=ConnectivityError("down"),
        )

        data = outcome_to_json(outcome)

        assert data["error_kind"] == "connectivity"
        assert data["cause"] == "down"
        assert data["started_at"] == "2026-10-01T12:00:00+00:00"


# ---------------------------------------------------------------------------
# JobOutcome helpers
# ---------------------------------------------------------------------------


class TestJobOutcome:
    def test_properties(self):
        outcome = _make_outcome(MIXED)

        assert outcome.ok
        assert [r.path for r in outcome.refreshed] == ["src/a.py", "src/b.py"]
        assert len(outcome.up_to_date) == 1
        assert len(outcome.skipped) == 1
        assert len(outcome.failed_files) == 1

    def test_failed_is_not_ok(self):
        assert not _make_outcome(status=JobStatus.FAILED).ok

    def test_summary(self):
        summary = _make_outcome(MIXED, force=True).summary()

        assert summary.splitlines()[0] == "Synchronization completed (forced)"
        assert "Refreshed:  2" in summary
        assert "Total:      5" in summary
