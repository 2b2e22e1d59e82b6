"""Outcome formatting functions.

Provides human-readable and machine-readable output for a pass:

- ``format_outcome`` -- text for the person or host that ran the pass.
- ``outcome_to_json`` -- structured dict for JSON output.

A completed pass stays quiet about absorbed per-file failures unless
``verbose`` is set; a failed pass always names its cause.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.errors import ErrorKind
from .models import JobStatus

if TYPE_CHECKING:
    from .models import JobOutcome

_HINTS: dict[ErrorKind, str] = {
    ErrorKind.CONNECTIVITY: (
        "Check the issue server settings and network access, then retry."
    ),
    ErrorKind.LOCAL_RECONCILIATION: (
        "Check that the project state directory is writable, then retry."
    ),
    ErrorKind.UNCLASSIFIED: "Run again with --debug for details.",
}


# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_outcome(outcome: JobOutcome, verbose: bool = False) -> str:
    """Format a pass outcome as human-readable text.

    Args:
        outcome: The outcome of the pass.
        verbose: Also list refreshed files and absorbed failures.

    Returns:
        Multi-line formatted string.
    """
    if outcome.status == JobStatus.CANCELLED:
        return "Synchronization cancelled."

    lines: list[str] = []
    if outcome.status == JobStatus.FAILED:
        lines.append(f"Synchronization failed: {outcome.message}")
        if outcome.cause is not None and str(outcome.cause) != outcome.message:
            lines.append(f"  Cause: {outcome.cause}")
        kind = outcome.error_kind or ErrorKind.UNCLASSIFIED
        lines.append(f"  Action: {_HINTS[kind]}")
        lines.append("")

    refreshed = outcome.refreshed
    issues = sum(r.issues for r in refreshed)
    lines.append(
        f"Synchronized {len(outcome.results)} files: "
        f"{len(refreshed)} refreshed ({issues} issues), "
        f"{len(outcome.up_to_date)} up to date"
    )

    if verbose:
        if refreshed:
            lines.append("")
            lines.append("Refreshed:")
            for r in refreshed:
                lines.append(f"  {r.path}: {r.issues} issue(s)")
        if outcome.skipped:
            lines.append("")
            lines.append(f"Skipped: {len(outcome.skipped)} files (busy)")
        if outcome.failed_files:
            lines.append("")
            lines.append("Not synchronized:")
            for r in outcome.failed_files:
                lines.append(f"  {r.path}: {r.error}")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def outcome_to_json(outcome: JobOutcome) -> dict:
    """Convert an outcome to a structured dict for JSON serialisation.

    Args:
        outcome: The outcome of the pass.

    Returns:
        Dict with status, counts, and per-file details.
    """
    results_list = []
    for r in outcome.results:
        entry: dict = {
            "path": r.path,
            "action": r.action.value,
            "issues": r.issues,
        }
        if r.error:
            entry["error"] = r.error
            entry["error_kind"] = r.error_kind.value if r.error_kind else None
        results_list.append(entry)

    data: dict = {
        "status": outcome.status.value,
        "message": outcome.message,
        "force": outcome.force,
        "started_at": outcome.started_at,
        "completed_at": outcome.completed_at,
        "counts": {
            "total": len(outcome.results),
            "refreshed": len(outcome.refreshed),
            "up_to_date": len(outcome.up_to_date),
            "skipped": len(outcome.skipped),
            "failed": len(outcome.failed_files),
        },
        "results": results_list,
    }
    if outcome.error_kind is not None:
        data["error_kind"] = outcome.error_kind.value
    if outcome.cause is not None:
        data["cause"] = str(outcome.cause)
    return data
