"""Pydantic models exchanged with the remote issue server.

All models are frozen (immutable).
"""

from __future__ import annotations

from pydantic import BaseModel


class ServerIdentity(BaseModel):
    """Identity and analysis version of a remote issue server.

    Attributes:
        server_id: Stable identity of the server (typically its URL).
        version: Marker of the server's last analysis; changes whenever
            the remote issue set may have changed.
    """

    server_id: str
    version: str

    model_config = {"frozen": True}


class RemoteResource(BaseModel):
    """Remote counterpart of a local file."""

    key: str
    name: str

    model_config = {"frozen": True}


class Issue(BaseModel):
    """A defect reported by the remote server for one file.

    Attributes:
        key: Stable identity of the issue on the server.
        line: 1-based line number, or ``None`` for a file-level issue.
        message: Description shown to the user.
        severity: Server severity (e.g. ``major``).
        rule: Identifier of the rule that raised the issue.
        status: Workflow status on the server.
        author: Optional assignee or author.
        created_at: Optional ISO 8601 creation timestamp.
    """

    key: str
    line: int | None = None
    message: str = ""
    severity: str = "major"
    rule: str | None = None
    status: str = "open"
    author: str | None = None
    created_at: str | None = None

    model_config = {"frozen": True}
