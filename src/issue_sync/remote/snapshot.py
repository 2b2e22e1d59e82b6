"""Offline issue server backed by a YAML issue export.

A snapshot file looks like::

    server_id: https://issues.example.com
    version: "2026-10-01T08:00:00Z"
    resources:
      src/app.py:
        key: "proj:src/app.py"
        source: |
          print("analysed content")
        issues:
          - key: AX-1
            line: 1
            message: Remove this print
            severity: minor
            rule: python:S106

The file is re-read on every ``identity()`` call so a refreshed export
is picked up by the next pass.  A missing or unreadable file means the
"server" is unreachable and raises ``ConnectivityError``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..core.errors import ConnectivityError
from ..resources.model import ProjectKey
from .models import Issue, RemoteResource, ServerIdentity

logger = logging.getLogger(__name__)


class SnapshotResource(BaseModel):
    """One analysed file in a snapshot."""

    key: str
    source: str | None = None
    issues: list[Issue] = Field(default_factory=list)

    model_config = {"frozen": True}


class Snapshot(BaseModel):
    """Parsed content of a snapshot file."""

    server_id: str
    version: str
    resources: dict[str, SnapshotResource] = Field(default_factory=dict)

    model_config = {"frozen": True}


def load_snapshot(path: Path) -> Snapshot:
    """Load and validate a snapshot file.

    Raises:
        ConnectivityError: If the file is missing, unreadable, or invalid.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConnectivityError(
            f"Issue snapshot unavailable: {exc.strerror or exc}",
            str(path),
        ) from exc
    except yaml.YAMLError as exc:
        raise ConnectivityError(
            f"Issue snapshot is not valid YAML: {exc}", str(path)
        ) from exc

    if not isinstance(data, dict):
        raise ConnectivityError(
            "Issue snapshot must be a mapping", str(path)
        )
    try:
        return Snapshot(**data)
    except ValidationError as exc:
        raise ConnectivityError(
            f"Issue snapshot is malformed: {exc.error_count()} error(s)",
            str(path),
        ) from exc


class SnapshotServer:
    """``RemoteServer`` implementation reading a snapshot file.

    Args:
        path: Snapshot file location.
        server_id: Optional identity override (defaults to the file's).
    """

    def __init__(self, path: Path, server_id: str | None = None) -> None:
        self.path = path
        self._server_id = server_id
        self._snapshot: Snapshot | None = None

    def identity(self) -> ServerIdentity:
        self._snapshot = load_snapshot(self.path)
        return ServerIdentity(
            server_id=self._server_id or self._snapshot.server_id,
            version=self._snapshot.version,
        )

    def search(self, path: str) -> RemoteResource | None:
        entry = self._current().resources.get(path)
        if entry is None:
            return None
        return RemoteResource(key=entry.key, name=path)

    def search_issues(self, resource: RemoteResource) -> list[Issue]:
        entry = self._current().resources.get(resource.name)
        return list(entry.issues) if entry else []

    def get_source(self, resource: RemoteResource) -> str | None:
        entry = self._current().resources.get(resource.name)
        return entry.source if entry else None

    def _current(self) -> Snapshot:
        if self._snapshot is None:
            self._snapshot = load_snapshot(self.path)
        return self._snapshot


class SnapshotRegistry:
    """``ServerRegistry`` mapping projects to snapshot files.

    Args:
        snapshots: Per-project snapshot paths (by project name).
        default: Snapshot used for projects without their own entry.
        server_id: Optional identity override applied to every server.
    """

    def __init__(
        self,
        snapshots: dict[str, Path] | None = None,
        default: Path | None = None,
        server_id: str | None = None,
    ) -> None:
        self._snapshots = dict(snapshots or {})
        self._default = default
        self._server_id = server_id
        self._servers: dict[str, SnapshotServer] = {}

    def resolve(self, project: ProjectKey) -> SnapshotServer | None:
        path = self._snapshots.get(project.name, self._default)
        if path is None:
            logger.debug("No issue snapshot configured for %s", project.name)
            return None
        server = self._servers.get(project.name)
        if server is None:
            server = SnapshotServer(Path(path), self._server_id)
            self._servers[project.name] = server
        return server
