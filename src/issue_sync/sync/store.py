"""Per-project annotation and refresh-metadata stores.

Both stores keep their entries keyed by project-relative POSIX path:

* ``MarkerStore`` -- ``markers.json``: the annotations of every file.
  Mutations stay in memory until ``flush()``, so a reconciliation is
  persisted as one write.  ``locked()`` serialises such units.
* ``RefreshMetadataStore`` -- ``refresh.json``: what each file's
  annotations were computed from.  Every write is persisted immediately.

``MarkerStore`` also owns the per-file "currently analysing" guard that
serialises concurrent passes over the same file.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from ..core.errors import LocalReconciliationError
from ..remote.models import Issue, ServerIdentity
from ..resources.model import ProjectKey
from .models import Annotation, RefreshMetadata
from .state import JsonStateFile

logger = logging.getLogger(__name__)

MARKERS_FILE = "markers.json"
REFRESH_FILE = "refresh.json"


class MarkerStore:
    """Annotations of the files of one project.

    Args:
        state_dir: Directory holding ``markers.json``.
    """

    def __init__(self, state_dir: Path) -> None:
        self._file = JsonStateFile(state_dir / MARKERS_FILE)
        self._state: dict | None = None
        self._lock = threading.Lock()
        self._write_lock = threading.RLock()
        self._analysing: set[str] = set()

    # ------------------------------------------------------------------
    # Annotations
    # ------------------------------------------------------------------

    def get(self, path: str) -> list[Annotation]:
        """Return the annotations of *path* (empty if none)."""
        raw = self._entries().get(path, [])
        return [Annotation(**item) for item in raw]

    def delete_all(self, path: str) -> None:
        """Remove every annotation of *path*."""
        self._entries().pop(path, None)

    def create(self, path: str, issue: Issue) -> Annotation:
        """Add an annotation for *issue* to *path*.

        Raises:
            LocalReconciliationError: If the issue cannot be materialised
                (empty key or non-positive line).
        """
        if not issue.key:
            raise LocalReconciliationError(
                "Cannot create marker for issue without key", path
            )
        if issue.line is not None and issue.line < 1:
            raise LocalReconciliationError(
                f"Cannot create marker for {issue.key} at line {issue.line}",
                path,
            )
        annotation = Annotation.from_issue(
            issue, created_at=datetime.now(timezone.utc).isoformat()
        )
        self._entries().setdefault(path, []).append(
            annotation.model_dump(mode="json")
        )
        return annotation

    def restore(self, path: str, annotations: list[Annotation]) -> None:
        """Replace the annotations of *path* with *annotations* as-is."""
        entries = self._entries()
        if annotations:
            entries[path] = [a.model_dump(mode="json") for a in annotations]
        else:
            entries.pop(path, None)

    def flush(self) -> None:
        """Persist pending changes."""
        if self._state is not None:
            self._file.save(self._state)

    def paths(self) -> list[str]:
        """Return every path that has annotations."""
        return sorted(self._entries())

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store for one read-modify-flush unit.

        Every file of the project shares one in-memory document.
        """
        with self._write_lock:
            yield

    # ------------------------------------------------------------------
    # Concurrent-analysis guard
    # ------------------------------------------------------------------

    def is_analysing(self, path: str) -> bool:
        """Return ``True`` while another pass is reconciling *path*."""
        with self._lock:
            return path in self._analysing

    @contextmanager
    def analysing(self, path: str) -> Iterator[None]:
        """Mark *path* as being reconciled for the duration of the block.

        Raises:
            LocalReconciliationError: If *path* is already being analysed.
        """
        with self._lock:
            if path in self._analysing:
                raise LocalReconciliationError(
                    "File is already being analysed", path
                )
            self._analysing.add(path)
        try:
            yield
        finally:
            with self._lock:
                self._analysing.discard(path)

    def _entries(self) -> dict:
        if self._state is None:
            self._state = self._file.load()
        return self._state["entries"]


class RefreshMetadataStore:
    """Refresh metadata of the files of one project.

    Args:
        state_dir: Directory holding ``refresh.json``.
    """

    def __init__(self, state_dir: Path) -> None:
        self._file = JsonStateFile(state_dir / REFRESH_FILE)

    def read(self, path: str) -> RefreshMetadata | None:
        """Return the metadata of *path*, or ``None`` if absent or unreadable."""
        entry = self._file.load()["entries"].get(path)
        if entry is None:
            return None
        try:
            return RefreshMetadata(**entry)
        except (TypeError, ValidationError):
            logger.debug("Ignoring malformed refresh metadata for %s", path)
            return None

    def write(
        self, path: str, server: ServerIdentity, now: datetime
    ) -> RefreshMetadata:
        """Record that *path* was reconciled against *server* at *now*."""
        metadata = RefreshMetadata(
            server_id=server.server_id,
            server_version=server.version,
            synced_at=now,
        )
        state = self._file.load()
        state["entries"][path] = metadata.model_dump(mode="json")
        self._file.save(state)
        return metadata

    def invalidate(self, path: str) -> None:
        """Forget the metadata of *path* so the next pass refreshes it."""
        state = self._file.load()
        if state["entries"].pop(path, None) is not None:
            self._file.save(state)


@dataclass
class ProjectStores:
    """The local stores of one project."""

    markers: MarkerStore
    metadata: RefreshMetadataStore


class StoreRegistry:
    """Create and cache the stores of each project.

    Args:
        state_dir: Name of the state directory inside each project root.
    """

    def __init__(self, state_dir: str = ".issue_sync") -> None:
        self.state_dir = state_dir
        self._stores: dict[str, ProjectStores] = {}
        self._lock = threading.Lock()

    def for_project(self, project: ProjectKey) -> ProjectStores:
        with self._lock:
            stores = self._stores.get(project.name)
            if stores is None:
                directory = project.root / self.state_dir
                stores = ProjectStores(
                    markers=MarkerStore(directory),
                    metadata=RefreshMetadataStore(directory),
                )
                self._stores[project.name] = stores
            return stores
