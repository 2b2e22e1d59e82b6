"""Filesystem-backed resource tree.

``LocalResource`` wraps a ``pathlib.Path``; ``Workspace`` maps resources
to the configured projects.  Vanished or unreadable entries are reported
as inaccessible rather than raising, since the filesystem can change
underneath a running pass.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .model import ProjectKey, ResourceKind

logger = logging.getLogger(__name__)

# Directories never enumerated as part of a project tree.
DEFAULT_IGNORED = frozenset({".git", ".hg", ".svn", "__pycache__"})


class LocalResource:
    """A file or directory on the local filesystem.

    Args:
        path: Path of the resource (made absolute).
        ignored: Directory names skipped when listing children.
    """

    def __init__(
        self, path: Path | str, ignored: frozenset[str] = DEFAULT_IGNORED
    ) -> None:
        self.path = Path(path).absolute()
        self._ignored = ignored

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def kind(self) -> ResourceKind:
        if self.path.is_dir():
            return ResourceKind.CONTAINER
        return ResourceKind.FILE

    def exists(self) -> bool:
        return self.path.exists()

    def is_accessible(self) -> bool:
        if not self.path.exists():
            return False
        if self.path.is_dir():
            return os.access(self.path, os.R_OK | os.X_OK)
        return os.access(self.path, os.R_OK)

    def children(self) -> list[LocalResource]:
        """List direct children sorted by name; ``[]`` if unreadable."""
        try:
            entries = sorted(self.path.iterdir(), key=lambda p: p.name)
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            logger.debug("Cannot list %s", self.path)
            return []
        return [
            LocalResource(entry, self._ignored)
            for entry in entries
            if entry.name not in self._ignored
        ]

    def read_text(self) -> str:
        """Return the file content, decoding invalid bytes leniently."""
        return self.path.read_text(encoding="utf-8", errors="replace")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalResource):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"LocalResource({str(self.path)!r})"


class Workspace:
    """Set of projects rooted in local directories.

    Args:
        projects: Mapping of project name to root directory.
        state_dir: Name of the per-project state directory, which is
            excluded from enumeration.
    """

    def __init__(
        self, projects: dict[str, Path | str], state_dir: str = ".issue_sync"
    ) -> None:
        self._projects = [
            ProjectKey(name=name, root=Path(root).absolute())
            for name, root in projects.items()
        ]
        # Innermost project wins for nested roots.
        self._projects.sort(key=lambda p: len(p.root.parts), reverse=True)
        self.state_dir = state_dir
        self.ignored = DEFAULT_IGNORED | {state_dir}

    @property
    def projects(self) -> list[ProjectKey]:
        return list(self._projects)

    def resource(self, path: Path | str) -> LocalResource:
        """Create a ``LocalResource`` that honours this workspace's ignores."""
        return LocalResource(path, self.ignored)

    def adapt(self, resource: LocalResource) -> ProjectKey | None:
        path = getattr(resource, "path", None)
        if path is None:
            return None
        for project in self._projects:
            if path == project.root or project.root in path.parents:
                return project
        return None

    def relative_path(self, resource: LocalResource) -> str:
        project = self.adapt(resource)
        if project is None:
            raise ValueError(f"{resource.path} is outside every project")
        rel = resource.path.relative_to(project.root)
        return rel.as_posix()
