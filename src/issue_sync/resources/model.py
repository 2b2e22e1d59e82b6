"""Resource tree contracts.

A resource is a node of the local hierarchical tree (a folder or a file
inside a project).  Resources may disappear or become inaccessible at any
moment because the tree is mutated externally, so callers re-check
``exists()`` / ``is_accessible()`` before acting on one.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, Protocol

from pydantic import BaseModel


class ResourceKind(str, Enum):
    """Kind of a node in the resource tree."""

    CONTAINER = "container"
    FILE = "file"


class ProjectKey(BaseModel):
    """Logical project a resource belongs to.

    Attributes:
        name: Project name (used to pick its remote server and stores).
        root: Absolute path of the project root directory.
    """

    name: str
    root: Path

    model_config = {"frozen": True}


class Resource(Protocol):
    """A node of the resource tree."""

    @property
    def name(self) -> str: ...

    @property
    def kind(self) -> ResourceKind: ...

    def exists(self) -> bool: ...

    def is_accessible(self) -> bool: ...

    def children(self) -> Iterable[Resource]: ...


class ResourceTree(Protocol):
    """Adapts resources to their owning project."""

    def adapt(self, resource: Resource) -> ProjectKey | None:
        """Return the resource's project, or ``None`` if out of scope."""
        ...

    def relative_path(self, resource: Resource) -> str:
        """Return the project-relative POSIX path of *resource*."""
        ...
