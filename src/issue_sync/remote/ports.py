"""Interfaces of the remote issue server collaborator.

The wire protocol lives behind these protocols.  Every method may raise
``ConnectivityError`` when the server cannot be reached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .models import Issue, RemoteResource, ServerIdentity

if TYPE_CHECKING:
    from ..resources.model import ProjectKey


class RemoteServer(Protocol):
    """Per-project handle to the remote issue server."""

    def identity(self) -> ServerIdentity:
        """Return the server identity and current analysis version."""
        ...

    def search(self, path: str) -> RemoteResource | None:
        """Resolve a project-relative path; ``None`` if unknown remotely."""
        ...

    def search_issues(self, resource: RemoteResource) -> list[Issue]:
        """Return the issues the server reports for *resource*."""
        ...

    def get_source(self, resource: RemoteResource) -> str | None:
        """Return the source text the server analysed, if available."""
        ...


class ServerRegistry(Protocol):
    """Project-scoped registry of server handles."""

    def resolve(self, project: ProjectKey) -> RemoteServer | None:
        """Return the server for *project*, or ``None`` if unavailable."""
        ...
