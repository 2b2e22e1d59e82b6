"""Shared pytest fixtures for issue-sync tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from issue_sync.core.errors import ConnectivityError
from issue_sync.remote.models import Issue, RemoteResource, ServerIdentity
from issue_sync.resources.filesystem import Workspace
from issue_sync.resources.model import ProjectKey
from issue_sync.sync.job import SynchronizationJob
from issue_sync.sync.models import SyncRequest
from issue_sync.sync.store import StoreRegistry

SERVER_ID = "https://issues.example.com"
NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeIssueServer:
    """In-memory remote issue server.

    ``files`` maps project-relative paths to their issues; paths absent
    from it are unknown remotely.  Set ``offline`` to make every call
    raise ``ConnectivityError``.
    """

    def __init__(
        self,
        files: dict[str, list[Issue]] | None = None,
        sources: dict[str, str] | None = None,
        server_id: str = SERVER_ID,
        version: str = "v1",
    ) -> None:
        self.files = files or {}
        self.sources = sources or {}
        self.server_id = server_id
        self.version = version
        self.offline = False
        self.offline_paths: set[str] = set()
        self.identity_calls = 0
        self.searched: list[str] = []

    def identity(self) -> ServerIdentity:
        self.identity_calls += 1
        if self.offline:
            raise ConnectivityError("Connection refused", self.server_id)
        return ServerIdentity(server_id=self.server_id, version=self.version)

    def search(self, path: str) -> RemoteResource | None:
        self.searched.append(path)
        if self.offline or path in self.offline_paths:
            raise ConnectivityError("Connection refused", self.server_id)
        if path not in self.files:
            return None
        return RemoteResource(key=f"app:{path}", name=path)

    def search_issues(self, resource: RemoteResource) -> list[Issue]:
        return list(self.files[resource.name])

    def get_source(self, resource: RemoteResource) -> str | None:
        return self.sources.get(resource.name)


class FakeRegistry:
    """Server registry returning one fake server per project name."""

    def __init__(self, servers: dict[str, FakeIssueServer]) -> None:
        self.servers = servers

    def resolve(self, project: ProjectKey) -> FakeIssueServer | None:
        return self.servers.get(project.name)


class FixedClock:
    """Clock returning a controllable aware UTC time."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create a small project tree.

    Layout::

        app/
          README.md
          src/
            a.py
            b.py
            pkg/
              c.py
    """
    root = tmp_path / "app"
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "README.md").write_text("# App\n", encoding="utf-8")
    (root / "src" / "a.py").write_text(
        'print("a")\nx = 1\n', encoding="utf-8"
    )
    (root / "src" / "b.py").write_text("y = 2\n", encoding="utf-8")
    (root / "src" / "pkg" / "c.py").write_text("z = 3\n", encoding="utf-8")
    return root


@pytest.fixture
def workspace(project_root: Path) -> Workspace:
    return Workspace({"app": project_root})


@pytest.fixture
def server() -> FakeIssueServer:
    return FakeIssueServer(
        files={
            "src/a.py": [
                Issue(key="AX-1", line=1, message="Remove this print"),
                Issue(key="AX-2", line=2, message="Rename x", severity="minor"),
            ],
            "src/b.py": [],
            "src/pkg/c.py": [Issue(key="AX-3", line=1, message="Unused")],
        }
    )


@pytest.fixture
def registry(server: FakeIssueServer) -> FakeRegistry:
    return FakeRegistry({"app": server})


@pytest.fixture
def stores() -> StoreRegistry:
    return StoreRegistry()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def job(workspace, registry, stores, clock) -> SynchronizationJob:
    return SynchronizationJob(
        tree=workspace, servers=registry, stores=stores, clock=clock
    )


@pytest.fixture
def make_request(workspace):
    """Factory building a ``SyncRequest`` from project-root-relative paths."""

    def _make(*paths: str, **kwargs) -> SyncRequest:
        root = workspace.projects[0].root
        resources = tuple(
            workspace.resource(root / p if p else root) for p in paths
        )
        return SyncRequest(resources=resources, **kwargs)

    return _make
