"""Remote issue server side: models, interfaces, fetcher, snapshot server."""

from .fetcher import RemoteIssueFetcher
from .line_correction import build_line_map, correct_lines
from .models import Issue, RemoteResource, ServerIdentity
from .ports import RemoteServer, ServerRegistry
from .snapshot import SnapshotRegistry, SnapshotServer, load_snapshot

__all__ = [
    "Issue",
    "RemoteIssueFetcher",
    "RemoteResource",
    "RemoteServer",
    "ServerIdentity",
    "ServerRegistry",
    "SnapshotRegistry",
    "SnapshotServer",
    "build_line_map",
    "correct_lines",
    "load_snapshot",
]
