"""Synchronization job: one pass of remote issues into local markers.

``SynchronizationJob.run()`` ties together the tree walker, refresh
policy, fetcher, and reconciler.  For every top-level resource it:

1. Stops if cancellation was requested, skips it if out of scope.
2. Walks it (recursively if requested) to enumerate accessible files.
3. For each file, decides from cached metadata whether a fetch is needed.
4. Fetches the file's issues and replaces its annotations.
5. Reports one unit of progress.

Error handling is per-file: a single file failure does not abort the
run.  The one exception is a connectivity failure during a forced pass,
which stops the pass and fails it.  In an automatic pass the first
connectivity failure of a project is reused for its remaining files.
No exception escapes ``run()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from ..core.errors import ConnectivityError, classify
from ..core.progress import NullProgressMonitor, ProgressMonitor
from ..remote.fetcher import RemoteIssueFetcher
from ..remote.models import ServerIdentity
from ..remote.ports import RemoteServer, ServerRegistry
from ..resources.model import ProjectKey, Resource, ResourceTree
from ..resources.walker import walk
from .models import FileAction, FileResult, JobOutcome, JobStatus, SyncRequest
from .policy import RefreshPolicy
from .reconciler import AnnotationReconciler
from .store import StoreRegistry

logger = logging.getLogger(__name__)

CONNECTIVITY_MESSAGE = "Unable to contact issue server"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Pass:
    """Mutable bookkeeping of one ``run()`` call."""

    request: SyncRequest
    monitor: ProgressMonitor
    results: list[FileResult] = field(default_factory=list)
    identities: dict[str, ServerIdentity] = field(default_factory=dict)
    # First connectivity failure of each project; later files reuse it.
    offline: dict[str, ConnectivityError] = field(default_factory=dict)


class SynchronizationJob:
    """Synchronize the markers of a set of resources with the issue server.

    Args:
        tree: Resource tree used to resolve project membership and paths.
        servers: Registry providing each project's remote server.
        stores: Registry providing each project's local stores.
        policy: Refresh policy (defaults to no age limit).
        fetcher: Remote issue fetcher.
        clock: Returns the current aware UTC time.
    """

    def __init__(
        self,
        tree: ResourceTree,
        servers: ServerRegistry,
        stores: StoreRegistry,
        policy: RefreshPolicy | None = None,
        fetcher: RemoteIssueFetcher | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.tree = tree
        self.servers = servers
        self.stores = stores
        self.policy = policy or RefreshPolicy()
        self.fetcher = fetcher or RemoteIssueFetcher()
        self.clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(
        self,
        request: SyncRequest,
        monitor: ProgressMonitor | None = None,
    ) -> JobOutcome:
        """Execute one synchronization pass.

        Args:
            request: Resources to synchronize and pass options.
            monitor: Progress/cancellation monitor; ``done()`` is called
                exactly once whatever the outcome.

        Returns:
            The ``JobOutcome`` of the pass.
        """
        monitor = monitor or NullProgressMonitor()
        started_at = self.clock().isoformat()
        ctx = _Pass(request=request, monitor=monitor)

        try:
            monitor.begin_task(request.label, len(request.resources))
            for resource in request.resources:
                if monitor.is_cancelled():
                    break
                if self._in_scope(resource):
                    monitor.sub_task(resource.name)
                    for file in walk(
                        resource, self.tree, request.recursive_visit, monitor
                    ):
                        self._process_file(file, ctx)
                monitor.worked(1)

            if monitor.is_cancelled():
                outcome = self._outcome(
                    ctx,
                    started_at,
                    JobStatus.CANCELLED,
                    "Synchronization cancelled",
                )
            else:
                outcome = self._outcome(
                    ctx,
                    started_at,
                    JobStatus.COMPLETED,
                    "Synchronization completed",
                )
        except ConnectivityError as exc:
            # Only forced passes let connectivity failures reach this point.
            outcome = self._outcome(
                ctx,
                started_at,
                JobStatus.FAILED,
                CONNECTIVITY_MESSAGE,
                exc,
            )
        except Exception as exc:
            logger.debug("Synchronization failed", exc_info=True)
            outcome = self._outcome(
                ctx,
                started_at,
                JobStatus.FAILED,
                str(exc) or type(exc).__name__,
                exc,
            )
        finally:
            try:
                monitor.done()
            except Exception as exc:
                logger.error("Progress monitor failed on done(): %s", exc)

        return outcome

    # ------------------------------------------------------------------
    # Per-file sequence
    # ------------------------------------------------------------------

    def _process_file(self, file: Resource, ctx: _Pass) -> None:
        """Refresh the markers of one file, absorbing its failures.

        Raises:
            ConnectivityError: Only for forced passes.
        """
        if not file.exists() or ctx.monitor.is_cancelled():
            return
        project = self.tree.adapt(file)
        if project is None:
            return

        path = self.tree.relative_path(file)
        stores = self.stores.for_project(project)
        if stores.markers.is_analysing(path):
            logger.debug("Skipping %s: already being analysed", path)
            ctx.results.append(FileResult(path=path, action=FileAction.SKIPPED))
            return

        force = ctx.request.force
        cached = ctx.offline.get(project.name)
        if cached is not None:
            ctx.results.append(_failed(path, cached))
            return

        try:
            server = self._server(project)
            identity = self._identity(project, server, ctx)
            now = self.clock()
            metadata = stores.metadata.read(path)
            if not self.policy.needs_refresh(metadata, identity, force, now):
                ctx.results.append(
                    FileResult(path=path, action=FileAction.UP_TO_DATE)
                )
                return

            try:
                local_text = _read_text(file)
            except FileNotFoundError:
                # Deleted since it was enumerated.
                return
            issues = self.fetcher.fetch(server, path, local_text)

            with stores.markers.analysing(path):
                AnnotationReconciler(stores.markers, stores.metadata).reconcile(
                    path, issues, identity, now
                )
            ctx.results.append(
                FileResult(
                    path=path, action=FileAction.REFRESHED, issues=len(issues)
                )
            )
        except ConnectivityError as exc:
            if force:
                raise
            ctx.offline[project.name] = exc
            # Expected while offline; automatic passes stay quiet.
            logger.debug("%s: %s", path, exc)
            ctx.results.append(_failed(path, exc))
        except Exception as exc:
            if force:
                logger.error("Unable to synchronize %s: %s", path, exc)
            else:
                logger.debug("Unable to synchronize %s: %s", path, exc)
            ctx.results.append(_failed(path, exc))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _in_scope(self, resource: Resource) -> bool:
        return (
            self.tree.adapt(resource) is not None
            and resource.is_accessible()
        )

    def _server(self, project: ProjectKey) -> RemoteServer:
        server = self.servers.resolve(project)
        if server is None:
            raise ConnectivityError(
                "No issue server available for project", project.name
            )
        return server

    def _identity(
        self, project: ProjectKey, server: RemoteServer, ctx: _Pass
    ) -> ServerIdentity:
        """Return the server identity, queried once per project per pass."""
        identity = ctx.identities.get(project.name)
        if identity is None:
            identity = server.identity()
            ctx.identities[project.name] = identity
        return identity

    def _outcome(
        self,
        ctx: _Pass,
        started_at: str,
        status: JobStatus,
        message: str,
        cause: BaseException | None = None,
    ) -> JobOutcome:
        return JobOutcome(
            status=status,
            message=message,
            error_kind=classify(cause) if cause is not None else None,
            cause=cause,
            force=ctx.request.force,
            results=tuple(ctx.results),
            started_at=started_at,
            completed_at=self.clock().isoformat(),
        )


def _failed(path: str, exc: Exception) -> FileResult:
    return FileResult(
        path=path,
        action=FileAction.FAILED,
        error=str(exc),
        error_kind=classify(exc),
    )


def _read_text(file: Resource) -> str | None:
    """Return the current file content if the resource can provide it."""
    reader = getattr(file, "read_text", None)
    if reader is None:
        return None
    return reader()
