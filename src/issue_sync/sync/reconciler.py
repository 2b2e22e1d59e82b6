"""Replace a file's annotations with a freshly fetched issue set.

Reconciliation is one logical unit: delete all annotations, create one
per issue, persist, then record refresh metadata.  Metadata is written
last so a file is never reported up to date unless its annotations were
fully replaced.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime

from ..core.errors import LocalReconciliationError
from ..remote.models import Issue, ServerIdentity
from .models import Annotation, RefreshMetadata
from .store import MarkerStore, RefreshMetadataStore

logger = logging.getLogger(__name__)


class AnnotationReconciler:
    """Atomically replace the annotations of a file.

    Args:
        markers: Annotation store of the file's project.
        metadata: Refresh metadata store of the file's project.
    """

    def __init__(
        self, markers: MarkerStore, metadata: RefreshMetadataStore
    ) -> None:
        self.markers = markers
        self.metadata = metadata

    def reconcile(
        self,
        path: str,
        issues: list[Issue],
        server: ServerIdentity,
        now: datetime,
    ) -> RefreshMetadata:
        """Replace the annotations of *path* with *issues*.

        On failure the previous annotations are restored and the refresh
        metadata is left as it was; if that is not possible the metadata
        is invalidated so the next pass fetches again.

        Returns:
            The refresh metadata recorded for *path*.

        Raises:
            LocalReconciliationError: If the replacement failed.
        """
        start = time.monotonic()
        logger.debug("Update markers on resource %s...", path)

        with self.markers.locked():
            previous = self.markers.get(path)
            try:
                self.markers.delete_all(path)
                for issue in issues:
                    self.markers.create(path, issue)
                self.markers.flush()
            except Exception as exc:
                self._rollback(path, previous)
                if isinstance(exc, LocalReconciliationError):
                    raise
                raise LocalReconciliationError(
                    f"Unable to update markers: {exc}", path
                ) from exc

        try:
            recorded = self.metadata.write(path, server, now)
        except Exception as exc:
            self._invalidate(path)
            raise LocalReconciliationError(
                f"Unable to record refresh metadata: {exc}", path
            ) from exc

        logger.debug(
            "Updated %d marker(s) on %s in %dms",
            len(issues),
            path,
            (time.monotonic() - start) * 1000,
        )
        return recorded

    def read_back(self, path: str) -> list[Annotation]:
        """Return the current annotations of *path*."""
        return self.markers.get(path)

    def _rollback(self, path: str, previous: list[Annotation]) -> None:
        try:
            self.markers.restore(path, previous)
        except Exception as exc:
            logger.error(
                "Unable to restore markers of %s: %s", path, exc
            )
            self._invalidate(path)

    def _invalidate(self, path: str) -> None:
        try:
            self.metadata.invalidate(path)
        except Exception as exc:
            logger.error(
                "Unable to invalidate refresh metadata of %s: %s",
                path,
                exc,
            )
