"""Fetch the remote issues of one file, with line correction."""

from __future__ import annotations

import logging
import time

from .line_correction import correct_lines
from .models import Issue
from .ports import RemoteServer

logger = logging.getLogger(__name__)


class RemoteIssueFetcher:
    """Query a remote server for the issues of a single file.

    A file unknown to the server yields an empty list; this is a normal
    outcome, distinct from a ``ConnectivityError``, which propagates.
    """

    def fetch(
        self,
        server: RemoteServer,
        path: str,
        local_text: str | None = None,
    ) -> list[Issue]:
        """Return the line-corrected issues of *path*.

        Args:
            server: Handle to the project's remote server.
            path: Project-relative path of the file.
            local_text: Current file content used for line correction.

        Returns:
            The issues; empty when the file has no remote counterpart.

        Raises:
            ConnectivityError: If the server cannot be reached.
        """
        start = time.monotonic()
        logger.debug("Retrieve issues of resource %s...", path)

        remote = server.search(path)
        if remote is None:
            logger.debug(
                "Unable to find remote resource %s on issue server", path
            )
            return []

        issues = server.search_issues(remote)
        if issues and local_text is not None:
            issues = correct_lines(
                issues, server.get_source(remote), local_text
            )

        logger.debug(
            "Retrieved %d issue(s) for %s in %dms",
            len(issues),
            path,
            (time.monotonic() - start) * 1000,
        )
        return list(issues)
