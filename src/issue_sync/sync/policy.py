"""Per-file staleness check deciding whether a remote fetch is needed."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from ..remote.models import ServerIdentity
from .models import RefreshMetadata

if TYPE_CHECKING:
    from ..config import Settings


class RefreshPolicy:
    """Decide from cached metadata whether a file must be refreshed.

    Args:
        max_age: Age after which cached annotations are stale regardless
            of the server version.  ``None`` disables the age check.
    """

    def __init__(self, max_age: timedelta | None = None) -> None:
        self.max_age = max_age

    @classmethod
    def from_settings(cls, settings: Settings) -> RefreshPolicy:
        if settings.max_age_seconds is None:
            return cls()
        return cls(timedelta(seconds=settings.max_age_seconds))

    def needs_refresh(
        self,
        metadata: RefreshMetadata | None,
        server: ServerIdentity,
        force: bool,
        now: datetime,
    ) -> bool:
        """Return ``True`` if the file's annotations must be re-fetched.

        Pure function of its arguments: refresh when forced, when nothing
        was recorded, when the server identity or analysis version
        changed, or when the record is older than ``max_age``.
        """
        if force:
            return True
        if metadata is None:
            return True
        if metadata.server_id != server.server_id:
            return True
        if metadata.server_version != server.version:
            return True
        if self.max_age is not None:
            return now - metadata.synced_at > self.max_age
        return False
