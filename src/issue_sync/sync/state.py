"""JSON state file persistence.

Annotations and refresh metadata are stored per project in the
``.issue_sync/`` directory.  Every file holds a version number, the time
of the last write, and a dict of per-path entries.

``save()`` writes to a temp file then calls ``os.replace()`` so readers
never see partial data.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

STATE_VERSION = 1


class JsonStateFile:
    """Load and atomically save one JSON state document.

    Args:
        path: Location of the state file.  The parent directory is
            created on first save.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict:
        """Load the state document.

        Returns:
            The state dict.  If the file does not exist an empty state
            with ``version=1`` is returned.
        """
        if not self.path.exists():
            return self.empty()
        with open(self.path, encoding="utf-8") as fh:
            data = json.load(fh)
        data.setdefault("entries", {})
        return data

    def save(self, state: dict) -> None:
        """Persist *state* atomically, stamping ``updated_at``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        state["updated_at"] = datetime.now(timezone.utc).isoformat()

        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(state, fh, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            # Clean up temp file on any failure.
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    @staticmethod
    def empty() -> dict:
        return {"version": STATE_VERSION, "updated_at": None, "entries": {}}
