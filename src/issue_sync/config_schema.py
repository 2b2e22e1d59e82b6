"""Unified configuration schema for issue_sync.

Defines Pydantic models for the config file structure with dedicated
sections for the issue server, projects, sync behaviour, and logging,
plus the adapter that turns it into fallbacks for ``load_settings()``.

Usage:
    from issue_sync.config_schema import build_config, to_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    settings = load_settings(yaml_fallbacks=to_fallbacks(unified))
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from .config import MAX_AGE_LIMIT

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class ServerConfig(BaseModel):
    """Issue server settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    snapshot: str | None = Field(
        default=None, description="Default issue snapshot file"
    )
    server_id: str | None = Field(
        default=None, description="Override of the server identity"
    )

    model_config = {"frozen": True}


class ProjectConfig(BaseModel):
    """One project of the workspace.

    Attributes:
        root: Project root directory.
        snapshot: Snapshot file for this project (overrides the server
            default).
    """

    root: str
    snapshot: str | None = None

    model_config = {"frozen": True}


class SyncConfig(BaseModel):
    """Synchronization behaviour."""

    max_age_seconds: int | None = Field(
        default=None,
        ge=0,
        le=MAX_AGE_LIMIT,
        description="Refresh files whose markers are older than this",
    )
    recursive: bool = Field(
        default=True, description="Descend into folders"
    )
    state_dir: str = Field(
        default=".issue_sync",
        min_length=1,
        description="Per-project state directory name",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    projects: dict[str, ProjectConfig] = Field(default_factory=dict)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully; anything absent gets defaults.
    A project given as a plain string is taken as its root.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    data = dict(raw_data)
    projects = data.get("projects") or {}
    data["projects"] = {
        name: {"root": value} if isinstance(value, str) else value
        for name, value in projects.items()
    }
    return UnifiedConfig(**data)


# ---------------------------------------------------------------------------
# Adapter: UnifiedConfig -> load_settings() fallbacks
# ---------------------------------------------------------------------------


def to_fallbacks(unified: UnifiedConfig) -> dict:
    """Flatten a ``UnifiedConfig`` into the fallback dict accepted by
    ``load_settings()``.

    Only values that are set are included, so built-in defaults still
    apply for the rest.

    Args:
        unified: The unified config produced by ``build_config()``.

    Returns:
        Dict with keys among: snapshot, server_id, max_age_seconds,
        recursive, state_dir, projects, project_snapshots.
    """
    fallbacks: dict = {
        "recursive": unified.sync.recursive,
        "state_dir": unified.sync.state_dir,
        "projects": {
            name: project.root for name, project in unified.projects.items()
        },
        "project_snapshots": {
            name: project.snapshot
            for name, project in unified.projects.items()
            if project.snapshot
        },
    }
    if unified.server.snapshot:
        fallbacks["snapshot"] = unified.server.snapshot
    if unified.server.server_id:
        fallbacks["server_id"] = unified.server.server_id
    if unified.sync.max_age_seconds is not None:
        fallbacks["max_age_seconds"] = unified.sync.max_age_seconds
    return fallbacks
