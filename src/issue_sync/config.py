"""Runtime settings for synchronization passes.

Reads settings from CLI args, environment variables, .env files, and
YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    ISSUE_SYNC_SNAPSHOT: Default issue snapshot file (optional)
    ISSUE_SYNC_SERVER_ID: Override of the server identity (optional)
    ISSUE_SYNC_MAX_AGE: Staleness threshold in seconds, empty for none (optional)
    ISSUE_SYNC_RECURSIVE: Descend into folders (optional, default: true)
    ISSUE_SYNC_STATE_DIR: Per-project state directory (optional, default: .issue_sync)
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

MAX_AGE_LIMIT = 365 * 24 * 3600


@dataclass
class Settings:
    projects: dict[str, str] = field(default_factory=dict)
    snapshot: str | None = None
    project_snapshots: dict[str, str] = field(default_factory=dict)
    server_id: str | None = None
    max_age_seconds: int | None = None
    recursive: bool = True
    state_dir: str = ".issue_sync"
    debug: bool = False


def validate_settings(settings: Settings) -> None:
    """Validate settings and raise ValueError if invalid.

    Args:
        settings: Settings instance to validate.

    Raises:
        ValueError: If the state directory or staleness threshold is
            invalid, or a project has no root.
    """
    settings.state_dir = settings.state_dir.strip()
    if not settings.state_dir:
        raise ValueError(
            "State directory cannot be empty. Set ISSUE_SYNC_STATE_DIR "
            "or sync.state_dir in config.yml."
        )
    if "/" in settings.state_dir or settings.state_dir in (".", ".."):
        raise ValueError(
            f"Invalid state directory '{settings.state_dir}': must be a "
            "single directory name"
        )

    if settings.max_age_seconds is not None and not (
        0 <= settings.max_age_seconds <= MAX_AGE_LIMIT
    ):
        raise ValueError(
            f"Invalid max age '{settings.max_age_seconds}': must be a "
            f"number of seconds between 0 and {MAX_AGE_LIMIT}"
        )

    for name, root in settings.projects.items():
        if not str(root).strip():
            raise ValueError(f"Project '{name}' has no root directory")

    if settings.snapshot is None and not settings.project_snapshots:
        logger.debug(
            "No issue snapshot configured; every file will be reported "
            "as unreachable"
        )


def _parse_max_age(raw: str) -> int | None:
    raw = raw.strip()
    if not raw or raw.lower() == "none":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid ISSUE_SYNC_MAX_AGE '{raw}': must be a number of "
            f"seconds between 0 and {MAX_AGE_LIMIT}"
        ) from None


def load_settings(
    snapshot: str | None = None,
    server_id: str | None = None,
    max_age_seconds: int | None = None,
    recursive: bool | None = None,
    projects: dict[str, str] | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Settings:
    """Load settings with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        snapshot: Override default snapshot path.
        server_id: Override server identity.
        max_age_seconds: Override staleness threshold.
        recursive: Override folder recursion (``None`` = not given).
        projects: Projects from the CLI, merged over configured ones.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flat dict derived from the YAML config file
            (see ``config_schema.to_fallbacks``).

    Returns:
        Validated Settings instance.

    Raises:
        ValueError: If an env var or the resulting settings are invalid.
    """
    fb = yaml_fallbacks or {}

    # --- String fields: CLI > env > YAML > default ---

    final_snapshot = (
        snapshot or os.getenv("ISSUE_SYNC_SNAPSHOT") or fb.get("snapshot")
    )
    final_server_id = (
        server_id
        or os.getenv("ISSUE_SYNC_SERVER_ID")
        or fb.get("server_id")
    )
    final_state_dir = (
        os.getenv("ISSUE_SYNC_STATE_DIR")
        or fb.get("state_dir")
        or ".issue_sync"
    )

    # --- Boolean fields: CLI > env > YAML > default ---

    def get_bool_env(key: str) -> bool | None:
        """Return True/False from env var, or None if unset."""
        val = os.getenv(key)
        if val is None:
            return None
        return val.lower() in ("true", "1", "yes", "on")

    if recursive is not None:
        final_recursive = recursive
    else:
        env_recursive = get_bool_env("ISSUE_SYNC_RECURSIVE")
        if env_recursive is not None:
            final_recursive = env_recursive
        else:
            final_recursive = bool(fb.get("recursive", True))

    if debug:
        final_debug = True
    else:
        env_debug = get_bool_env("ISSUE_SYNC_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    # --- Numeric fields ---

    max_age_raw = os.getenv("ISSUE_SYNC_MAX_AGE")
    if max_age_seconds is not None:
        final_max_age: int | None = max_age_seconds
    elif max_age_raw is not None:
        final_max_age = _parse_max_age(max_age_raw)
    else:
        final_max_age = fb.get("max_age_seconds")

    # --- Projects: configured, then CLI on top ---

    final_projects = {
        name: str(root) for name, root in fb.get("projects", {}).items()
    }
    final_projects.update(projects or {})

    settings = Settings(
        projects=final_projects,
        snapshot=final_snapshot,
        project_snapshots=dict(fb.get("project_snapshots", {})),
        server_id=final_server_id,
        max_age_seconds=final_max_age,
        recursive=final_recursive,
        state_dir=final_state_dir,
        debug=final_debug,
    )

    validate_settings(settings)

    return settings
