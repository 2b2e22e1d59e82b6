"""
Hierarchical configuration loader for issue_sync.

Provides convention-based config file discovery, env var interpolation,
and hierarchical merge with "project wins" semantics.

Usage:
    from issue_sync.config_loader import load_hierarchical_config

    config = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ISSUE_SYNC_CONFIG"

# Matches ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


# ---------------------------------------------------------------------------
# 1. Env var interpolation
# ---------------------------------------------------------------------------


def interpolate_env_vars(value: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` patterns with env values.

    * ``${VAR}`` becomes the value of VAR, or ``""`` when unset.
    * ``${VAR:-default}`` uses *default* when VAR is unset or empty.
    """

    def _replace(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        return match.group(2) or ""

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _interpolate_recursive(obj: Any) -> Any:
    """Walk a nested dict/list and interpolate env vars in all strings."""
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# 2. Convention-based file discovery
# ---------------------------------------------------------------------------


def discover_config_files() -> list[Path]:
    """Return existing config file paths in precedence order (highest first).

    Search order:
        1. ``ISSUE_SYNC_CONFIG`` env var (explicit single path).
        2. ``.issue_sync/config.yml`` in CWD (project-level)
        3. ``.issue_sync/config.yaml`` in CWD (alternate extension)
        4. ``~/.config/issue_sync/config.yml`` (XDG global)

    Only paths that exist on disk are returned.
    """
    candidates: list[Path] = []

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).expanduser().resolve())

    cwd = Path.cwd()
    candidates.append(cwd / ".issue_sync" / "config.yml")
    candidates.append(cwd / ".issue_sync" / "config.yaml")
    candidates.append(
        Path.home() / ".config" / "issue_sync" / "config.yml"
    )

    return [p for p in candidates if p.exists()]


# ---------------------------------------------------------------------------
# 3. Config bootstrapping
# ---------------------------------------------------------------------------

_STARTER_CONFIG = """\
# issue-sync configuration
#
# Settings can also be given via environment variables:
#   ISSUE_SYNC_SNAPSHOT, ISSUE_SYNC_MAX_AGE, ISSUE_SYNC_RECURSIVE,
#   ISSUE_SYNC_STATE_DIR, ISSUE_SYNC_SERVER_ID
#
# server:
#   snapshot: issues.yml
#   server_id: https://issues.example.com
#
# projects:
#   app:
#     root: .
#     snapshot: ${APP_SNAPSHOT:-issues.yml}
#
# sync:
#   max_age_seconds: 86400
#   recursive: true
#   state_dir: .issue_sync
#
# logging:
#   level: INFO
#   file: null
"""


def ensure_config(target: Path | None = None) -> Path:
    """Ensure a config file exists, creating a commented starter if needed.

    Args:
        target: Explicit path to create.  Defaults to
            ``CWD / .issue_sync / config.yml``.

    Returns:
        Path to the config file (existing or newly created).
    """
    existing = discover_config_files()
    if existing:
        logger.debug("Config file already exists: %s", existing[0])
        return existing[0]

    config_path = target or Path.cwd() / ".issue_sync" / "config.yml"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", config_path)
    return config_path


# ---------------------------------------------------------------------------
# 4. Hierarchical merge
# ---------------------------------------------------------------------------


def load_yaml_file(path: Path) -> Any:
    """Parse one YAML config file with the safe loader."""
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge all discovered config files.

    Merge strategy ("project wins"):
        Files are loaded from lowest precedence to highest.  Each file's
        top-level keys **replace** (not deep-merge) those from earlier files.

    After merging, env var interpolation is applied to all string values.

    Returns an empty dict when no config files exist (zero-config).
    """
    paths = discover_config_files()

    if not paths:
        logger.debug(
            "No config files found, using zero-config defaults"
        )
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        try:
            data = load_yaml_file(path)
        except Exception:
            logger.exception("Failed to load config file %s", path)
            raise

        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s), skipping",
                path,
                type(data).__name__,
            )

    return _interpolate_recursive(merged)
