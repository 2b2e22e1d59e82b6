"""Command-line entry point: run one synchronization pass.

The pass runs on a worker thread so Ctrl-C can request cooperative
cancellation instead of interrupting a file mid-reconciliation.
"""

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path

import yaml
from dotenv import load_dotenv

from . import __version__
from .config import Settings, load_settings
from .config_loader import (
    discover_config_files,
    ensure_config,
    load_hierarchical_config,
)
from .config_schema import LoggingConfig, build_config, to_fallbacks
from .core.progress import LoggingProgressMonitor
from .logger import setup_logging
from .remote.snapshot import SnapshotRegistry
from .resources.filesystem import LocalResource, Workspace
from .sync.job import SynchronizationJob
from .sync.models import JobOutcome, JobStatus, SyncRequest
from .sync.policy import RefreshPolicy
from .sync.reporter import format_outcome, outcome_to_json
from .sync.store import StoreRegistry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_CANCELLED = 130

DEFAULT_PROJECT = "default"


def _stderr_print(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def _parse_projects(values: list[str]) -> dict[str, str]:
    projects: dict[str, str] = {}
    for value in values:
        name, sep, root = value.partition("=")
        if not sep or not name.strip() or not root.strip():
            raise ValueError(
                f"Invalid --project '{value}': expected NAME=ROOT"
            )
        projects[name.strip()] = root.strip()
    return projects


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="issue-sync",
        description="Refresh local issue markers from the issue server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Refresh stale markers of every configured project
  issue-sync

  # Force a refresh of one folder, reporting connection problems
  issue-sync src/ --force

  # Only the files directly given, no folder recursion
  issue-sync src/app.py src/util.py --no-recursive

  # Ad-hoc project and snapshot
  issue-sync --project app=. --snapshot issues.yml --json
        """,
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Files or folders to synchronize (default: every project root)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Refresh every file and fail if the issue server is unreachable",
    )
    parser.add_argument(
        "--no-recursive",
        dest="recursive",
        action="store_false",
        default=None,
        help="Do not descend into folders",
    )
    parser.add_argument(
        "--project",
        action="append",
        default=[],
        metavar="NAME=ROOT",
        help="Declare a project (repeatable; overrides config files)",
    )
    parser.add_argument(
        "--snapshot",
        help="Issue snapshot file (overrides ISSUE_SYNC_SNAPSHOT and config files)",
    )
    parser.add_argument(
        "--server-id", help="Override the issue server identity"
    )
    parser.add_argument(
        "--max-age",
        type=int,
        help="Refresh markers older than this many seconds",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the outcome as JSON"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="List refreshed files and files that could not be synchronized",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--init",
        action="store_true",
        help="Create a starter config file if none exists, then exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"issue-sync version {__version__}",
    )
    return parser


def load_cli_settings(
    args: argparse.Namespace,
) -> tuple[Settings, LoggingConfig]:
    """Merge .env, config files and CLI arguments.

    Returns:
        The settings and the logging section of the config files.

    Raises:
        ValueError: If any source holds an invalid value.
    """
    load_dotenv()
    unified = build_config(load_hierarchical_config())
    settings = load_settings(
        snapshot=args.snapshot,
        server_id=args.server_id,
        max_age_seconds=args.max_age,
        recursive=args.recursive,
        projects=_parse_projects(args.project),
        debug=args.debug,
        yaml_fallbacks=to_fallbacks(unified),
    )
    if not settings.projects:
        settings.projects = {DEFAULT_PROJECT: str(Path.cwd())}
    return settings, unified.logging


def build_job(settings: Settings) -> tuple[SynchronizationJob, Workspace]:
    """Wire the filesystem workspace, snapshot server, and stores."""
    workspace = Workspace(settings.projects, settings.state_dir)
    servers = SnapshotRegistry(
        snapshots={
            name: Path(path)
            for name, path in settings.project_snapshots.items()
        },
        default=Path(settings.snapshot) if settings.snapshot else None,
        server_id=settings.server_id,
    )
    job = SynchronizationJob(
        tree=workspace,
        servers=servers,
        stores=StoreRegistry(settings.state_dir),
        policy=RefreshPolicy.from_settings(settings),
    )
    return job, workspace


def plan_requests(
    workspace: Workspace,
    paths: list[str],
    force: bool,
    recursive: bool,
) -> list[SyncRequest]:
    """Group the targets into one request per project."""
    if paths:
        targets = [workspace.resource(p) for p in paths]
    else:
        targets = [workspace.resource(p.root) for p in workspace.projects]

    grouped: dict[str, list[LocalResource]] = {}
    for target in targets:
        project = workspace.adapt(target)
        if project is None:
            _stderr_print(f"Skipping {target.path}: not inside a project")
            continue
        grouped.setdefault(project.name, []).append(target)

    return [
        SyncRequest(
            resources=tuple(resources),
            force=force,
            recursive_visit=recursive,
            label=f"Synchronize {name}",
        )
        for name, resources in grouped.items()
    ]


def run_pass(
    job: SynchronizationJob,
    request: SyncRequest,
    monitor: LoggingProgressMonitor,
) -> JobOutcome:
    """Run *request* on a worker thread; Ctrl-C cancels cooperatively."""
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(job.run, request, monitor)
        while True:
            try:
                return future.result(timeout=0.2)
            except FutureTimeout:
                continue
            except KeyboardInterrupt:
                _stderr_print("\nCancelling...")
                monitor.cancel()


def exit_code(outcomes: list[JobOutcome]) -> int:
    if any(o.status == JobStatus.FAILED for o in outcomes):
        return EXIT_FAILED
    if any(o.status == JobStatus.CANCELLED for o in outcomes):
        return EXIT_CANCELLED
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run one pass per project, and print the outcome."""
    args = build_parser().parse_args(argv)

    if args.init:
        path = ensure_config()
        print(f"Config file: {path}")
        return EXIT_OK

    try:
        settings, logging_config = load_cli_settings(args)
    except (ValueError, OSError, yaml.YAMLError) as e:
        _stderr_print(f"ERROR: Configuration error: {e}")
        return EXIT_CONFIG

    setup_logging(
        mode="cli",
        debug=settings.debug,
        log_file=args.log_file or logging_config.file,
        level=logging_config.level,
    )
    config_files = discover_config_files()
    if config_files:
        logger.debug("Configuration loaded from: %s", config_files[0])

    job, workspace = build_job(settings)
    requests = plan_requests(
        workspace, args.paths, args.force, settings.recursive
    )

    outcomes: list[JobOutcome] = []
    for request in requests:
        monitor = LoggingProgressMonitor()
        outcome = run_pass(job, request, monitor)
        outcomes.append(outcome)
        if outcome.status == JobStatus.CANCELLED:
            break

    if args.json:
        print(json.dumps([outcome_to_json(o) for o in outcomes], indent=2))
    else:
        for outcome in outcomes:
            print(format_outcome(outcome, verbose=args.verbose))

    return exit_code(outcomes)


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
