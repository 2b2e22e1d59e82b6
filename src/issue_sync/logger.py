import json
import logging
import os
import sys

DEFAULT_LOG_FILE = "/tmp/issue-sync.log"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter for structured debug output.

    Produces one JSON object per log record with fields: ts, level, logger, msg.
    Exception info is included as an "exc" field when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _formatter(debug_format: str, with_name: bool = False) -> logging.Formatter:
    if debug_format == "json":
        return JsonFormatter(datefmt=_DATEFMT)
    if with_name:
        return logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s %(message)s",
            datefmt=_DATEFMT,
        )
    return logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(message)s", datefmt=_DATEFMT
    )


def setup_logging(
    mode: str = "cli",
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
    level: str | None = None,
) -> None:
    """
    Configure logging based on execution mode.

    Args:
        mode: "background" for file-only logging (the host owns the
            terminal), "cli" for stderr logging.
        debug: If True, overrides LOG_LEVEL to DEBUG.
        log_file: Custom log file path (overrides LOG_FILE env var).
        debug_format: "text" (default) or "json" for structured output.
        level: Level from the config file, used when LOG_LEVEL is unset.

    Environment variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Default: WARNING for background mode, INFO for CLI mode.
        LOG_FILE: Custom log file path for background mode.
                  Default: /tmp/issue-sync.log
    """
    default_level = "WARNING" if mode == "background" else "INFO"
    env_level = os.getenv("LOG_LEVEL", level or default_level).upper()

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, env_level, logging.INFO)

    if mode == "background":
        # Priority: log_file param > LOG_FILE env var > default
        final_log_file = log_file or os.getenv("LOG_FILE", DEFAULT_LOG_FILE)
        file_handler = logging.FileHandler(final_log_file, mode="a")
        file_handler.setFormatter(_formatter(debug_format, with_name=True))
        logging.basicConfig(level=log_level, handlers=[file_handler])
    else:
        handlers: list[logging.Handler] = []
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(_formatter(debug_format))
        handlers.append(stderr_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, mode="a")
            file_handler.setFormatter(
                _formatter(debug_format, with_name=True)
            )
            handlers.append(file_handler)

        logging.basicConfig(level=log_level, handlers=handlers)

    # Silence third-party libs unless DEBUG
    if log_level != logging.DEBUG:
        logging.getLogger("asyncio").setLevel(logging.WARNING)
