"""Structured logging for sync runs.

Every event emitted while a run is in progress carries the run's ``run_id``
plus whatever context the run bound (page size, poll rounds), so interleaved
runs against the same stores can be told apart in the log stream.
"""

import logging
import sys
import uuid
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from typing import Any, Iterator

import structlog

from recordsync.models.config import LoggingConfig

SYNC_LOGGER_NAME = "recordsync"

_LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 5


def _shared_processors() -> list[Any]:
    return [
        # Run-scoped context bound through sync_run_context()
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ],
        ),
    ]


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    log_file: str | None = None,
) -> None:
    """
    Configure structlog for sync runs.

    Args:
        log_level: Level for the recordsync loggers (DEBUG shows every delivery)
        json_logs: If True, output JSON lines. If False, use the console renderer.
        log_file: Optional path of a rotating log file, in addition to stdout.

    Example:
        >>> configure_logging(log_level="DEBUG", json_logs=False)
        >>> with sync_run_context(page_size=2):
        ...     get_logger().info("sync_all_started")
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", level=numeric_level, stream=sys.stdout)
    logging.getLogger(SYNC_LOGGER_NAME).setLevel(numeric_level)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=_LOG_FILE_MAX_BYTES,
            backupCount=_LOG_FILE_BACKUPS,
        )
        file_handler.setLevel(numeric_level)
        logging.root.addHandler(file_handler)

    processors = _shared_processors()
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging_from_config(config: LoggingConfig) -> None:
    """Configure logging from a validated LoggingConfig."""
    configure_logging(
        log_level=config.log_level,
        json_logs=config.json_logs,
        log_file=config.log_file,
    )


@contextmanager
def sync_run_context(run_id: str | None = None, **context: Any) -> Iterator[str]:
    """
    Bind ``run_id`` and extra context to every event logged inside the block.

    Args:
        run_id: Identifier of the run (a new one is generated if None)
        **context: Additional key/value pairs, e.g. page_size

    Yields:
        The run_id in effect
    """
    run_id = run_id or uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(run_id=run_id, **context):
        yield run_id


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, named "recordsync" when no name is given."""
    return structlog.stdlib.get_logger(name or SYNC_LOGGER_NAME)
