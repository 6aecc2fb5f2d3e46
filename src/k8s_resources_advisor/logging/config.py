"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

# Log file configuration
LOG_DIR = Path.home() / ".local" / "state" / "k8s-resources"
LOG_FILE = LOG_DIR / "k8s-resources.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5
RETENTION_DAYS = 30

# Handlers installed by configure_logging carry this name so a second call
# (one per CLI invocation in tests) replaces them instead of stacking.
HANDLER_NAME = "k8s-resources"


def _cleanup_old_logs() -> None:
    """Delete log files older than RETENTION_DAYS."""
    if not LOG_DIR.exists():
        return
    cutoff = datetime.now() - timedelta(days=RETENTION_DAYS)
    for log_file in LOG_DIR.glob("k8s-resources.log*"):
        try:
            if datetime.fromtimestamp(log_file.stat().st_mtime) < cutoff:
                log_file.unlink()
        except OSError:
            continue


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _remove_installed_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            root_logger.removeHandler(handler)
            handler.close()


def _setup_file_logging() -> None:
    """Set up rotating file handler for persistent logging."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs()

    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=MAX_LOG_SIZE,
        backupCount=BACKUP_COUNT,
    )
    file_handler.set_name(HANDLER_NAME)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_shared_processors(),
        )
    )

    logging.getLogger().addHandler(file_handler)


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool = False,
) -> None:
    """Configure structured logging for the application.

    Console logs go to stderr so that report output on stdout stays
    machine-readable. File logs are stored at
    ~/.local/state/k8s-resources/k8s-resources.log with rotation
    (10MB max, 5 backups) and 30 day retention cleanup.

    Args:
        verbose: Enable verbose (INFO level) output.
        debug: Enable debug mode (DEBUG level).
        json_output: Output console logs in JSON format.
    """
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    shared_processors = _shared_processors()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.set_name(HANDLER_NAME)
    console_handler.setLevel(log_level)
    if json_output:
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=shared_processors,
        )
    else:
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    show_locals=debug,
                ),
            ),
            foreign_pre_chain=shared_processors,
        )
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    _remove_installed_handlers(root_logger)
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)

    _setup_file_logging()


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a configured logger with optional initial context.

    Args:
        name: Logger name. If None, uses the calling module's name.
        **initial_context: Initial context variables to bind to the logger.

    Returns:
        A bound structlog logger.
    """
    logger: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
