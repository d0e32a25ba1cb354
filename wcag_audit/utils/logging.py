"""Structured logging configuration for the accessibility auditor.

Provides:
- Structured logging with structlog
- Context-aware logging
- Scan lifecycle tracking
"""

import logging
import sys
from contextlib import contextmanager
from typing import Optional

import structlog

from ..config import Settings, get_settings


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Output logs as JSON
        include_timestamp: Include timestamps in logs
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso") if include_timestamp else structlog.processors.TimeStamper(fmt=None),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure logging from LOG_LEVEL and LOG_JSON settings."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)


def get_logger(name: Optional[str] = None, **context) -> structlog.BoundLogger:
    """Get a configured logger with optional context.

    Args:
        name: Logger name
        **context: Additional context to bind

    Returns:
        Configured structlog logger
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


class LogContext:
    """Context manager for scoped logging context.

    Usage:
        with LogContext(scan_id="scan-123", url="https://example.com"):
            logger.info("Retrieving page")
            # All logs within this block have scan_id and url bound
    """

    def __init__(self, **context):
        self.context = context
        self._tokens = None

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._tokens:
            structlog.contextvars.reset_contextvars(**self._tokens)
            self._tokens = None


@contextmanager
def log_operation(
    operation: str,
    logger: Optional[structlog.BoundLogger] = None,
    **context,
):
    """Context manager for logging operation start/end.

    Args:
        operation: Name of the operation
        logger: Optional logger to use
        **context: Additional context

    Yields:
        Dict to store operation results

    Example:
        with log_operation("generate_palette", base_color="#1a365d") as op:
            palette = generate_accessible_palette("#1a365d")
            op["combinations"] = len(palette)
    """
    log = logger or get_logger()
    log = log.bind(operation=operation, **context)

    log.info(f"{operation} started")
    result = {"success": False, "error": None}

    try:
        yield result
        result["success"] = True
        log.info(f"{operation} completed", **result)
    except Exception as e:
        result["error"] = str(e)
        log.error(f"{operation} failed", **result)
        raise


class ScanLogger:
    """Logger specialized for tracking a single scan.

    Records every state transition so a failed scan can report where it
    stopped.
    """

    def __init__(self, scan_id: str, url: str):
        self.log = get_logger("wcag_audit.scan").bind(scan_id=scan_id, url=url)
        self.transitions: list[str] = []

    def transition(self, state: str) -> None:
        self.transitions.append(state)
        self.log.debug("Scan state changed", state=state, step=len(self.transitions))

    def scan_completed(self, issues: int, passes: int, warnings: int, duration_ms: int) -> None:
        self.log.info(
            "Scan completed",
            issues=issues,
            passes=passes,
            warnings=warnings,
            duration_ms=duration_ms,
        )

    def scan_failed(self, kind: str, message: str, last_state: str | None) -> None:
        self.log.error(
            "Scan failed",
            error_kind=kind,
            error=message,
            last_state=last_state,
        )
