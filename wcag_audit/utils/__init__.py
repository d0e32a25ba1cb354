"""Utility modules for the accessibility auditor.

Provides:
- Structured logging configuration
"""

from .logging import LogContext, ScanLogger, configure_logging, get_logger, log_operation, setup_logging

__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
    "ScanLogger",
    "log_operation",
    "setup_logging",
]
