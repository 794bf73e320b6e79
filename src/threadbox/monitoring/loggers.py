"""
Logging configuration for the inbox core.

Provides component-scoped loggers that append ``key=value`` context to
each record, and a one-call setup for command-line use.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


class ContextLogger:
    """
    Component logger with consistent formatting.

    Records look like ``[component] message | thread_id=3 anchor_id=12``.
    """

    def __init__(self, name: str, component: str):
        """
        Initialize component logger.

        Args:
            name: Logger name (usually the module name)
            component: Component identifier (builder, reconcile, store, ...)
        """
        self.logger = logging.getLogger(name)
        self.component = component

    def info(self, message: str, **context) -> None:
        """Log info message with context."""
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context) -> None:
        """Log warning message with context."""
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context) -> None:
        """Log error message with context."""
        self._log(logging.ERROR, message, context)

    def debug(self, message: str, **context) -> None:
        """Log debug message with context."""
        self._log(logging.DEBUG, message, context)

    def _log(self, level: int, message: str, context: dict) -> None:
        if not self.logger.isEnabledFor(level):
            return
        context_str = " ".join(f"{k}={v}" for k, v in context.items())
        full_message = f"[{self.component}] {message}"
        if context_str:
            full_message += f" | {context_str}"

        self.logger.log(level, full_message)


# Handlers installed by configure_logging, replaced on the next call
_handlers: list[logging.Handler] = []


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> None:
    """
    Configure root logging.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for log output
        format_string: Optional custom format string
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    while _handlers:
        handler = _handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()

    # Log to stderr so command output on stdout stays parseable
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    _handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        _handlers.append(file_handler)

    for handler in _handlers:
        root_logger.addHandler(handler)


def get_logger(name: str, component: str) -> ContextLogger:
    """
    Get component logger.

    Args:
        name: Logger name
        component: Component identifier

    Returns:
        ContextLogger instance
    """
    return ContextLogger(name, component)
