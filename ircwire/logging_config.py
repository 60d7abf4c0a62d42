r"""
Logging configuration module for the ircwire client.

Provides a configurable logging setup using the colorlog library with
structured error logging and per-category error counting.
"""

import atexit
import logging
import os
import sys
import time
from collections import defaultdict
from typing import Any

import colorlog

HANDLER_NAME = "ircwire-console"


class ErrorAggregator:
    """Counts error occurrences per category for the end-of-run summary."""

    def __init__(self, keep: int = 100):
        self.errors: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.keep = keep
        self.start_time = time.time()

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        """Record an error occurrence with context."""
        entries = self.errors[error_type]
        entries.append(
            {"timestamp": time.time(), "message": message, "context": context or {}}
        )
        if len(entries) > self.keep:
            del entries[: len(entries) - self.keep]

    def get_error_summary(self) -> dict[str, Any]:
        summary = {}
        for error_type, occurrences in self.errors.items():
            summary[error_type] = {
                "total_count": len(occurrences),
                "last_occurrence": occurrences[-1] if occurrences else None,
            }
        return summary

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return
        logging.warning("ERROR SUMMARY REPORT")
        for error_type, stats in summary.items():
            logging.warning(f"  {error_type}: {stats['total_count']} total")
            if stats["last_occurrence"]:
                logging.warning(f"    Last: {stats['last_occurrence']['message']}")

    def reset(self) -> None:
        self.errors.clear()
        self.start_time = time.time()


# Global error aggregator instance
error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context and aggregation.

    Args:
        error_type: Category of the error (e.g. 'framing', 'transport').
        message: Descriptive error message.
        exception: The exception that occurred (optional).
        context: Additional context data for debugging.
        level: Logging level (default: ERROR).
    """
    structured_message = f"[{error_type.upper()}] {message}"
    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {exception}"
    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.log(level, structured_message)
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Handles logging configuration using colorlog.

    Supports environment variable configuration for log levels.
    """

    def __init__(self, config=None):
        self.config = config or {}

    def configure(self, debug: bool | None = None) -> None:
        """Configure logging with colored output using colorlog.

        Uses the DEBUG environment variable ('true', '1' or 'yes') unless
        ``debug`` is given explicitly.
        """
        if debug is None:
            debug_env = os.environ.get("DEBUG", "").lower()
            debug = debug_env in ("true", "1", "yes")
        log_level = logging.DEBUG if debug else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={
                "message": {
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                }
            },
            reset=True,
        )

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        handler.set_name(HANDLER_NAME)

        root_logger = logging.getLogger()
        # Reconfiguring replaces our handler and leaves foreign ones alone
        for existing in list(root_logger.handlers):
            if existing.get_name() == HANDLER_NAME:
                root_logger.removeHandler(existing)
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

        # asyncio logs every write to a lost transport at WARNING
        logging.getLogger("asyncio").setLevel(logging.ERROR)

        if self.config.get("summary_at_exit", True):
            atexit.register(self._log_final_error_summary)

    def _log_final_error_summary(self):
        try:
            logging.info("Final error summary before shutdown:")
            error_aggregator.log_summary_report()
        except Exception as e:  # noqa: BLE001
            logging.error(f"Failed to log final error summary: {e}")
