"""Error classification and reporting for session error queues."""

from __future__ import annotations

import logging

from ..logging_config import log_structured_error
from .internal import (
    EndOfStream,
    FramingError,
    IRCError,
    MessageTooLong,
    NetworkError,
    RegistrationError,
)


def classify_error(error: BaseException) -> str:
    """Return the reporting category of an error taken from an error queue."""
    if isinstance(error, FramingError):
        return "framing"
    if isinstance(error, EndOfStream | NetworkError):
        return "transport"
    if isinstance(error, RegistrationError):
        return "registration"
    if isinstance(error, OSError | ConnectionError):
        return "network"
    if isinstance(error, IRCError):
        return "internal"
    return "unknown"


def is_fatal(error: BaseException) -> bool:
    """Whether an error ends the loop that reported it.

    Anything that is not part of the protocol hierarchy is treated as fatal.
    """
    if isinstance(error, IRCError):
        return error.fatal
    return True


def log_error(
    message: str, error: BaseException, context: dict | None = None
) -> None:
    """Log an error message with the associated exception details.

    Non-fatal conditions (oversized lines) are logged at WARNING, the rest
    at ERROR.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    level = logging.ERROR if is_fatal(error) else logging.WARNING
    if isinstance(error, MessageTooLong):
        context = {**(context or {}), "truncated": error.truncated}
    log_structured_error(
        error_type=classify_error(error),
        message=f"{message}: {error}",
        exception=error,  # type: ignore[arg-type]
        context=context,
        level=level,
    )
