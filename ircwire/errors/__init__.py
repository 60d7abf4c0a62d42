"""Error hierarchy and error reporting helpers."""

from .handling import classify_error, is_fatal, log_error  # noqa: F401
from .internal import (  # noqa: F401
    BareCarriageReturn,
    EmbeddedNul,
    EndOfStream,
    FramingError,
    IRCError,
    MessageTooLong,
    NetworkError,
    RegistrationError,
    TruncatedStream,
    WriteTimeout,
)

__all__ = [
    "IRCError",
    "FramingError",
    "TruncatedStream",
    "BareCarriageReturn",
    "EmbeddedNul",
    "MessageTooLong",
    "EndOfStream",
    "NetworkError",
    "WriteTimeout",
    "RegistrationError",
    "classify_error",
    "is_fatal",
    "log_error",
]
