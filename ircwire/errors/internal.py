"""Centralized protocol error hierarchy.

These exceptions give the session loops and their consumers semantic
categories for deciding whether a condition ends a connection. Only raise
these inside protocol/transport boundaries; raw ``OSError`` from the
socket is wrapped in ``NetworkError`` before it reaches an error queue.

Classes:
  IRCError            – Base for all protocol errors.
  FramingError        – The byte stream violated the line grammar.
  TruncatedStream     – Connection ended in the middle of a line.
  BareCarriageReturn  – CR not followed by LF.
  EmbeddedNul         – NUL byte inside a line.
  MessageTooLong      – Line exceeded the 512 byte limit (non-fatal).
  EndOfStream         – Orderly end of the byte stream.
  NetworkError        – Transport failure (reset, refused, closed).
  WriteTimeout        – A flush stalled past the write deadline.
  RegistrationError   – Server rejected the registration handshake.

Each class sets the ``fatal`` flag telling the session whether the loop
that detected it must stop.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ..irc.message import Message


class IRCError(Exception):
    """Base class for all protocol errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
        fatal: Whether the loop that raised this error terminates.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    fatal = True
    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class FramingError(IRCError):
    """Raised when the byte stream cannot be split into protocol lines."""

    @staticmethod
    def unexpected(what: str) -> str:
        return f"unexpected {what} in message stream"


class TruncatedStream(FramingError):
    """Connection ended after part of a line had been received."""

    def __init__(self) -> None:
        super().__init__(self.unexpected("end of file"))


class BareCarriageReturn(FramingError):
    """A carriage return was followed by something other than a line feed."""

    def __init__(self) -> None:
        super().__init__(self.unexpected("carriage return"))


class EmbeddedNul(FramingError):
    """A NUL byte appeared inside a line."""

    def __init__(self) -> None:
        super().__init__(self.unexpected("null"))


class MessageTooLong(FramingError):
    """A line is longer than the protocol allows.

    Raised by the framer for oversized inbound lines (the stream has already
    been resynchronized at the next terminator) and by serialization for
    outbound messages that would not fit.

    Attributes:
        text: The truncated line (framer) or the full candidate line (serializer).
        truncated: Number of bytes that were discarded or that exceed the limit.
    """

    fatal = False

    def __init__(self, text: str, truncated: int) -> None:
        super().__init__(
            f"Message is too long ({truncated} bytes truncated): {text}",
            data={"truncated": truncated},
        )
        self.text = text
        self.truncated = truncated


class EndOfStream(IRCError):
    """The peer closed the stream between two lines."""

    def __init__(self, message: str = "end of stream") -> None:
        super().__init__(message)


class NetworkError(IRCError):
    """Transport level failure while reading from or writing to the peer."""


class WriteTimeout(NetworkError):
    """The peer stopped accepting data for longer than the write deadline."""

    def __init__(self, deadline: float) -> None:
        super().__init__(
            f"write deadline of {deadline:g}s exceeded", data={"deadline": deadline}
        )
        self.deadline = deadline


class RegistrationError(IRCError):
    """The registration handshake did not reach the welcome reply.

    Attributes:
        reply: The server reply that caused the failure, if any.
    """

    def __init__(self, reason: str, *, reply: Message | None = None) -> None:
        data = {"command": reply.command} if reply is not None else None
        super().__init__(reason, data=data)
        self.reply = reply


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
]
