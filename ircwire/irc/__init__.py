"""IRC subsystem package.

Contains the message codec, command vocabulary, stream framer, hand-off
channels, session loops with the registration handshake, keep-alive and the
client runner built on top of them.
"""

from .channel import ChannelClosed, MessageChannel  # noqa: F401
from .client import IRCClient, describe  # noqa: F401
from .commands import COMMAND_NAMES, Command, Reply, command_name  # noqa: F401
from .framer import LineFramer, read_line  # noqa: F401
from .keepalive import IRCKeepalive  # noqa: F401
from .message import (  # noqa: F401
    Message,
    parse_message,
    serialize_message,
    split_oversized,
)
from .models import RegistrationState  # noqa: F401
from .session import Session, connect, open_session  # noqa: F401

__all__ = [
    "COMMAND_NAMES",
    "ChannelClosed",
    "Command",
    "IRCClient",
    "IRCKeepalive",
    "LineFramer",
    "Message",
    "MessageChannel",
    "RegistrationState",
    "Reply",
    "Session",
    "command_name",
    "connect",
    "describe",
    "open_session",
    "parse_message",
    "read_line",
    "serialize_message",
    "split_oversized",
]
