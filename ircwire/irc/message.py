"""IRC message model, parsing and serialization."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..constants import MAX_PAYLOAD_LENGTH
from ..errors.internal import MessageTooLong
from .commands import command_name


@dataclass
class Message:
    """The basic unit of communication in the IRC protocol.

    A message parsed from the wire keeps its line in ``raw`` and that text is
    sent verbatim if the message is ever re-serialized. Messages built in
    code leave ``raw`` empty and are serialized from their fields.

    Attributes:
        raw: The original wire line, or empty for synthesized messages.
        origin: Nick or server that originated the message.
        user: User name of the originator (full prefixes only).
        host: Host name of the originator (full prefixes only).
        command: Verb or three-digit numeric reply code.
        arguments: Argument list; only the last may contain spaces.
    """

    command: str = ""
    arguments: list[str] = field(default_factory=list)
    origin: str = ""
    user: str = ""
    host: str = ""
    raw: str = ""

    @property
    def name(self) -> str:
        return command_name(self.command)

    @property
    def last_argument(self) -> str:
        return self.arguments[-1] if self.arguments else ""

    def serialize(self) -> str:
        """Return the wire form of the message without its terminator.

        Raises:
            MessageTooLong: The line would not fit in a protocol message. The
                error carries the candidate line and the number of bytes over
                the limit, which callers can use to split the payload.
        """
        if self.raw:
            line = self.raw.rstrip("\n")
        else:
            line = self._build()
        excess = len(line.encode("utf-8")) - MAX_PAYLOAD_LENGTH
        if excess > 0:
            raise MessageTooLong(line, excess)
        return line

    def _build(self) -> str:
        line = ""
        if self.origin:
            line += ":" + self.origin
            if self.user:
                line += "!" + self.user + "@" + self.host
            line += " "
        line += self.command
        last = len(self.arguments) - 1
        for i, arg in enumerate(self.arguments):
            # The last argument always goes out in trailing form.
            line += (" :" if i == last else " ") + arg
        return line


def _split(text: str, delim: str) -> tuple[str, str]:
    """Split around the first ``delim``; a space delimiter also eats the run of spaces after it."""
    i = text.find(delim)
    if i < 0:
        return text, ""
    if delim != " ":
        return text[:i], text[i + 1 :]
    return text[:i], text[i:].lstrip(" ")


def parse_message(line: str) -> Message:
    """Parse a wire line into a Message.

    Parsing never fails: the grammar is not validated and malformed input
    yields a best-effort message.
    """
    msg = Message(raw=line)
    data = line

    if data.startswith(":"):
        prefix, data = _split(data[1:], " ")
        msg.origin, prefix = _split(prefix, "!")
        msg.user, msg.host = _split(prefix, "@")

    msg.command, data = _split(data, " ")

    while data:
        if data.startswith(":"):
            arg, data = data[1:], ""
        else:
            arg, data = _split(data, " ")
        msg.arguments.append(arg)
    return msg


def serialize_message(message: Message) -> str:
    return message.serialize()


def _utf8_prefix(text: str, budget: int) -> int:
    """Number of characters of ``text`` whose UTF-8 encoding fits in ``budget`` bytes."""
    used = 0
    for i, ch in enumerate(text):
        size = len(ch.encode("utf-8"))
        if used + size > budget:
            return i
        used += size
    return len(text)


def split_oversized(message: Message) -> list[Message]:
    """Split a synthesized message whose last argument is too long.

    Every piece repeats the prefix, command and leading arguments and carries
    the next slice of the last argument. A message that already fits is
    returned unchanged as the only element.

    Raises:
        MessageTooLong: The message has a raw form or no room is left for
            the last argument once the fixed part is accounted for.
    """
    try:
        message.serialize()
        return [message]
    except MessageTooLong:
        if message.raw or not message.arguments:
            raise

    full = message._build()
    head = replace(message, arguments=[*message.arguments[:-1], ""])
    budget = MAX_PAYLOAD_LENGTH - len(head._build().encode("utf-8"))
    if budget <= 0:
        raise MessageTooLong(full, len(full.encode("utf-8")) - MAX_PAYLOAD_LENGTH)

    pieces: list[Message] = []
    rest = message.arguments[-1]
    while rest:
        n = _utf8_prefix(rest, budget)
        if n == 0:  # a single character wider than the budget
            raise MessageTooLong(full, len(rest[0].encode("utf-8")) - budget)
        pieces.append(replace(message, arguments=[*message.arguments[:-1], rest[:n]]))
        rest = rest[n:]
    return pieces


__all__ = ["Message", "parse_message", "serialize_message", "split_oversized"]
