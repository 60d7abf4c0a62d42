"""Recovers protocol lines from a byte stream.

The framer keeps no state between calls beyond the position of the
underlying source, so a failed call leaves the stream either resynchronized
at the next line (oversized lines) or unusable (every other error).
"""

from __future__ import annotations

from typing import Protocol

from ..constants import LINE_TERMINATOR, MAX_LINE_LENGTH
from ..errors.internal import (
    BareCarriageReturn,
    EmbeddedNul,
    EndOfStream,
    MessageTooLong,
    TruncatedStream,
)

CR, LF, NUL = LINE_TERMINATOR[0], LINE_TERMINATOR[1], 0


class ByteSource(Protocol):
    """Anything with an awaitable ``read`` returning b"" at end of stream."""

    async def read(self, n: int = -1) -> bytes: ...


class LineFramer:
    """Reads CR LF terminated lines of at most ``max_length`` bytes."""

    def __init__(
        self,
        source: ByteSource,
        *,
        max_length: int = MAX_LINE_LENGTH,
        encoding: str = "utf-8",
    ) -> None:
        self.source = source
        self.max_length = max_length
        self.encoding = encoding

    async def _read_byte(self) -> int | None:
        data = await self.source.read(1)
        return data[0] if data else None

    def _decode(self, data: bytes | bytearray) -> str:
        return bytes(data).decode(self.encoding, errors="replace")

    async def read_line(self) -> str:
        """Return the next non-empty line without its terminator.

        Bare line feeds are dropped and empty lines skipped.

        Raises:
            EndOfStream: The stream ended cleanly between lines.
            TruncatedStream: The stream ended inside a line.
            EmbeddedNul: A NUL byte was read.
            BareCarriageReturn: A CR was not followed by LF.
            MessageTooLong: The line did not fit; the rest of it has been
                discarded up to and including its terminator.
        """
        buf = bytearray()
        cutoff = self.max_length - len(LINE_TERMINATOR)
        while True:
            c = await self._read_byte()
            if c is None:
                if buf:
                    raise TruncatedStream()
                raise EndOfStream()
            if c == NUL:
                raise EmbeddedNul()
            if c == LF:
                continue
            if c == CR:
                c = await self._read_byte()
                if c is None:
                    raise TruncatedStream()
                if c != LF:
                    raise BareCarriageReturn()
                if not buf:
                    continue
                return self._decode(buf)
            if len(buf) >= cutoff:
                discarded = await self._discard_line()
                raise MessageTooLong(self._decode(buf[:-1]), discarded + 1)
            buf.append(c)

    async def _discard_line(self) -> int:
        """Skip through the next terminator.

        Returns the number of bytes read, not counting the final LF. If the
        stream ends first, every byte read is counted.
        """
        count = 0
        last: int | None = None
        while True:
            c = await self._read_byte()
            if c is None:
                return count
            count += 1
            if last == CR and c == LF:
                return count - 1
            last = c


async def read_line(source: ByteSource) -> str:
    """Read one line from ``source`` with the protocol's default limits."""
    return await LineFramer(source).read_line()


__all__ = ["ByteSource", "LineFramer", "read_line"]
