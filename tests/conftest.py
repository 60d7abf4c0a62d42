import asyncio
import os
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

# Keep the concise log format regardless of the developer's environment
os.environ.pop("DEBUG", None)


class FakeWriter:
    """In-memory stand-in for ``asyncio.StreamWriter``.

    Written bytes are collected in ``data``. Closing feeds EOF to the paired
    reader, the way a real socket close ends the read side.
    """

    def __init__(self, reader: asyncio.StreamReader | None = None):
        self.reader = reader
        self.data = bytearray()
        self.closed = False
        self.fail_with: BaseException | None = None
        self.stall = False
        self.transport = MagicMock()
        self.transport.abort.side_effect = self._shutdown

    def write(self, data: bytes) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.data.extend(data)

    async def drain(self) -> None:
        if self.stall:
            await asyncio.Event().wait()

    def _shutdown(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.reader is not None and not self.reader.at_eof():
            self.reader.feed_eof()

    def close(self) -> None:
        self._shutdown()

    def is_closing(self) -> bool:
        return self.closed

    async def wait_closed(self) -> None:
        await asyncio.sleep(0)

    def lines(self) -> list[str]:
        return [ln for ln in self.data.decode("utf-8").split("\r\n") if ln]


@pytest_asyncio.fixture
async def stream():
    """A reader fed by the test and a fake writer closing it."""
    reader = asyncio.StreamReader()
    writer = FakeWriter(reader)
    return reader, writer
