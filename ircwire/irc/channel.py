"""Bounded hand-off queue with close and discard semantics.

Session loops talk to each other and to the consumer only through these
queues. Closing is the termination signal: a consumer iterating with
``async for`` stops once the channel is closed and drained.
"""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised by ``get`` once a channel is closed and empty."""


class MessageChannel(Generic[T]):
    """An ``asyncio.Queue`` that can be closed by its producer.

    ``put`` blocks while the channel is full. After ``close`` or ``discard``
    it never blocks and never raises: items are dropped and ``False`` is
    returned. Producers already waiting for room when that happens are
    released with ``False`` as well, so a producer feeding a dead session
    cannot hang.

    Capacity is tracked by a semaphore rather than the queue's own bound, so
    the close marker never takes a producer's slot.
    """

    def __init__(self, maxsize: int = 0, name: str = "") -> None:
        self.name = name
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._slots = asyncio.Semaphore(maxsize) if maxsize > 0 else None
        self._closed = False
        self._discarding = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def discarding(self) -> bool:
        return self._discarding

    def qsize(self) -> int:
        return self._queue.qsize()

    def _stopped(self) -> bool:
        return self._closed or self._discarding

    def _release(self) -> None:
        if self._slots is not None:
            self._slots.release()

    async def put(self, item: T) -> bool:
        if self._stopped():
            return False
        if self._slots is not None:
            await self._slots.acquire()
            if self._stopped():
                # Hand the slot on so the next waiting producer is released too.
                self._slots.release()
                return False
        self._queue.put_nowait(item)
        return True

    async def get(self) -> T:
        """Return the next item.

        Raises:
            ChannelClosed: The channel is closed and nothing is left.
        """
        if self._closed and self._queue.empty():
            raise ChannelClosed(self.name)
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker for any other waiting consumer.
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed(self.name)
        self._release()
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Stop accepting items; queued items remain readable. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._queue.empty():
            # Wake consumers blocked in get().
            self._queue.put_nowait(_CLOSED)
        elif self._slots is not None and self._slots.locked():
            # Producers waiting for room must not outlive the channel.
            self._slots.release()

    def discard(self) -> int:
        """Drop queued items and every later put. Returns how many were dropped."""
        self._discarding = True
        dropped = 0
        marker = False
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            if item is _CLOSED:
                marker = True
            else:
                dropped += 1
                self._release()
        if marker:
            self._queue.put_nowait(_CLOSED)
        return dropped

    def __aiter__(self) -> MessageChannel[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except ChannelClosed:
            raise StopAsyncIteration from None


__all__ = ["ChannelClosed", "MessageChannel"]
