"""Inactivity tracking and keep-alive probes."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..constants import KEEPALIVE_INTERVAL
from ..logs.logger import logger
from .commands import Command
from .message import Message


class IRCKeepalive:
    """Decides when a quiet connection needs a PING.

    Every inbound message counts as activity. Once ``interval`` seconds pass
    without any, the client sends a probe; a dead peer then surfaces as a
    write failure or end of stream.
    """

    def __init__(
        self,
        interval: float = KEEPALIVE_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self.last_activity = clock()
        self.probes_sent = 0

    def touch(self) -> None:
        self.last_activity = self._clock()

    def idle_for(self) -> float:
        return self._clock() - self.last_activity

    def remaining(self) -> float:
        """Seconds until the next probe is due (never negative)."""
        return max(0.0, self.interval - self.idle_for())

    def is_due(self) -> bool:
        return self.idle_for() >= self.interval

    def probe(self, server_identity: str, nick: str | None = None) -> Message:
        """Build the PING for ``server_identity`` and restart the idle timer."""
        logger.log_event(
            "client",
            "keepalive_ping",
            level=logging.DEBUG,
            nick=nick,
            server=server_identity,
            idle=self.idle_for(),
        )
        self.probes_sent += 1
        self.touch()
        return Message(command=Command.PING, arguments=[server_identity])
