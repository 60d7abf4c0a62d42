"""Client runner: the consumer side of a session.

Owns what the session deliberately leaves to its caller: reconnecting with
backoff, keep-alive probes, answering server PINGs, triaging the error
queue, splitting oversized sends and handing messages to the presentation
layer through a message handler.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from ..config.model import ClientConfig
from ..constants import MAX_SHORT_SESSIONS, SHORT_SESSION_SECONDS
from ..errors.handling import is_fatal, log_error
from ..errors.internal import EndOfStream, MessageTooLong
from ..logs.logger import logger
from ..utils.retry import retry_connect
from .channel import ChannelClosed
from .commands import Command
from .keepalive import IRCKeepalive
from .message import Message, parse_message, split_oversized
from .session import Session, connect

MessageHandler = Callable[[Message], Any]
Connector = Callable[..., Awaitable[Session]]


def describe(message: Message) -> str:
    """Render a message for display as ``(SYMBOLIC_NAME) raw``."""
    text = message.raw
    if not text:
        try:
            text = message.serialize()
        except MessageTooLong as e:
            text = e.text
    return f"({message.name}) {text}"


class IRCClient:  # pylint: disable=too-many-instance-attributes
    def __init__(
        self,
        config: ClientConfig,
        message_handler: MessageHandler | None = None,
        *,
        connector: Connector = connect,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.nick = config.nick
        self.message_handler = message_handler
        self.connector = connector
        self.clock = clock
        self.session: Session | None = None
        self.channels: list[str] = list(config.join)
        self.keepalive = IRCKeepalive(config.keepalive_interval, clock=clock)
        self.quitting = False
        self.short_sessions = 0
        self.retry_options: dict[str, Any] = {}

    # ------------------------------------------------------------ connecting

    async def connect(self) -> Session:
        """Establish and register a session, retrying with backoff."""
        cfg = self.config
        logger.log_event(
            "client",
            "connecting",
            nick=self.nick,
            server=cfg.server,
            port=cfg.port,
        )

        async def attempt() -> Session:
            return await self.connector(
                cfg.host_port,
                self.nick,
                cfg.fullname,
                cfg.password or "",
                tls=cfg.tls,
                trust=cfg.trust,
            )

        self.session = await retry_connect(attempt, **self.retry_options)
        self.keepalive.touch()
        logger.log_event(
            "client", "connected", nick=self.nick, server=self.session.server_identity
        )
        for channel in self.channels:
            await self.session.send(Message(command=Command.JOIN, arguments=[channel]))
        return self.session

    async def run(self) -> None:
        """Connect, serve the connection, and reconnect until told to stop.

        A connection that ends within ``SHORT_SESSION_SECONDS`` counts as a
        failure; more than ``MAX_SHORT_SESSIONS`` in a row ends the run.
        """
        while True:
            session = await self.connect()
            begin = self.clock()
            await self.handle_connection(session)
            duration = self.clock() - begin
            logger.log_event(
                "client",
                "disconnected",
                level=logging.WARNING,
                nick=self.nick,
                duration=duration,
            )
            if duration < SHORT_SESSION_SECONDS:
                self.short_sessions += 1
            else:
                self.short_sessions = 0
            if self.quitting:
                break
            if self.short_sessions > MAX_SHORT_SESSIONS:
                logger.log_event(
                    "client",
                    "giving_up",
                    level=logging.ERROR,
                    nick=self.nick,
                    failures=self.short_sessions,
                )
                break

    # ------------------------------------------------------------ connection

    async def handle_connection(self, session: Session) -> None:
        """Serve ``session`` until its inbound queue closes."""
        watcher = asyncio.create_task(self._watch_errors(session), name="irc-error-watch")
        try:
            while True:
                try:
                    msg = await asyncio.wait_for(
                        session.inbound.get(), timeout=self.keepalive.remaining()
                    )
                except TimeoutError:
                    # The loop timer may fire a hair early; wait out the rest.
                    if self.keepalive.is_due():
                        await session.send(
                            self.keepalive.probe(session.server_identity, self.nick)
                        )
                    continue
                except ChannelClosed:
                    break
                self.keepalive.touch()
                await self.handle_message(session, msg)
        finally:
            session.close()
            await watcher

    async def _watch_errors(self, session: Session) -> None:
        async for error in session.errors:
            if isinstance(error, EndOfStream):
                continue
            if isinstance(error, MessageTooLong):
                logger.log_event(
                    "client",
                    "message_truncated",
                    level=logging.WARNING,
                    nick=self.nick,
                    truncated=error.truncated,
                )
                continue
            log_error("Connection error", error)
            if is_fatal(error):
                session.close()

    async def handle_message(self, session: Session, msg: Message) -> None:
        if msg.command == Command.PING:
            await session.send(Message(command=Command.PONG, arguments=list(msg.arguments)))
        elif msg.command == Command.ERROR:
            if not self.quitting:
                logger.log_event(
                    "client", "server_error", level=logging.ERROR, nick=self.nick, raw=msg.raw
                )
            session.close()
        elif msg.command == Command.NICK and msg.origin == self.nick and msg.arguments:
            old, self.nick = self.nick, msg.arguments[0]
            session.nick = self.nick
            logger.log_event("client", "nick_changed", nick=self.nick, old=old, new=self.nick)
        elif msg.command == Command.JOIN and msg.origin == self.nick and msg.arguments:
            self._remember_channel(msg.arguments[0])
        elif msg.command == Command.PART and msg.origin == self.nick and msg.arguments:
            self._forget_channel(msg.arguments[0])
        await self._dispatch(msg)

    def _remember_channel(self, channel: str) -> None:
        if channel.lower() not in (c.lower() for c in self.channels):
            self.channels.append(channel)
            logger.log_event("client", "joined", level=logging.DEBUG, nick=self.nick, target=channel)

    def _forget_channel(self, channel: str) -> None:
        self.channels = [c for c in self.channels if c.lower() != channel.lower()]
        logger.log_event("client", "parted", level=logging.DEBUG, nick=self.nick, target=channel)

    async def _dispatch(self, msg: Message) -> None:
        handler = self.message_handler
        if handler is None:
            return
        try:
            result = handler(msg)
            if inspect.isawaitable(result):
                await result
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "client",
                "handler_error",
                level=logging.ERROR,
                nick=self.nick,
                error=str(e),
                error_type=type(e).__name__,
            )

    # --------------------------------------------------------------- sending

    async def send(self, message: Message) -> bool:
        if self.session is None:
            return False
        return await self.session.send(message)

    async def say(self, target: str, text: str) -> int:
        """PRIVMSG ``text`` to ``target``, split into as many lines as needed.

        Returns the number of messages queued.
        """
        pieces = split_oversized(Message(command=Command.PRIVMSG, arguments=[target, text]))
        if len(pieces) > 1:
            logger.log_event(
                "client", "send_split", level=logging.DEBUG, nick=self.nick, parts=len(pieces)
            )
        sent = 0
        for piece in pieces:
            if await self.send(piece):
                sent += 1
        return sent

    async def send_raw(self, text: str) -> bool:
        """Send a line typed by the user as-is."""
        line = text.lstrip(" \t").rstrip("\r\n")
        if not line:
            logger.log_event("client", "raw_parse_empty", level=logging.DEBUG, nick=self.nick)
            return False
        return await self.send(parse_message(line))

    async def join(self, channel: str) -> bool:
        return await self.send(Message(command=Command.JOIN, arguments=[channel]))

    async def part(self, channel: str) -> bool:
        return await self.send(Message(command=Command.PART, arguments=[channel]))

    async def change_nick(self, nick: str) -> bool:
        return await self.send(Message(command=Command.NICK, arguments=[nick]))

    async def quit(self, reason: str = "") -> bool:
        self.quitting = True
        logger.log_event("client", "quit", nick=self.nick, reason=reason)
        return await self.send(
            Message(command=Command.QUIT, arguments=[reason] if reason else [])
        )


__all__ = ["IRCClient", "describe"]
