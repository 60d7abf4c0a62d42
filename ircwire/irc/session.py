"""One IRC connection: concurrent read/write loops and registration.

A session owns its connection exclusively. Three tasks run for its whole
life and talk only through ``MessageChannel`` queues:

* the read loop frames and parses lines into ``inbound``;
* the write loop serializes ``outbound`` onto the connection;
* the error multiplexer merges both loops' errors into ``errors``.

Whichever loop stops first closes the connection; the other one then stops
too, every queue is closed, and consumers see the end of iteration.
"""

from __future__ import annotations

import asyncio
import logging
import ssl

from ..constants import (
    CONNECT_TIMEOUT,
    DEFAULT_PORT,
    ERROR_QUEUE_SIZE,
    LINE_TERMINATOR,
    MAX_LINE_LENGTH,
    QUEUE_SIZE,
    WRITE_DEADLINE,
)
from ..errors.internal import (
    IRCError,
    MessageTooLong,
    NetworkError,
    RegistrationError,
    WriteTimeout,
)
from ..logs.logger import logger
from ..utils.helpers import split_host_port
from .channel import MessageChannel
from .commands import REGISTRATION_FAILURES, Command, Reply, command_name
from .framer import LineFramer
from .message import Message, parse_message
from .models import RegistrationState


def _network_error(exc: OSError, direction: str) -> NetworkError:
    err = NetworkError(str(exc) or type(exc).__name__, data={"direction": direction})
    err.__cause__ = exc
    return err


class Session:  # pylint: disable=too-many-instance-attributes
    """A registered (or registering) connection to an IRC server."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        queue_size: int = QUEUE_SIZE,
        error_queue_size: int = ERROR_QUEUE_SIZE,
        write_deadline: float = WRITE_DEADLINE,
        max_line_length: int = MAX_LINE_LENGTH,
    ) -> None:
        self._writer = writer
        self._framer = LineFramer(reader, max_length=max_line_length)
        self.inbound: MessageChannel[Message] = MessageChannel(queue_size, "inbound")
        self.outbound: MessageChannel[Message] = MessageChannel(queue_size, "outbound")
        self.errors: MessageChannel[Exception] = MessageChannel(
            error_queue_size, "errors"
        )
        self._read_errors: MessageChannel[Exception] = MessageChannel(
            error_queue_size, "read_errors"
        )
        self._write_errors: MessageChannel[Exception] = MessageChannel(
            error_queue_size, "write_errors"
        )
        self.write_deadline = write_deadline
        self.server_identity = ""
        self.nick: str | None = None
        self.state = RegistrationState.CONNECTING
        self._tasks: list[asyncio.Task[None]] = []
        self._connection_closed = False

    # ------------------------------------------------------------------ life

    def start(self) -> None:
        """Spawn the read loop, write loop and error multiplexer."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._read_loop(), name="irc-read"),
            asyncio.create_task(self._write_loop(), name="irc-write"),
            asyncio.create_task(self._mux_errors(), name="irc-errors"),
        ]
        logger.log_event("session", "started", level=logging.DEBUG)

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def send(self, message: Message) -> bool:
        """Queue ``message``; False if the session no longer accepts sends."""
        return await self.outbound.put(message)

    def close(self) -> None:
        """Intentional disconnect: write what is queued, then close the connection."""
        logger.log_event(
            "session",
            "closing",
            level=logging.DEBUG,
            nick=self.nick,
            server=self.server_identity,
        )
        self.outbound.close()

    def abort(self) -> None:
        """Tear down without a consumer: unread messages and errors are dropped."""
        self.inbound.discard()
        self.errors.discard()
        self.outbound.close()
        logger.log_event(
            "session",
            "aborted",
            level=logging.DEBUG,
            nick=self.nick,
            server=self.server_identity,
        )

    async def wait_closed(self) -> None:
        """Wait until every loop has exited."""
        if self._tasks:
            await asyncio.gather(*self._tasks)

    async def __aenter__(self) -> Session:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        self.abort()
        await self.wait_closed()

    def _set_state(self, new_state: RegistrationState) -> None:
        if self.state != new_state:
            logger.log_event(
                "session",
                "state_change",
                level=logging.DEBUG,
                nick=self.nick,
                old_state=self.state.name,
                new_state=new_state.name,
            )
            self.state = new_state

    async def _close_connection(self, closer: str, *, abort: bool = False) -> None:
        """Close the connection once; later calls are ignored."""
        if self._connection_closed:
            return
        self._connection_closed = True
        logger.log_event(
            "session",
            "connection_closed",
            level=logging.DEBUG,
            nick=self.nick,
            server=self.server_identity,
            closer=closer,
        )
        if abort:
            # Buffered data would never drain to a stalled peer.
            self._writer.transport.abort()
        else:
            self._writer.close()
        try:
            await asyncio.wait_for(self._writer.wait_closed(), timeout=self.write_deadline)
        except TimeoutError:
            self._writer.transport.abort()
        except OSError as e:
            logger.log_event(
                "session",
                "close_error",
                level=logging.DEBUG,
                nick=self.nick,
                error=str(e),
            )

    # ----------------------------------------------------------------- loops

    async def _read_loop(self) -> None:
        try:
            while True:
                try:
                    line = await self._framer.read_line()
                except MessageTooLong as e:
                    logger.log_event(
                        "session",
                        "message_too_long",
                        level=logging.WARNING,
                        nick=self.nick,
                        server=self.server_identity,
                        truncated=e.truncated,
                    )
                    await self._read_errors.put(e)
                    line = e.text
                except IRCError as e:
                    await self._stop_reading(e)
                    break
                except OSError as e:
                    await self._stop_reading(_network_error(e, "read"))
                    break
                await self.inbound.put(parse_message(line))
        finally:
            self._read_errors.close()
            self.inbound.close()
            # Nothing more can be written once the stream is gone.
            self.outbound.discard()
            self.outbound.close()
            await self._close_connection("read")

    async def _stop_reading(self, error: Exception) -> None:
        logger.log_event(
            "session",
            "read_stopped",
            level=logging.DEBUG,
            nick=self.nick,
            server=self.server_identity,
            error=str(error),
            error_type=type(error).__name__,
        )
        await self._read_errors.put(error)

    async def _write_loop(self) -> None:
        failed = False
        try:
            async for message in self.outbound:
                try:
                    line = message.serialize()
                except MessageTooLong as e:
                    logger.log_event(
                        "session",
                        "send_too_long",
                        level=logging.WARNING,
                        nick=self.nick,
                        server=self.server_identity,
                        truncated=e.truncated,
                        command=message.command,
                    )
                    await self._write_errors.put(e)
                    continue
                error = await self._write_line(line)
                if error is None:
                    continue
                failed = True
                logger.log_event(
                    "session",
                    "write_failed",
                    level=logging.WARNING,
                    nick=self.nick,
                    server=self.server_identity,
                    error=str(error),
                    error_type=type(error).__name__,
                )
                await self._write_errors.put(error)
                break
        finally:
            self._write_errors.close()
            if failed:
                dropped = self.outbound.discard()
                logger.log_event(
                    "session",
                    "write_stopped",
                    level=logging.DEBUG,
                    nick=self.nick,
                    dropped=dropped,
                )
            await self._close_connection("write", abort=failed)

    async def _write_line(self, line: str) -> Exception | None:
        try:
            self._writer.write(line.encode("utf-8") + LINE_TERMINATOR)
            await asyncio.wait_for(self._writer.drain(), timeout=self.write_deadline)
        except TimeoutError:
            return WriteTimeout(self.write_deadline)
        except OSError as e:
            return _network_error(e, "write")
        return None

    async def _mux_errors(self) -> None:
        async def forward(source: MessageChannel[Exception]) -> None:
            async for error in source:
                await self.errors.put(error)

        try:
            await asyncio.gather(
                forward(self._read_errors), forward(self._write_errors)
            )
        finally:
            self.errors.close()

    # ---------------------------------------------------------- registration

    async def register(self, nick: str, fullname: str, password: str = "") -> str:
        """Run the registration handshake and return the server identity.

        Blocks until the welcome reply, a registration failure reply, or the
        end of the inbound stream.

        Raises:
            RegistrationError: The server rejected the registration or the
                connection ended before the welcome reply.
        """
        self.nick = nick
        if password:
            await self.send(Message(command=Command.PASS, arguments=[password]))
        await self.send(Message(command=Command.NICK, arguments=[nick]))
        await self.send(
            Message(command=Command.USER, arguments=[nick, "0", "*", fullname])
        )
        logger.log_event("session", "registration_sent", level=logging.DEBUG, nick=nick)
        self._set_state(RegistrationState.AWAITING_WELCOME)

        async for msg in self.inbound:
            if msg.command in REGISTRATION_FAILURES:
                reason = msg.last_argument or command_name(msg.command)
                self._fail_registration(reason)
                raise RegistrationError(reason, reply=msg)
            if msg.command == Reply.RPL_WELCOME:
                self.server_identity = msg.origin
                self._set_state(RegistrationState.READY)
                logger.log_event(
                    "session", "registered", nick=nick, server=self.server_identity
                )
                return self.server_identity
            if msg.command == Command.PING:
                # Some servers gate the welcome on an echoed PING token.
                await self.send(Message(command=Command.PONG, arguments=list(msg.arguments)))
                logger.log_event(
                    "session", "registration_ping", level=logging.DEBUG, nick=nick
                )

        reason = "unexpected end of stream"
        self._fail_registration(reason)
        raise RegistrationError(reason)

    def _fail_registration(self, reason: str) -> None:
        self._set_state(RegistrationState.FAILED)
        logger.log_event(
            "session",
            "registration_failed",
            level=logging.ERROR,
            nick=self.nick,
            reason=reason,
        )


def _ssl_context(trust: bool) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if trust:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


async def open_session(
    address: str,
    *,
    tls: bool = False,
    trust: bool = False,
    timeout: float = CONNECT_TIMEOUT,
    default_port: int = DEFAULT_PORT,
    **session_options: object,
) -> Session:
    """Open the transport and start the session loops (no registration)."""
    host, port = split_host_port(address, default_port)
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(
                host, port, ssl=_ssl_context(trust) if tls else None
            ),
            timeout=timeout,
        )
    except OSError as e:  # includes TimeoutError
        raise NetworkError(
            f"cannot connect to {host}:{port}: {str(e) or type(e).__name__}",
            data={"host": host, "port": port},
        ) from e
    session = Session(reader, writer, **session_options)  # type: ignore[arg-type]
    session.start()
    return session


async def connect(
    address: str,
    nick: str,
    fullname: str,
    password: str = "",
    *,
    tls: bool = False,
    trust: bool = False,
    timeout: float = CONNECT_TIMEOUT,
    **session_options: object,
) -> Session:
    """Connect to ``address`` (``host[:port]``) and register.

    ``tls`` wraps the connection in TLS; ``trust`` additionally skips
    certificate validation. On a registration failure the session is torn
    down before the error propagates.

    Raises:
        NetworkError: The connection could not be established.
        RegistrationError: The server refused the registration.
    """
    session = await open_session(
        address, tls=tls, trust=trust, timeout=timeout, **session_options
    )
    try:
        await session.register(nick, fullname, password)
    except RegistrationError:
        session.abort()
        await session.wait_closed()
        raise
    return session


__all__ = ["Session", "open_session", "connect"]
