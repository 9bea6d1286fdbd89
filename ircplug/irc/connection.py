"""Server connection: transport, registration handshake and buffered I/O."""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections.abc import Awaitable, Callable
from typing import Any

from ..constants import (
    IRC_CONNECT_ATTEMPTS,
    IRC_CONNECT_TIMEOUT,
    LINE_TERMINATOR,
    OUTPUT_QUEUE_SIZE,
)
from ..errors.handling import retry_transport
from ..errors.internal import RegistrationError, TransportError
from ..logs.logger import logger
from ..rate.flood import FloodLimiter
from .models import ConnectionState, IRCEvent
from .parser import parse_event, sanitize_line

Opener = Callable[..., Awaitable[tuple[asyncio.StreamReader, Any]]]

_SENDABLE_STATES = frozenset(
    {
        ConnectionState.REGISTERING,
        ConnectionState.REGISTERED,
        ConnectionState.SHUTTING_DOWN,
    }
)


class IRCConnection:  # pylint: disable=too-many-instance-attributes
    """Owns one transport and its read/write tasks.

    Inbound lines are produced by a single reader task into an input queue
    (``read_line``). Outbound lines go through a bounded queue drained by a
    writer task that paces writes with a :class:`FloodLimiter`.
    """

    def __init__(
        self,
        *,
        opener: Opener | None = None,
        flood: FloodLimiter | None = None,
        queue_size: int = OUTPUT_QUEUE_SIZE,
        connect_timeout: float = IRC_CONNECT_TIMEOUT,
        connect_attempts: int = IRC_CONNECT_ATTEMPTS,
    ) -> None:
        self.state = ConnectionState.DISCONNECTED
        self.nick = ""
        self.error: TransportError | None = None
        self.flood = flood or FloodLimiter()
        self.connect_timeout = connect_timeout
        self.connect_attempts = connect_attempts
        self._opener: Opener = opener or asyncio.open_connection
        self._queue_size = queue_size
        self._reader: asyncio.StreamReader | None = None
        self._writer: Any = None
        self._input: asyncio.Queue[str | None] = asyncio.Queue()
        self._output: asyncio.Queue[str | None] = asyncio.Queue(maxsize=queue_size)
        self._reader_task: asyncio.Task[None] | None = None
        self._writer_task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._accepting = False
        self._eof = False

    def _set_state(self, new_state: ConnectionState) -> None:
        if self.state != new_state:
            logger.log_event(
                "irc",
                "state_change",
                level=logging.DEBUG,
                nick=self.nick or None,
                old_state=self.state.name,
                new_state=new_state.name,
            )
            self.state = new_state

    @property
    def connected(self) -> bool:
        return self.state in _SENDABLE_STATES

    # ------------------------------------------------------------------ #
    # Connect / register
    # ------------------------------------------------------------------ #
    async def connect(self, host: str, port: int, tls: bool = False) -> None:
        """Open the transport and start the reader and writer tasks.

        Raises:
            TransportError: If the connection could not be established.
        """
        if self.state != ConnectionState.DISCONNECTED:
            raise RuntimeError(f"cannot connect while {self.state.name}")
        self._set_state(ConnectionState.CONNECTING)
        logger.log_event("irc", "connect_start", host=host, port=port, tls=tls)
        ssl_context = ssl.create_default_context() if tls else None

        async def _open() -> tuple[asyncio.StreamReader, Any]:
            return await asyncio.wait_for(
                self._opener(host, port, ssl=ssl_context),
                timeout=self.connect_timeout,
            )

        try:
            reader, writer = await retry_transport(
                _open, f"connect to {host}:{port}", self.connect_attempts
            )
        except TransportError:
            self._set_state(ConnectionState.DISCONNECTED)
            logger.log_event(
                "irc", "connect_failed", level=logging.ERROR, host=host, port=port
            )
            raise

        self._reader, self._writer = reader, writer
        self._loop = asyncio.get_running_loop()
        self._input = asyncio.Queue()
        self._output = asyncio.Queue(maxsize=self._queue_size)
        self.error = None
        self._eof = False
        self._accepting = True
        self._reader_task = asyncio.create_task(self._read_loop(), name="irc-reader")
        self._writer_task = asyncio.create_task(self._write_loop(), name="irc-writer")
        logger.log_event("irc", "connection_established", level=logging.DEBUG)
        self._set_state(ConnectionState.REGISTERING)

    async def register(
        self,
        nick: str,
        ident: str,
        realname: str,
        on_event: Callable[[IRCEvent], None] | None = None,
        on_nick_change: Callable[[str], None] | None = None,
    ) -> str:
        """Run the NICK/USER handshake until the welcome numeric.

        Every parsed line is handed to ``on_event`` while waiting. On 433 the
        nickname gains one trailing underscore, is reported through
        ``on_nick_change`` and NICK is sent again.

        Returns:
            The nickname the server accepted.

        Raises:
            RegistrationError: If input ends before 001 arrives.
        """
        if self.state != ConnectionState.REGISTERING:
            raise RuntimeError(f"cannot register while {self.state.name}")
        self.nick = nick
        logger.log_event("irc", "registration_start", nick=nick)
        await self.send(f"NICK {nick}")
        await self.send(f"USER {ident} 0 * :{realname}")

        while True:
            line = await self.read_line()
            if line is None:
                cause = self.error
                logger.log_event(
                    "irc",
                    "registration_failed",
                    level=logging.ERROR,
                    nick=self.nick,
                    error=str(cause) if cause else "end of input",
                )
                await self.close()
                raise RegistrationError(
                    f"Connection lost during registration: {cause or 'end of input'}"
                ) from cause
            event = parse_event(line)
            if event is None:
                continue
            if on_event is not None:
                on_event(event)
            if event.command == "433":
                self.nick = f"{self.nick}_"
                logger.log_event(
                    "irc", "nick_in_use", level=logging.WARNING, nick=self.nick
                )
                if on_nick_change is not None:
                    on_nick_change(self.nick)
                await self.send(f"NICK {self.nick}")
            elif event.command == "001":
                self._set_state(ConnectionState.REGISTERED)
                logger.log_event("irc", "registered", nick=self.nick)
                return self.nick

    # ------------------------------------------------------------------ #
    # Input
    # ------------------------------------------------------------------ #
    async def _read_loop(self) -> None:
        assert self._reader is not None
        try:
            while True:
                data = await self._reader.readline()
                if not data:
                    break
                line = data.decode("utf-8", errors="replace").rstrip("\r\n")
                if not line:
                    continue
                logger.log_event(
                    "irc", "raw_in", level=logging.DEBUG, nick=self.nick, raw=line
                )
                await self._input.put(line)
        except (OSError, ValueError) as e:
            if self._accepting:
                self.error = TransportError(f"Read failed: {e}")
                logger.log_event(
                    "irc", "read_error", level=logging.ERROR, nick=self.nick, error=str(e)
                )
        finally:
            self._input.put_nowait(None)

    async def read_line(self) -> str | None:
        """Return the next inbound line, or None once input has ended."""
        if self._eof:
            return None
        line = await self._input.get()
        if line is None:
            self._eof = True
        return line

    # ------------------------------------------------------------------ #
    # Output
    # ------------------------------------------------------------------ #
    async def _write_loop(self) -> None:
        while True:
            line = await self._output.get()
            try:
                if line is None:
                    return
                await self.flood.acquire()
                self._writer.write(f"{line}{LINE_TERMINATOR}".encode())
                await self._writer.drain()
                logger.log_event(
                    "irc", "raw_out", level=logging.DEBUG, nick=self.nick, raw=line
                )
            except (OSError, RuntimeError) as e:
                self.error = TransportError(f"Write failed: {e}")
                self._accepting = False
                logger.log_event(
                    "irc", "write_error", level=logging.ERROR, nick=self.nick, error=str(e)
                )
                self._close_transport()
                return
            finally:
                self._output.task_done()

    def send_line(self, text: str) -> bool:
        """Sanitize ``text`` and queue it for sending.

        Safe to call from the event loop or from worker threads. From a
        worker thread the call blocks until the queue has room.

        Returns:
            True if the line was queued.
        """
        line = sanitize_line(text)
        if not self._accepting or self._loop is None:
            logger.log_event(
                "irc", "send_dropped", level=logging.WARNING, nick=self.nick or None, raw=line
            )
            return False
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            try:
                self._output.put_nowait(line)
            except asyncio.QueueFull:
                logger.log_event(
                    "irc", "output_queue_full", level=logging.WARNING, nick=self.nick, raw=line
                )
                return False
            return True
        future = asyncio.run_coroutine_threadsafe(self._output.put(line), self._loop)
        future.result()
        return True

    async def send(self, text: str) -> bool:
        """Async variant of :meth:`send_line` that waits for queue space."""
        line = sanitize_line(text)
        if not self._accepting:
            logger.log_event(
                "irc", "send_dropped", level=logging.WARNING, nick=self.nick or None, raw=line
            )
            return False
        await self._output.put(line)
        return True

    # ------------------------------------------------------------------ #
    # Shutdown
    # ------------------------------------------------------------------ #
    def begin_shutdown(self) -> None:
        """Enter SHUTTING_DOWN; queued and new lines are still sent."""
        if self.connected:
            self._set_state(ConnectionState.SHUTTING_DOWN)

    async def quit(self, quit_line: str | None = None) -> None:
        """Send ``quit_line`` after everything already queued, then close.

        Closing the transport makes the reader observe end of input, which
        in turn ends :meth:`read_line` consumers.
        """
        if self.state in (ConnectionState.DISCONNECTED, ConnectionState.CONNECTING):
            return
        self.begin_shutdown()
        if self._accepting and quit_line is not None:
            await self.send(quit_line)
        self._accepting = False
        if self._writer_task is not None and not self._writer_task.done():
            await self._output.put(None)
            await self._writer_task
        logger.log_event("irc", "quit_sent", level=logging.DEBUG, nick=self.nick)
        await self.close()

    def _close_transport(self) -> None:
        if self._writer is not None and not self._writer.is_closing():
            self._writer.close()

    async def close(self) -> None:
        """Close the transport without flushing pending output."""
        self._accepting = False
        if self._writer_task is not None and not self._writer_task.done():
            self._writer_task.cancel()
            try:
                await self._writer_task
            except asyncio.CancelledError:
                pass
        if self._writer is not None:
            self._close_transport()
            try:
                await self._writer.wait_closed()
            except (OSError, RuntimeError) as e:
                logger.log_event(
                    "irc", "close_error", level=logging.DEBUG, nick=self.nick, error=str(e)
                )
        if self._reader_task is not None and not self._reader_task.done():
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
        self._writer = None
        self._reader = None
        self._set_state(ConnectionState.DISCONNECTED)
        logger.log_event("irc", "disconnected", level=logging.WARNING, nick=self.nick)
