"""Chat session state machine and command surface."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Callable
from typing import Any

from ..config import ChatConfig, normalize_channel
from ..constants import (
    CHAT_MESSAGE_TEMPLATE,
    IRC_PORT,
    IRC_SERVER,
    NAMES_TEMPLATE,
    PING_LINE,
    PONG_LINE,
    WELCOME_TEMPLATE,
)
from ..logs.logger import logger
from .events import ListenerRegistry, StateChange
from .models import IrcState, ParsedLine
from .parser import parse_line
from .transport import StreamTransport, Transport


class TwitchChatSession:  # pylint: disable=too-many-instance-attributes
    """One login to the Twitch chat gateway.

    State changes and received chat messages are delivered to registered
    listeners. Operations that write to the server report failure with a
    ``False`` return and a ``DISCONNECTED`` notification; they never raise
    I/O errors to the caller. Callers decide usability from ``connected``.

    Writes are not serialized: issue join/leave/send calls from one
    coroutine at a time.
    """

    def __init__(
        self,
        username: str,
        token: str,
        channel: str | None = None,
        *,
        server: str = IRC_SERVER,
        port: int = IRC_PORT,
        transport: Transport | None = None,
    ) -> None:
        self.username = username
        self.token = token
        self.server = server
        self.port = port
        self.transport: Transport = transport or StreamTransport()
        self.last_channel = ""
        self._channels: list[str] = []
        if channel and normalize_channel(channel):
            self.last_channel = normalize_channel(channel)
            self._channels.append(self.last_channel)
        self.connecting = False
        self.connected = False
        self.read_task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._welcome_line = WELCOME_TEMPLATE.format(username=username)
        self.state_listeners: ListenerRegistry[StateChange] = ListenerRegistry("state")
        self.message_listeners: ListenerRegistry[ParsedLine] = ListenerRegistry(
            "message"
        )
        self.line_listeners: ListenerRegistry[ParsedLine] = ListenerRegistry("line")

    @classmethod
    def from_config(
        cls, config: ChatConfig, transport: Transport | None = None
    ) -> TwitchChatSession:
        return cls(
            config.username,
            config.token,
            config.channel,
            server=config.server,
            port=config.port,
            transport=transport,
        )

    @property
    def channels(self) -> list[str]:
        return list(self._channels)

    # Listener registration

    def add_state_listener(self, listener: Callable[[StateChange], Any]) -> None:
        self.state_listeners.add(listener)

    def remove_state_listener(self, listener: Callable[[StateChange], Any]) -> bool:
        return self.state_listeners.remove(listener)

    def add_message_listener(self, listener: Callable[[ParsedLine], Any]) -> None:
        """Register a callback for channel chat messages."""
        self.message_listeners.add(listener)

    def remove_message_listener(self, listener: Callable[[ParsedLine], Any]) -> bool:
        return self.message_listeners.remove(listener)

    def add_line_listener(self, listener: Callable[[ParsedLine], Any]) -> None:
        """Register a callback for every line read from the server."""
        self.line_listeners.add(listener)

    def remove_line_listener(self, listener: Callable[[ParsedLine], Any]) -> bool:
        return self.line_listeners.remove(listener)

    # Connection lifecycle

    async def connect(self) -> bool:
        """Open the transport, log in and start the read loop.

        Returns:
            True when the login lines were written and the read loop started.
            Login success itself is reported later as ``CONNECTED``.
        """
        if self.connecting or self.connected:
            logger.log_event(
                "irc", "connect_refused", level=logging.WARNING, user=self.username
            )
            return False
        # Claim the session before the first suspension point.
        self.connecting = True
        await self._release()
        self._loop = asyncio.get_running_loop()
        logger.log_event(
            "irc",
            "connect_start",
            user=self.username,
            server=self.server,
            port=self.port,
        )
        try:
            await self.transport.open(self.server, self.port)
            await self._emit_state(IrcState.CONNECTING)
            await self._login()
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "irc",
                "connect_failed",
                level=logging.ERROR,
                user=self.username,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.connecting = False
            self.connected = False
            await self._release()
            await self._emit_state(IrcState.DISCONNECTED)
            return False
        if not self.connecting:
            # close() ran during setup.
            await self._release()
            return False
        self.read_task = asyncio.create_task(
            self._read_loop(), name=f"twitchchat-read-{self.username}"
        )
        return True

    def begin_connection(self) -> asyncio.Task[bool]:
        """Schedule ``connect()`` on the running loop without awaiting it."""
        return asyncio.get_running_loop().create_task(self.connect())

    async def _login(self) -> None:
        await self.transport.write_line(f"PASS {self.token}")
        await self.transport.write_line(f"NICK {self.username}")
        if self.last_channel:
            await self.transport.write_line(f"JOIN #{self.last_channel}")
            await self._emit_state(IrcState.CHANNEL_JOINING, self.last_channel)
        await self.transport.flush()
        logger.log_event(
            "irc",
            "login_sent",
            level=logging.DEBUG,
            user=self.username,
            channel=self.last_channel,
        )

    async def close(self) -> None:
        """Stop the read loop and release the transport. Safe to repeat."""
        self.connecting = False
        self.connected = False
        if await self._release():
            logger.log_event("irc", "closed", user=self.username)

    def close_threadsafe(self) -> concurrent.futures.Future[None]:
        """Schedule ``close()`` from a thread that does not run the event loop."""
        if self._loop is None:
            done: concurrent.futures.Future[None] = concurrent.futures.Future()
            done.set_result(None)
            return done
        return asyncio.run_coroutine_threadsafe(self.close(), self._loop)

    async def __aenter__(self) -> TwitchChatSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _release(self) -> bool:
        released = False
        task = self.read_task
        self.read_task = None
        if task is not None:
            released = True
            # A listener running on the read task may close the session; the
            # loop then exits on its own once it sees it was detached.
            if task is not asyncio.current_task() and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        if self.transport.is_open:
            released = True
            await self.transport.close()
        return released

    # Commands

    async def join_room(self, channel: str, leave_previous: bool = False) -> bool:
        channel = normalize_channel(channel)
        if not channel or channel in self._channels:
            logger.log_event(
                "irc",
                "join_rejected",
                level=logging.DEBUG,
                user=self.username,
                channel=channel,
            )
            return False
        if leave_previous:
            for name in list(self._channels):
                if not await self.leave_room(name):
                    return False
            self._channels.clear()
        if not await self._write(f"JOIN #{channel}"):
            return False
        logger.log_event("irc", "join_sent", user=self.username, channel=channel)
        await self._emit_state(IrcState.CHANNEL_JOINING, channel)
        self.last_channel = channel
        self._channels.append(channel)
        return True

    async def leave_room(self, channel: str) -> bool:
        channel = normalize_channel(channel)
        if channel not in self._channels:
            logger.log_event(
                "irc",
                "part_rejected",
                level=logging.DEBUG,
                user=self.username,
                channel=channel,
            )
            return False
        if not await self._write(f"PART #{channel}"):
            return False
        logger.log_event("irc", "part_sent", user=self.username, channel=channel)
        await self._emit_state(IrcState.CHANNEL_LEAVING, channel)
        if channel in self._channels:
            self._channels.remove(channel)
        return True

    async def send_raw(self, line: str) -> bool:
        return await self._write(line)

    async def send_chat_message(self, channel: str, text: str) -> bool:
        channel = normalize_channel(channel)
        if channel not in self._channels:
            logger.log_event(
                "irc",
                "chat_rejected",
                level=logging.WARNING,
                user=self.username,
                channel=channel,
            )
            return False
        return await self.send_raw(
            CHAT_MESSAGE_TEMPLATE.format(
                username=self.username, channel=channel, text=text
            )
        )

    async def _write(self, line: str) -> bool:
        try:
            await self.transport.write_line(line)
            await self.transport.flush()
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "irc",
                "send_failed",
                level=logging.ERROR,
                user=self.username,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.connected = False
            self.connecting = False
            await self._emit_state(IrcState.DISCONNECTED)
            return False
        return True

    # Incoming lines

    async def _read_loop(self) -> None:
        logger.log_event(
            "irc", "read_loop_start", level=logging.DEBUG, user=self.username
        )
        try:
            while (self.connecting or self.connected) and (
                self.read_task is asyncio.current_task()
            ):
                try:
                    line = await self.transport.read_line()
                except Exception as e:  # noqa: BLE001
                    logger.log_event(
                        "irc",
                        "read_error",
                        level=logging.WARNING,
                        user=self.username,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    line = None
                await self._process_line(line)
        finally:
            logger.log_event(
                "irc", "read_loop_end", level=logging.DEBUG, user=self.username
            )

    async def _process_line(self, line: str | None) -> None:
        if line is None:
            await self._end_session()
            return
        logger.log_event("irc", "raw", level=logging.DEBUG, user=self.username, raw=line)
        parsed = parse_line(line)
        await self.line_listeners.dispatch(parsed, user=self.username)

        if not self.connected and line == self._welcome_line:
            self.connected = True
            logger.log_event("irc", "welcome", user=self.username)
            await self._emit_state(IrcState.CONNECTED)
            return
        if self.connected and line == PING_LINE:
            logger.log_event("irc", "ping", level=logging.DEBUG, user=self.username)
            await self.send_raw(PONG_LINE)
            return
        if self.connected and line == self._names_line():
            logger.log_event(
                "irc", "names", user=self.username, channel=self.last_channel
            )
            await self._emit_state(IrcState.CHANNEL_JOINED, self.last_channel)
            return
        if parsed.is_channel_message:
            logger.log_event(
                "irc",
                "privmsg",
                level=logging.DEBUG,
                user=self.username,
                channel=parsed.channel,
                author=parsed.user,
                chat_message=parsed.message,
            )
            await self.message_listeners.dispatch(parsed, user=self.username)

    async def _end_session(self) -> None:
        # Already torn down by a failed write or by close().
        if not (self.connecting or self.connected):
            return
        failed = self.connecting and not self.connected
        self.connecting = False
        self.connected = False
        logger.log_event(
            "irc", "stream_closed", level=logging.WARNING, user=self.username
        )
        await self._emit_state(
            IrcState.FAILED_CONNECTION if failed else IrcState.DISCONNECTED
        )

    def _names_line(self) -> str:
        return NAMES_TEMPLATE.format(username=self.username, channel=self.last_channel)

    async def _emit_state(self, state: IrcState, channel: str | None = None) -> None:
        logger.log_event(
            "irc",
            "state_change",
            level=logging.DEBUG,
            user=self.username,
            channel=channel,
            state=state.name,
        )
        await self.state_listeners.dispatch(
            StateChange(state, channel), user=self.username
        )
