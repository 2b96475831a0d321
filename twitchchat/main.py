#!/usr/bin/env python3
"""
Command line entry point: a minimal interactive Twitch chat client.

Reads configuration from ``TWITCH_*`` environment variables, logs state
changes and chat messages, and sends each stdin line to the current channel.
Lines starting with ``/join``, ``/part``, ``/raw`` or ``/quit`` are commands.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import threading

from .config import ChatConfig, load_config
from .errors import ConfigError
from .irc import IrcState, ParsedLine, StateChange, TwitchChatSession
from .logs.logger import logger

_TERMINAL_STATES = (IrcState.FAILED_CONNECTION, IrcState.DISCONNECTED)


def _start_stdin_reader(
    loop: asyncio.AbstractEventLoop, queue: asyncio.Queue[str | None]
) -> threading.Thread:
    """Pump stdin lines into ``queue`` from a daemon thread; ``None`` marks EOF."""

    def pump() -> None:
        for line in sys.stdin:
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(queue.put_nowait, line.rstrip("\r\n"))
        if not loop.is_closed():
            loop.call_soon_threadsafe(queue.put_nowait, None)

    thread = threading.Thread(target=pump, name="stdin-reader", daemon=True)
    thread.start()
    return thread


async def handle_input(session: TwitchChatSession, text: str) -> bool:
    """Apply one line of user input. Returns False when the user asked to quit."""
    command, _, argument = text.partition(" ")
    argument = argument.strip()
    if command == "/quit":
        return False
    if command == "/join" and argument:
        await session.join_room(argument)
    elif command == "/part" and argument:
        await session.leave_room(argument)
    elif command == "/raw" and argument:
        await session.send_raw(argument)
    elif text and not text.startswith("/"):
        await session.send_chat_message(session.last_channel, text)
    else:
        logger.log_event("app", "input_unknown", level=logging.WARNING, text=text)
    return True


async def main(config: ChatConfig | None = None) -> int:
    """Run one interactive session until EOF, /quit or disconnection."""
    logger.log_event("app", "start")
    if config is None:
        try:
            config = load_config()
        except ConfigError as e:
            logger.log_event("app", "config_error", level=logging.ERROR, error=str(e))
            return 1

    stopped = asyncio.Event()

    def on_state(change: StateChange) -> None:
        logger.log_event(
            "app",
            "state",
            user=config.username,
            channel=change.channel,
            state=change.state.name,
        )
        if change.state in _TERMINAL_STATES:
            stopped.set()

    def on_message(parsed: ParsedLine) -> None:
        logger.log_event(
            "chat",
            "privmsg",
            user=config.username,
            channel=parsed.channel,
            author=parsed.user,
            chat_message=parsed.message,
        )

    session = TwitchChatSession.from_config(config)
    session.add_state_listener(on_state)
    session.add_message_listener(on_message)

    queue: asyncio.Queue[str | None] = asyncio.Queue()
    async with session:
        if not await session.connect():
            return 1
        _start_stdin_reader(asyncio.get_running_loop(), queue)
        stop_task = asyncio.create_task(stopped.wait())
        try:
            while True:
                get_task = asyncio.create_task(queue.get())
                done, _ = await asyncio.wait(
                    {get_task, stop_task}, return_when=asyncio.FIRST_COMPLETED
                )
                if get_task not in done:
                    get_task.cancel()
                    break
                line = get_task.result()
                if line is None or not await handle_input(session, line):
                    break
        finally:
            stop_task.cancel()
    logger.log_event("app", "shutdown")
    return 0


def run(argv: list[str] | None = None) -> None:
    """Synchronous entry point for the application."""
    parser = argparse.ArgumentParser(prog="twitchchat", description=__doc__)
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="validate configuration and exit",
    )
    args = parser.parse_args(argv)

    if args.health_check:
        try:
            config = load_config()
        except ConfigError as e:
            logger.log_event("app", "health_failed", level=logging.ERROR, error=str(e))
            sys.exit(1)
        logger.log_event("app", "health_ok", username=config.username)
        sys.exit(0)

    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted", level=logging.WARNING)
        sys.exit(0)
    except Exception as e:  # noqa: BLE001
        logger.log_event(
            "app", "fatal_error", level=logging.CRITICAL, error=str(e), exc_info=True
        )
        sys.exit(1)


if __name__ == "__main__":
    run()
