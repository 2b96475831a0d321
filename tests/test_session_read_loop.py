"""
Tests for incoming line dispatch on the session read loop.
"""

import asyncio

import pytest

from tests.fixtures.irc_fixtures import WELCOME, drain
from twitchchat.errors import NetworkError
from twitchchat.irc import IrcState, StateChange

NAMES = ":bob.tmi.twitch.tv 353 bob = #chan :bob"
PING = "PING :tmi.twitch.tv"
PONG = "PONG :tmi.twitch.tv"
CHAT = ":alice!alice@alice.tmi.twitch.tv PRIVMSG #chan :hey bob"


@pytest.mark.asyncio
async def test_welcome_transitions_to_connected_once(session, transport, recorder):
    await session.connect()
    transport.feed(WELCOME, WELCOME)
    await drain(session, transport)

    assert recorder.states == [
        IrcState.CONNECTING,
        IrcState.CONNECTED,
        IrcState.DISCONNECTED,
    ]


@pytest.mark.asyncio
async def test_welcome_for_other_casing_is_ignored(session, transport, recorder):
    await session.connect()
    transport.feed(":tmi.twitch.tv 001 BOB :Welcome, GLHF!")
    await drain(session, transport)

    assert recorder.states == [IrcState.CONNECTING, IrcState.FAILED_CONNECTION]


@pytest.mark.asyncio
async def test_ping_answered_once_while_connected(session, transport, recorder):
    await session.connect()
    transport.feed(WELCOME, PING)
    await drain(session, transport)

    assert transport.written.count(PONG) == 1
    assert transport.written[-1] == PONG
    assert recorder.states == [
        IrcState.CONNECTING,
        IrcState.CONNECTED,
        IrcState.DISCONNECTED,
    ]


@pytest.mark.asyncio
async def test_ping_before_welcome_is_not_answered(session, transport):
    await session.connect()
    transport.feed(PING)
    await drain(session, transport)

    assert PONG not in transport.written


@pytest.mark.asyncio
async def test_pong_write_failure_disconnects(session, transport, recorder):
    await session.connect()
    transport.fail_write = lambda line: line == PONG
    task = session.read_task
    transport.feed(WELCOME, PING)
    await asyncio.wait_for(task, timeout=5)

    # The loop stops after the forced disconnect without a second notification.
    assert recorder.states == [
        IrcState.CONNECTING,
        IrcState.CONNECTED,
        IrcState.DISCONNECTED,
    ]


@pytest.mark.asyncio
async def test_names_banner_confirms_last_channel(channel_session, transport, recorder):
    await channel_session.connect()
    transport.feed(WELCOME, NAMES)
    await drain(channel_session, transport)

    assert StateChange(IrcState.CHANNEL_JOINED, "chan") in recorder.changes
    assert recorder.changes[-2] == StateChange(IrcState.CHANNEL_JOINED, "chan")


@pytest.mark.asyncio
async def test_names_banner_for_other_channel_is_ignored(
    channel_session, transport, recorder
):
    await channel_session.connect()
    transport.feed(WELCOME, ":bob.tmi.twitch.tv 353 bob = #elsewhere :bob")
    await drain(channel_session, transport)

    assert IrcState.CHANNEL_JOINED not in recorder.states


@pytest.mark.asyncio
async def test_names_banner_before_welcome_is_ignored(
    channel_session, transport, recorder
):
    await channel_session.connect()
    transport.feed(NAMES)
    await drain(channel_session, transport)

    assert IrcState.CHANNEL_JOINED not in recorder.states


@pytest.mark.asyncio
async def test_chat_messages_reach_message_listeners(session, transport):
    messages = []
    lines = []
    session.add_message_listener(messages.append)
    session.add_line_listener(lines.append)
    await session.connect()
    transport.feed(WELCOME, PING, CHAT, ":tmi.twitch.tv CAP * ACK :twitch.tv/tags")
    await drain(session, transport)

    assert len(messages) == 1
    assert messages[0].user == "alice"
    assert messages[0].channel == "chan"
    assert messages[0].message == "hey bob"
    assert [p.raw for p in lines] == [
        WELCOME,
        PING,
        CHAT,
        ":tmi.twitch.tv CAP * ACK :twitch.tv/tags",
    ]


@pytest.mark.asyncio
async def test_async_message_listener_is_awaited(session, transport):
    seen = []

    async def on_message(parsed):
        await asyncio.sleep(0)
        seen.append(parsed.message)

    session.add_message_listener(on_message)
    await session.connect()
    transport.feed(WELCOME, CHAT)
    await drain(session, transport)

    assert seen == ["hey bob"]


@pytest.mark.asyncio
async def test_read_error_while_connecting_is_failed_connection(
    session, transport, recorder
):
    await session.connect()
    task = session.read_task
    transport.feed(NetworkError("connection reset"))
    await asyncio.wait_for(task, timeout=5)

    assert recorder.states == [IrcState.CONNECTING, IrcState.FAILED_CONNECTION]
    assert session.connecting is False
    assert session.connected is False


@pytest.mark.asyncio
async def test_read_error_while_connected_is_disconnected(session, transport, recorder):
    await session.connect()
    task = session.read_task
    transport.feed(WELCOME, ConnectionResetError("reset by peer"))
    await asyncio.wait_for(task, timeout=5)

    assert recorder.states == [
        IrcState.CONNECTING,
        IrcState.CONNECTED,
        IrcState.DISCONNECTED,
    ]
    assert session.connecting is False
    assert session.connected is False


@pytest.mark.asyncio
async def test_stream_end_before_welcome_is_failed_connection(
    session, transport, recorder
):
    await session.connect()
    await drain(session, transport)

    assert recorder.states == [IrcState.CONNECTING, IrcState.FAILED_CONNECTION]


@pytest.mark.asyncio
async def test_listener_error_does_not_stop_read_loop(session, transport, recorder):
    def broken(_change):
        raise RuntimeError("listener bug")

    session.add_state_listener(broken)
    await session.connect()
    transport.feed(WELCOME, PING)
    await drain(session, transport)

    assert transport.written[-1] == PONG
    assert recorder.states[-1] == IrcState.DISCONNECTED


@pytest.mark.asyncio
async def test_process_line_none_after_teardown_emits_nothing(session, recorder):
    await session._process_line(None)  # noqa: SLF001
    assert recorder.changes == []
