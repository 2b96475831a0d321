from unittest.mock import patch

import pytest

from twitchchat.irc import IrcState, StateChange
from twitchchat.irc.events import ListenerRegistry


def test_add_is_ordered_and_duplicate_free():
    registry: ListenerRegistry[int] = ListenerRegistry("state")

    def first(_payload):
        pass

    def second(_payload):
        pass

    registry.add(first)
    registry.add(second)
    registry.add(first)

    assert list(registry) == [first, second]
    assert len(registry) == 2


def test_remove_reports_membership():
    registry: ListenerRegistry[int] = ListenerRegistry("state")
    registry.add(print)
    assert registry.remove(print) is True
    assert registry.remove(print) is False
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_dispatch_in_registration_order_with_async_listeners():
    calls = []
    registry: ListenerRegistry[StateChange] = ListenerRegistry("state")

    async def async_listener(change):
        calls.append(("async", change.state))

    registry.add(lambda change: calls.append(("sync", change.state)))
    registry.add(async_listener)
    registry.add(lambda change: calls.append(("last", change.channel)))

    await registry.dispatch(StateChange(IrcState.CHANNEL_JOINING, "room"))

    assert calls == [
        ("sync", IrcState.CHANNEL_JOINING),
        ("async", IrcState.CHANNEL_JOINING),
        ("last", "room"),
    ]


@pytest.mark.asyncio
async def test_failing_listener_is_logged_and_skipped():
    calls = []
    registry: ListenerRegistry[str] = ListenerRegistry("message")

    def broken(_payload):
        raise ValueError("bad listener")

    registry.add(broken)
    registry.add(calls.append)

    with patch("twitchchat.irc.events.logger.log_event") as log_event:
        await registry.dispatch("payload", user="bob")

    assert calls == ["payload"]
    log_event.assert_called_once()
    args, kwargs = log_event.call_args
    assert args[:2] == ("irc", "listener_error")
    assert kwargs["error_type"] == "ValueError"
    assert kwargs["kind"] == "message"
    assert kwargs["user"] == "bob"


def test_state_change_defaults():
    change = StateChange(IrcState.CONNECTED)
    assert change.channel is None
    assert change == StateChange(IrcState.CONNECTED, None)
