"""Twitch chat (IRC gateway) client.

Exposes the session state machine, the chat line parser and the transport
contract used to talk to ``irc.chat.twitch.tv``.
"""

from .config import ChatConfig, load_config  # noqa: F401
from .irc import (  # noqa: F401
    IrcState,
    ParsedLine,
    StateChange,
    StreamTransport,
    Transport,
    TwitchChatSession,
    parse_line,
)

__all__ = [
    "ChatConfig",
    "IrcState",
    "ParsedLine",
    "StateChange",
    "StreamTransport",
    "Transport",
    "TwitchChatSession",
    "load_config",
    "parse_line",
]
