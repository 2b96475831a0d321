"""IRC subsystem package.

Contains the session state machine, the chat line parser, the transport
contract and the listener plumbing for the Twitch chat gateway.
"""

from .events import ListenerRegistry, StateChange  # noqa: F401
from .models import IrcState, ParsedLine  # noqa: F401
from .parser import parse_line  # noqa: F401
from .session import TwitchChatSession  # noqa: F401
from .transport import StreamTransport, Transport  # noqa: F401

__all__ = [
    "IrcState",
    "ListenerRegistry",
    "ParsedLine",
    "StateChange",
    "StreamTransport",
    "Transport",
    "TwitchChatSession",
    "parse_line",
]
