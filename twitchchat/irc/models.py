"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class IrcState(Enum):
    FAILED_CONNECTION = auto()
    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    CHANNEL_JOINING = auto()
    CHANNEL_JOINED = auto()
    CHANNEL_LEAVING = auto()
    CHANNEL_LEFT = auto()


@dataclass(frozen=True, slots=True)
class ParsedLine:
    """One raw server line, optionally decomposed as a channel chat message.

    ``channel``, ``user`` and ``message`` are set together when
    ``is_channel_message`` is true and are all ``None`` otherwise.
    """

    raw: str
    is_channel_message: bool = False
    channel: str | None = None
    user: str | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        fields = (self.channel, self.user, self.message)
        if self.is_channel_message:
            if any(f is None for f in fields):
                raise ValueError("chat line requires channel, user and message")
        elif any(f is not None for f in fields):
            raise ValueError("unstructured line cannot carry chat fields")

    @classmethod
    def unstructured(cls, raw: str) -> ParsedLine:
        return cls(raw=raw)

    @classmethod
    def chat(cls, raw: str, channel: str, user: str, message: str) -> ParsedLine:
        return cls(
            raw=raw,
            is_channel_message=True,
            channel=channel,
            user=user,
            message=message,
        )
