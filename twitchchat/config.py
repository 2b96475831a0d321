"""Client configuration model and environment loader."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import IRC_PORT, IRC_SERVER
from .errors import ConfigError


def normalize_channel(channel: str) -> str:
    """Return the canonical form of a channel name: stripped, no '#', lowercase."""
    return channel.strip().lstrip("#").lower()


class ChatConfig(BaseModel):
    """Connection settings for one chat session.

    Attributes:
        username: Twitch login used for NICK and in the gateway templates.
        token: OAuth credential sent with PASS.
        channel: Optional channel joined as part of the login.
        server: Gateway host name.
        port: Gateway TCP port.
    """

    username: str = Field(min_length=3, max_length=25)
    token: str = Field(min_length=1)
    channel: str | None = None
    server: str = IRC_SERVER
    port: int = Field(default=IRC_PORT, ge=1, le=65535)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("token", mode="before")
    @classmethod
    def ensure_oauth_prefix(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        v = v.strip()
        if not v:
            return v
        return v if v.startswith("oauth:") else f"oauth:{v}"

    @field_validator("channel", mode="before")
    @classmethod
    def validate_channel(cls, v: Any) -> str | None:
        """Strip whitespace and leading '#', lowercase; empty becomes None."""
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("channel must be a string")
        return normalize_channel(v) or None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChatConfig:
        return cls.model_validate(dict(data))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ChatConfig:
        """Build a config from ``TWITCH_*`` environment variables."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {
            "username": env.get("TWITCH_USERNAME", ""),
            "token": env.get("TWITCH_TOKEN", ""),
            "channel": env.get("TWITCH_CHANNEL"),
        }
        if env.get("TWITCH_IRC_SERVER"):
            data["server"] = env["TWITCH_IRC_SERVER"]
        if env.get("TWITCH_IRC_PORT"):
            data["port"] = env["TWITCH_IRC_PORT"]
        return cls.model_validate(data)

    def to_dict(self) -> dict[str, Any]:
        """Dump the config without the credential."""
        return self.model_dump(exclude={"token"}, exclude_none=True)


def load_config(environ: Mapping[str, str] | None = None) -> ChatConfig:
    """Load configuration from the environment.

    Raises:
        ConfigError: If validation fails; the pydantic error list is kept in
            ``data["errors"]``.
    """
    try:
        return ChatConfig.from_env(environ)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(p) for p in err["loc"]) for err in e.errors()
        )
        raise ConfigError(
            f"invalid configuration: {fields}", data={"errors": e.errors()}
        ) from e
