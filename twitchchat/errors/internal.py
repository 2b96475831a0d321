"""Centralized internal error hierarchy.

These exceptions give semantic categories to failures raised inside the
client. The session never lets them escape to callers of join/leave/send;
they are caught at the session boundary and turned into state transitions.

Classes:
  InternalError        – Base for all internal errors.
  NetworkError         – Transport level failures (open, read, write, close).
  ParsingError         – A line matched the chat signature but not its structure.
  ConfigError          – Invalid or missing configuration.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for transport layer errors.

    Covers writes on a transport that was never opened or was already
    closed, as well as wrapped socket failures.
    """


class ParsingError(InternalError):
    """Exception raised when a raw line cannot be decomposed.

    Only used inside the line parser, which degrades the result instead of
    propagating it.
    """


class ConfigError(InternalError):
    """Exception raised when configuration fails validation."""


__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "ConfigError",
]
