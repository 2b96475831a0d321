"""Internal error hierarchy package."""

from .internal import ConfigError, InternalError, NetworkError, ParsingError  # noqa: F401

__all__ = ["ConfigError", "InternalError", "NetworkError", "ParsingError"]
