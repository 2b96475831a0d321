"""Project logging package.

Contains the structured chat logger and its event template catalog. Avoid
importing stdlib logging through this package name externally.
"""

from .event_catalog import EVENT_TEMPLATES, reload_event_templates  # noqa: F401
from .logger import ChatLogger, logger  # noqa: F401

__all__ = ["ChatLogger", "logger", "EVENT_TEMPLATES", "reload_event_templates"]
