"""Event template catalog.

Templates live in ``event_templates.json`` next to this module, grouped as
``{domain: {action: template}}``, and are flattened into ``EVENT_TEMPLATES``
keyed by ``(domain, action)``.
"""

from __future__ import annotations

import json
import string
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

CATALOG_PATH = Path(__file__).with_name("event_templates.json")
LOAD_ERROR_KEY = ("app", "load_error")

EVENT_TEMPLATES: dict[tuple[str, str], str] = {}

_formatter = string.Formatter()


def _is_well_formed(template: str) -> bool:
    try:
        list(_formatter.parse(template))
    except ValueError:
        return False
    return True


def iter_templates(raw: Any) -> Iterator[tuple[tuple[str, str], str]]:
    """Yield ``((domain, action), template)`` pairs from a decoded catalog.

    Non-string keys or values and templates with broken brace syntax are
    skipped.
    """
    if not isinstance(raw, Mapping):
        return
    for domain, actions in raw.items():
        if not isinstance(domain, str) or not isinstance(actions, Mapping):
            continue
        for action, template in actions.items():
            if (
                isinstance(action, str)
                and isinstance(template, str)
                and _is_well_formed(template)
            ):
                yield (domain, action), template


def read_catalog(path: Path = CATALOG_PATH) -> dict[tuple[str, str], str]:
    """Read a catalog file. Load failures become a single ``app/load_error`` entry."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {LOAD_ERROR_KEY: "Event templates file missing"}
    except (OSError, ValueError) as e:
        return {LOAD_ERROR_KEY: f"Failed to load event templates: {e}"[:200]}
    return dict(iter_templates(raw))


def reload_event_templates(path: Path | None = None) -> int:
    """Replace the catalog contents in place and return the entry count."""
    EVENT_TEMPLATES.clear()
    EVENT_TEMPLATES.update(read_catalog(path or CATALOG_PATH))
    return len(EVENT_TEMPLATES)


reload_event_templates()

__all__ = ["EVENT_TEMPLATES", "read_catalog", "reload_event_templates"]
