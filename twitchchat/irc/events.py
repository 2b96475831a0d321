"""Listener registries and notification payloads."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..logs.logger import logger
from .models import IrcState

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class StateChange:
    state: IrcState
    channel: str | None = None


class ListenerRegistry(Generic[T]):
    """Ordered, duplicate-free set of callbacks for one event kind.

    Listeners are called in registration order. A listener may be a plain
    function or return an awaitable, which is awaited before the next
    listener runs. Exceptions raised by a listener are logged and do not stop
    the remaining listeners.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._listeners: list[Callable[[T], Any]] = []

    def add(self, listener: Callable[[T], Any]) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove(self, listener: Callable[[T], Any]) -> bool:
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def __len__(self) -> int:
        return len(self._listeners)

    def __iter__(self) -> Iterator[Callable[[T], Any]]:
        return iter(list(self._listeners))

    async def dispatch(self, payload: T, *, user: str | None = None) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:  # noqa: BLE001
                logger.log_event(
                    "irc",
                    "listener_error",
                    level=logging.ERROR,
                    user=user,
                    kind=self.kind,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                    error_type=type(e).__name__,
                )
