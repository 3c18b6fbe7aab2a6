# src/hoist/observers/dispatcher.py
from __future__ import annotations
import logging
from typing import List, Optional, Protocol
from .events import BaseEvent

log = logging.getLogger("hoist")


class Observer(Protocol):
    def notify(self, event: BaseEvent) -> None: ...


class EventBus:
    """Fans installer events out to every observer, in registration order."""

    def __init__(self, observers: Optional[List[Observer]] = None):
        self._observers: List[Observer] = list(observers or [])

    def emit(self, event: BaseEvent) -> None:
        for ob in self._observers:
            try:
                ob.notify(event)
            except Exception:
                # an observer failure never aborts an installation
                log.debug("observer %r failed on %s", ob, type(event).__name__, exc_info=True)
