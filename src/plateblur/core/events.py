from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, TypeAlias

from plateblur.core.items import ItemStatus

__all__ = [
    "ItemStateChanged",
    "BatchProgress",
    "ProcessingEvent",
    "Emit",
    "EventHub",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ItemStateChanged:
    """Один переход автомата состояний элемента."""

    item_id: str
    status: ItemStatus
    error: str | None = None


@dataclass(frozen=True, slots=True)
class BatchProgress:
    in_progress: bool
    done: int
    total: int

    @property
    def fraction(self) -> float:
        return (self.done / self.total) if self.total > 0 else 0.0


ProcessingEvent: TypeAlias = ItemStateChanged | BatchProgress
Emit: TypeAlias = Callable[[ProcessingEvent], None]


class EventHub:
    """Fan-out of processing events to any number of subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[Emit] = []

    def subscribe(self, listener: Emit) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: ProcessingEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for cb in listeners:
            try:
                cb(event)
            except Exception:
                # a broken subscriber must not break processing
                logger.exception("Event listener %r failed on %r", cb, event)

    __call__ = emit
