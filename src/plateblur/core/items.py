from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable

__all__ = [
    "ItemStatus",
    "ELIGIBLE_STATUSES",
    "IN_FLIGHT_STATUSES",
    "QueueItem",
    "ItemQueue",
    "queue_progress",
]


class ItemStatus(str, Enum):
    PENDING = "PENDING"
    DETECTING = "DETECTING"
    BLURRING = "BLURRING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


# Statuses a batch run picks up (ERROR is re-enterable).
ELIGIBLE_STATUSES = frozenset({ItemStatus.PENDING, ItemStatus.ERROR})
IN_FLIGHT_STATUSES = frozenset({ItemStatus.DETECTING, ItemStatus.BLURRING})


@dataclass(frozen=True, slots=True)
class QueueItem:
    """
    Одно изображение в очереди и состояние его обработки.

    Допустимые комбинации полей проверяются в `__post_init__`:
    - COMPLETED <=> есть `processed`
    - ERROR <=> есть `error`
    `original` никогда не меняется: результат всегда хранится отдельно.
    """

    id: str
    file_name: str
    original: bytes
    status: ItemStatus = ItemStatus.PENDING
    processed: bytes | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.status, ItemStatus):
            object.__setattr__(self, "status", ItemStatus(self.status))
        if self.status is ItemStatus.COMPLETED and self.processed is None:
            raise ValueError("COMPLETED item requires a processed image")
        if self.status is not ItemStatus.COMPLETED and self.processed is not None:
            raise ValueError(f"{self.status.value} item cannot carry a processed image")
        if self.status is ItemStatus.ERROR and not self.error:
            raise ValueError("ERROR item requires an error message")
        if self.status is not ItemStatus.ERROR and self.error is not None:
            raise ValueError(f"{self.status.value} item cannot carry an error message")

    @classmethod
    def new(cls, file_name: str, data: bytes) -> "QueueItem":
        return cls(id=uuid.uuid4().hex, file_name=str(file_name), original=bytes(data))

    @property
    def is_eligible(self) -> bool:
        return self.status in ELIGIBLE_STATUSES


class ItemQueue:
    """
    Упорядоченная очередь элементов, ключ: `QueueItem.id`.

    Все изменения идут через `update()`: слияние полей одного элемента под блокировкой,
    без перезаписи всей коллекции. Обновление удалённого id молча игнорируется.
    """

    def __init__(self, items: Iterable[QueueItem] = ()) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, QueueItem] = {}
        for it in items:
            self.add(it)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return item_id in self._items

    def add(self, item: QueueItem) -> QueueItem:
        with self._lock:
            if item.id in self._items:
                raise ValueError(f"duplicate item id: {item.id}")
            self._items[item.id] = item
        return item

    def extend(self, items: Iterable[QueueItem]) -> None:
        for it in items:
            self.add(it)

    def remove(self, item_id: str) -> QueueItem | None:
        with self._lock:
            return self._items.pop(item_id, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def get(self, item_id: str) -> QueueItem | None:
        with self._lock:
            return self._items.get(item_id)

    def snapshot(self) -> list[QueueItem]:
        """Items in insertion (queue) order."""
        with self._lock:
            return list(self._items.values())

    def ids_with_status(self, statuses: Iterable[ItemStatus]) -> list[str]:
        wanted = frozenset(statuses)
        with self._lock:
            return [i.id for i in self._items.values() if i.status in wanted]

    def update(self, item_id: str, **changes: object) -> QueueItem | None:
        """Merge `changes` into one item; returns the new item or None if the id is gone."""
        with self._lock:
            cur = self._items.get(item_id)
            if cur is None:
                return None
            new = replace(cur, **changes)  # type: ignore[arg-type]
            self._items[item_id] = new
            return new


def queue_progress(items: Iterable[QueueItem]) -> float:
    """Доля завершённых элементов (0..1); для пустой очереди 0."""
    total = 0
    done = 0
    for it in items:
        total += 1
        if it.status is ItemStatus.COMPLETED:
            done += 1
    return (done / total) if total else 0.0
