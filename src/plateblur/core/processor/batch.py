from __future__ import annotations

import logging

from plateblur.core.config import RedactionConfig
from plateblur.core.detector import Detector
from plateblur.core.events import BatchProgress, Emit
from plateblur.core.items import ELIGIBLE_STATUSES, ItemQueue, QueueItem

from .pipeline import process_item

__all__ = [
    "BatchCoordinator",
]

logger = logging.getLogger(__name__)


class BatchCoordinator:
    """
    Последовательная обработка всех PENDING/ERROR элементов очереди.

    Элементы идут строго по одному (следующий стартует только после COMPLETED/ERROR
    предыдущего), чтобы не перегружать удалённый детектор с лимитами запросов.
    Ошибка одного элемента не прерывает пакет.
    """

    def __init__(
        self,
        queue: ItemQueue,
        detector: Detector,
        cfg: RedactionConfig | None = None,
        emit: Emit | None = None,
    ) -> None:
        self._queue = queue
        self._detector = detector
        self._cfg = (cfg or RedactionConfig()).clamp()
        self._emit_cb = emit
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def _emit(self, ev: BatchProgress) -> None:
        if self._emit_cb is None:
            return
        try:
            self._emit_cb(ev)
        except Exception:
            logger.exception("Progress listener failed")

    async def process_one(self, item_id: str) -> QueueItem | None:
        return await process_item(self._queue, item_id, self._detector, self._cfg, self._emit_cb)

    async def process_all(self) -> list[QueueItem]:
        if self._in_progress:
            raise RuntimeError("Пакетная обработка уже запущена")
        self._in_progress = True

        # eligible set is fixed at the start of the run, in queue order
        ids = self._queue.ids_with_status(ELIGIBLE_STATUSES)
        total = len(ids)
        done = 0
        results: list[QueueItem] = []
        logger.info("Batch started: %d item(s)", total)
        self._emit(BatchProgress(in_progress=True, done=0, total=total))
        try:
            for item_id in ids:
                res = await self.process_one(item_id)
                done += 1
                if res is not None:
                    results.append(res)
                self._emit(BatchProgress(in_progress=True, done=done, total=total))
        finally:
            self._in_progress = False
            logger.info("Batch finished: %d/%d item(s)", done, total)
            self._emit(BatchProgress(in_progress=False, done=done, total=total))
        return results
