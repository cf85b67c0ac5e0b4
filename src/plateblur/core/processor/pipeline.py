from __future__ import annotations

import asyncio
import logging

from plateblur.core.config import RedactionConfig
from plateblur.core.detector import Detector
from plateblur.core.errors import FAILED_MESSAGE, NOT_FOUND_MESSAGE, NoDetectionError, PlateBlurError
from plateblur.core.events import Emit, ItemStateChanged
from plateblur.core.items import IN_FLIGHT_STATUSES, ItemQueue, ItemStatus, QueueItem
from plateblur.core.redaction import redact

__all__ = [
    "process_item",
]

logger = logging.getLogger(__name__)


def _transition(
    queue: ItemQueue,
    item_id: str,
    emit: Emit | None,
    status: ItemStatus,
    *,
    error: str | None = None,
    processed: bytes | None = None,
) -> QueueItem | None:
    item = queue.update(item_id, status=status, error=error, processed=processed)
    if item is None:
        logger.debug("Item %s is no longer queued; dropping %s update", item_id, status.value)
        return None
    if emit is not None:
        try:
            emit(ItemStateChanged(item_id=item_id, status=status, error=error))
        except Exception:
            logger.exception("State listener failed for item %s", item_id)
    return item


async def process_item(
    queue: ItemQueue,
    item_id: str,
    detector: Detector,
    cfg: RedactionConfig | None = None,
    emit: Emit | None = None,
) -> QueueItem | None:
    """
    Прогоняет один элемент: PENDING/ERROR -> DETECTING -> BLURRING -> COMPLETED | ERROR.

    - COMPLETED (и уже обрабатываемые) элементы не трогаем;
    - любая ошибка превращается в ERROR с фиксированным сообщением, исключения наружу не выходят;
    - удаление элемента во время обработки её не прерывает, поздние обновления игнорируются.

    Возвращает итоговое состояние элемента (или None, если он удалён из очереди).
    """
    cfg = cfg or RedactionConfig()
    item = queue.get(item_id)
    if item is None:
        return None
    if item.status is ItemStatus.COMPLETED or item.status in IN_FLIGHT_STATUSES:
        return item

    _transition(queue, item_id, emit, ItemStatus.DETECTING)
    try:
        detections = await asyncio.to_thread(detector.detect_plates, item.original)
        if not detections:
            raise NoDetectionError("detector returned no plates")

        _transition(queue, item_id, emit, ItemStatus.BLURRING)
        result = await asyncio.to_thread(redact, item.original, detections, cfg)
    except NoDetectionError:
        logger.info("No plates found in %s", item.file_name)
        return _transition(queue, item_id, emit, ItemStatus.ERROR, error=NOT_FOUND_MESSAGE)
    except PlateBlurError as e:
        logger.warning("Processing %s failed: %s", item.file_name, e)
        return _transition(queue, item_id, emit, ItemStatus.ERROR, error=FAILED_MESSAGE)
    except Exception:
        logger.warning("Processing %s failed", item.file_name, exc_info=True)
        return _transition(queue, item_id, emit, ItemStatus.ERROR, error=FAILED_MESSAGE)

    logger.info("Redacted %d region(s) in %s", len(detections), item.file_name)
    return _transition(queue, item_id, emit, ItemStatus.COMPLETED, processed=result)
