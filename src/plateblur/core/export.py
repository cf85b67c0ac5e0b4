from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Iterable

from plateblur.core.config import ExportConfig
from plateblur.core.items import ItemStatus, QueueItem

__all__ = [
    "download_name",
    "completed_items",
    "export_item",
    "export_completed",
]

logger = logging.getLogger(__name__)


def download_name(file_name: str, prefix: str = "blurred_") -> str:
    return f"{prefix}{os.path.basename(file_name)}"


def completed_items(items: Iterable[QueueItem]) -> list[QueueItem]:
    """Items ready to save, in queue order."""
    return [it for it in items if it.status is ItemStatus.COMPLETED and it.processed is not None]


def export_item(item: QueueItem, out_dir: str, prefix: str = "blurred_") -> str:
    """Сохраняет обработанное изображение как `<prefix><имя файла>`; возвращает путь."""
    if item.status is not ItemStatus.COMPLETED or item.processed is None:
        raise ValueError(f"item {item.id} has no processed image")
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    path = os.path.join(out_dir, download_name(item.file_name, prefix))
    with open(path, "wb") as f:
        f.write(item.processed)
    logger.info("Saved %s", path)
    return path


def export_completed(items: Iterable[QueueItem], cfg: ExportConfig) -> list[str]:
    """Сохраняет все COMPLETED элементы с паузой `stagger_s` между файлами."""
    out_dir = (cfg.out_dir or "").strip() or os.getcwd()
    written: list[str] = []
    for it in completed_items(items):
        if written and cfg.stagger_s > 0:
            time.sleep(cfg.stagger_s)
        written.append(export_item(it, out_dir, cfg.prefix))
    return written
