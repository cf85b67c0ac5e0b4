"""
Обработка очереди: автомат состояний элемента, пакетный координатор и фоновый worker для UI.

Публичный API: `process_item`, `BatchCoordinator`, `ProcessingWorker`.
"""

from .batch import BatchCoordinator
from .pipeline import process_item
from .worker import ProcessingWorker

__all__ = [
    "BatchCoordinator",
    "ProcessingWorker",
    "process_item",
]
