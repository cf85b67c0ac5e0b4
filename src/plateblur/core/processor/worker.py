from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import queue
import threading
from typing import Any, Coroutine

from plateblur.core.config import RedactionConfig
from plateblur.core.detector import Detector
from plateblur.core.events import BatchProgress, EventHub, ProcessingEvent
from plateblur.core.items import ItemQueue

from .batch import BatchCoordinator

__all__ = [
    "ProcessingWorker",
]

logger = logging.getLogger(__name__)


class ProcessingWorker:
    """
    Фоновый исполнитель для UI.

    Внутри один daemon-поток с собственным asyncio-циклом: все задачи (пакет и одиночные
    повторы) выполняются на нём кооперативно. События складываются в потокобезопасную
    очередь, UI забирает их через `poll()` из главного потока (Tkinter не потокобезопасен).
    """

    _JOIN_TIMEOUT_S = 2.0

    def __init__(self, items: ItemQueue, detector: Detector, cfg: RedactionConfig | None = None) -> None:
        self._items = items
        self._events: "queue.Queue[ProcessingEvent]" = queue.Queue()
        self.hub = EventHub()
        self.hub.subscribe(self._on_event)
        self.hub.subscribe(self._events.put_nowait)
        self._coordinator = BatchCoordinator(items, detector, cfg, emit=self.hub.emit)
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        # set on submit, cleared once the coordinator reports the run as started
        self._batch_queued = False
        self._batch_future: concurrent.futures.Future | None = None

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            self._loop = asyncio.new_event_loop()
            self._thread = threading.Thread(
                target=self._run_loop,
                args=(self._loop,),
                daemon=True,
                name="ProcessingWorkerThread",
            )
            self._thread.start()

    def stop(self) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is not None:
            loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=self._JOIN_TIMEOUT_S)

    def is_running(self) -> bool:
        t = self._thread
        return bool(t and t.is_alive())

    @property
    def batch_in_progress(self) -> bool:
        return self._batch_queued or self._coordinator.in_progress

    def process_all(self) -> concurrent.futures.Future:
        if self.batch_in_progress:
            raise RuntimeError("Пакетная обработка уже запущена")
        self._batch_queued = True
        fut = self._submit(self._coordinator.process_all())
        self._batch_future = fut
        fut.add_done_callback(self._clear_queued)
        return fut

    def process_item(self, item_id: str) -> concurrent.futures.Future:
        return self._submit(self._coordinator.process_one(item_id))

    def poll(self, max_items: int = 50) -> list[ProcessingEvent]:
        out: list[ProcessingEvent] = []
        for _ in range(max_items):
            try:
                out.append(self._events.get_nowait())
            except queue.Empty:
                break
        return out

    def _on_event(self, ev: ProcessingEvent) -> None:
        if isinstance(ev, BatchProgress) and ev.in_progress:
            self._batch_queued = False

    def _clear_queued(self, fut: concurrent.futures.Future) -> None:
        # covers a run that failed before reporting progress
        if fut is self._batch_future:
            self._batch_queued = False

    def _submit(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        self.start()
        assert self._loop is not None
        fut = asyncio.run_coroutine_threadsafe(coro, self._loop)
        fut.add_done_callback(self._log_failure)
        return fut

    @staticmethod
    def _log_failure(fut: concurrent.futures.Future) -> None:
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            logger.error("Background task failed: %s", exc, exc_info=exc)

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()
