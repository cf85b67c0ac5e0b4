import threading

import pytest

from conftest import FakeDetector
from plateblur.core.events import BatchProgress, ItemStateChanged
from plateblur.core.items import ItemQueue, ItemStatus, QueueItem
from plateblur.core.processor import ProcessingWorker


@pytest.fixture
def worker_factory():
    workers = []

    def make(queue, detector):
        w = ProcessingWorker(queue, detector)
        workers.append(w)
        return w

    yield make
    for w in workers:
        w.stop()


def test_batch_runs_on_background_thread(worker_factory, image_png, plate):
    threads = []
    q = ItemQueue([QueueItem(id="a", file_name="a.png", original=image_png)])
    det = FakeDetector([plate], on_call=lambda _d: threads.append(threading.current_thread()))
    worker = worker_factory(q, det)

    results = worker.process_all().result(timeout=10)

    assert [r.status for r in results] == [ItemStatus.COMPLETED]
    assert worker.is_running()
    assert threads and threads[0] is not threading.current_thread()
    assert not worker.batch_in_progress


def test_poll_drains_events_in_order(worker_factory, image_png, plate):
    q = ItemQueue([QueueItem(id="a", file_name="a.png", original=image_png)])
    worker = worker_factory(q, FakeDetector([plate]))
    worker.process_all().result(timeout=10)

    events = worker.poll()
    assert isinstance(events[0], BatchProgress) and events[0].in_progress
    assert events[-1] == BatchProgress(False, 1, 1)
    states = [e.status for e in events if isinstance(e, ItemStateChanged)]
    assert states == [ItemStatus.DETECTING, ItemStatus.BLURRING, ItemStatus.COMPLETED]
    assert worker.poll() == []


def test_poll_respects_limit(worker_factory, image_png, plate):
    q = ItemQueue([QueueItem(id="a", file_name="a.png", original=image_png)])
    worker = worker_factory(q, FakeDetector([plate]))
    worker.process_all().result(timeout=10)
    assert len(worker.poll(max_items=2)) == 2
    assert len(worker.poll()) == 4


def test_single_retry(worker_factory, image_png):
    q = ItemQueue([QueueItem(id="a", file_name="a.png", original=image_png, status=ItemStatus.ERROR, error="Ошибка")])
    worker = worker_factory(q, FakeDetector([]))
    res = worker.process_item("a").result(timeout=10)
    assert res.error == "Не найден"


def test_concurrent_batch_rejected(worker_factory, image_png, plate):
    gate = threading.Event()
    q = ItemQueue([QueueItem(id="a", file_name="a.png", original=image_png)])
    worker = worker_factory(q, FakeDetector([plate], on_call=lambda _d: gate.wait(5)))
    fut = worker.process_all()
    try:
        assert worker.batch_in_progress
        with pytest.raises(RuntimeError):
            worker.process_all()
    finally:
        gate.set()
    fut.result(timeout=10)


def test_stop_joins_thread(image_png):
    worker = ProcessingWorker(ItemQueue(), FakeDetector([]))
    worker.start()
    assert worker.is_running()
    worker.stop()
    assert not worker.is_running()


def test_flag_cleared_when_finish_event_arrives(worker_factory, image_png, plate):
    q = ItemQueue([QueueItem(id="a", file_name="a.png", original=image_png)])
    worker = worker_factory(q, FakeDetector([plate]))
    seen = []

    def on_event(ev):
        if isinstance(ev, BatchProgress):
            seen.append((ev.in_progress, worker.batch_in_progress))

    worker.hub.subscribe(on_event)
    worker.process_all().result(timeout=10)

    assert seen[0] == (True, True)
    assert seen[-1] == (False, False)


def test_flag_set_between_submit_and_start(worker_factory, image_png, plate):
    gate = threading.Event()
    q = ItemQueue([QueueItem(id="a", file_name="a.png", original=image_png)])
    worker = worker_factory(q, FakeDetector([plate]))
    worker.start()
    # hold the loop so the batch is submitted but not yet started
    worker._loop.call_soon_threadsafe(gate.wait, 5)
    fut = worker.process_all()
    try:
        assert worker.batch_in_progress
    finally:
        gate.set()
    fut.result(timeout=10)
    assert not worker.batch_in_progress
