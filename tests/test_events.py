from plateblur.core.events import BatchProgress, EventHub, ItemStateChanged
from plateblur.core.items import ItemStatus


def test_hub_fans_out_in_subscription_order():
    hub = EventHub()
    seen = []
    hub.subscribe(lambda ev: seen.append(("a", ev)))
    hub.subscribe(lambda ev: seen.append(("b", ev)))
    ev = ItemStateChanged("x", ItemStatus.DETECTING)
    hub(ev)
    assert seen == [("a", ev), ("b", ev)]


def test_unsubscribe_stops_delivery():
    hub = EventHub()
    seen = []
    unsubscribe = hub.subscribe(seen.append)
    hub.emit(BatchProgress(True, 0, 1))
    unsubscribe()
    unsubscribe()
    hub.emit(BatchProgress(False, 1, 1))
    assert len(seen) == 1


def test_failing_listener_does_not_block_others():
    hub = EventHub()
    seen = []

    def broken(_ev):
        raise RuntimeError("boom")

    hub.subscribe(broken)
    hub.subscribe(seen.append)
    hub.emit(BatchProgress(True, 0, 2))
    assert len(seen) == 1


def test_batch_progress_fraction():
    assert BatchProgress(True, 0, 0).fraction == 0.0
    assert BatchProgress(True, 1, 4).fraction == 0.25
    assert BatchProgress(False, 3, 3).fraction == 1.0
