"""Tests for serialized event delivery."""

import threading

import pytest
from reactivex.scheduler import EventLoopScheduler, ImmediateScheduler, ThreadPoolScheduler

from conftest import FakeTransport, Recorder, wait_for
from rxlink import LinkManager
from rxlink.link.dispatcher import EventDispatcher
from rxlink.link.events import ConnectivityChanged, LinkError, MessageReceived, dispatch_to_callback


@pytest.fixture
def dispatcher():
    d = EventDispatcher()
    yield d
    d.dispose()


def test_delivers_in_post_order(dispatcher):
    recorder = Recorder()
    dispatcher.set_callback(recorder)

    posted = [MessageReceived(f"m{i}") for i in range(50)]
    for event in posted:
        dispatcher.post(event)

    assert dispatcher.flush(2.0)
    assert recorder.events == posted


def test_delivery_is_off_the_posting_thread(dispatcher):
    recorder = Recorder()
    dispatcher.set_callback(recorder)

    dispatcher.post(ConnectivityChanged(True))
    dispatcher.flush(2.0)

    assert len(recorder.threads) == 1
    assert threading.get_ident() not in recorder.threads


def test_no_concurrent_callbacks(dispatcher):
    recorder = Recorder()
    dispatcher.set_callback(recorder)

    def produce(tag: str):
        for i in range(25):
            dispatcher.post(MessageReceived(f"{tag}{i}"))

    producers = [threading.Thread(target=produce, args=(tag,)) for tag in "abcd"]
    for t in producers:
        t.start()
    for t in producers:
        t.join()
    dispatcher.flush(5.0)

    assert len(recorder.events) == 100
    assert not recorder.overlapped
    # per-producer order is preserved
    for tag in "abcd":
        texts = [e.text for e in recorder.events if e.text.startswith(tag)]
        assert texts == [f"{tag}{i}" for i in range(25)]


def test_events_without_consumer_are_dropped(dispatcher):
    dispatcher.post(MessageReceived("lost"))
    dispatcher.flush(2.0)

    recorder = Recorder()
    dispatcher.set_callback(recorder)
    dispatcher.post(MessageReceived("kept"))
    dispatcher.flush(2.0)

    assert recorder.events == [MessageReceived("kept")]


def test_observable_and_callback_both_receive(dispatcher):
    recorder = Recorder()
    seen = []
    dispatcher.set_callback(recorder)
    dispatcher.events.subscribe(seen.append)

    dispatcher.post(LinkError("not connected"))
    dispatcher.flush(2.0)

    assert seen == [LinkError("not connected")]
    assert recorder.events == [LinkError("not connected")]


def test_removed_callback_stops_receiving(dispatcher):
    recorder = Recorder()
    dispatcher.set_callback(recorder)
    dispatcher.post(ConnectivityChanged(True))
    dispatcher.flush(2.0)

    dispatcher.set_callback(None)
    dispatcher.post(ConnectivityChanged(False))
    dispatcher.flush(2.0)

    assert recorder.events == [ConnectivityChanged(True)]


def test_failing_callback_does_not_stop_delivery(dispatcher):
    class Flaky(Recorder):
        def on_message_received(self, text):
            if text == "boom":
                raise RuntimeError("handler bug")
            super().on_message_received(text)

    flaky = Flaky()
    dispatcher.set_callback(flaky)

    dispatcher.post(MessageReceived("boom"))
    dispatcher.post(MessageReceived("after"))
    dispatcher.flush(2.0)

    assert flaky.events == [MessageReceived("after")]


def test_dispose_completes_and_drops_later_posts():
    dispatcher = EventDispatcher()
    seen = []
    completed = []
    dispatcher.events.subscribe(seen.append, on_completed=lambda: completed.append(True))

    dispatcher.post(MessageReceived("before"))
    dispatcher.dispose()
    dispatcher.post(MessageReceived("after"))

    assert wait_for(lambda: completed == [True])
    assert seen == [MessageReceived("before")]
    assert dispatcher.flush(0.1)


def test_caller_scheduler_is_left_running():
    scheduler = EventLoopScheduler()
    dispatcher = EventDispatcher(scheduler=scheduler)
    recorder = Recorder()
    dispatcher.set_callback(recorder)

    dispatcher.post(MessageReceived("now"))
    dispatcher.dispose()

    assert recorder.events == [MessageReceived("now")]
    ran = threading.Event()
    scheduler.schedule(lambda _scheduler, _state: ran.set())
    assert ran.wait(2.0)
    scheduler.dispose()


def test_rejects_non_serial_scheduler():
    with pytest.raises(TypeError):
        EventDispatcher(scheduler=ImmediateScheduler())

    with pytest.raises(TypeError):
        LinkManager(FakeTransport(), scheduler=ThreadPoolScheduler(2))


def test_dispatch_to_callback_rejects_unknown_event():
    with pytest.raises(TypeError):
        dispatch_to_callback("not an event", Recorder())  # type: ignore[arg-type]
