import threading

from utils.dispatch import ImmediateDispatcher, QueueDispatcher


def test_immediate_dispatcher_calls_inline():
    calls = []

    ImmediateDispatcher().call_after(calls.append, "now")

    assert calls == ["now"]


def test_queue_dispatcher_defers_until_processed():
    dispatcher = QueueDispatcher()
    calls = []

    dispatcher.call_after(calls.append, 1)
    dispatcher.call_after(calls.append, 2)

    assert calls == []
    assert dispatcher.pending() == 2
    assert dispatcher.process_pending() == 2
    assert calls == [1, 2]
    assert dispatcher.process_pending() == 0


def test_queue_dispatcher_waits_for_first_callback():
    dispatcher = QueueDispatcher()
    calls = []
    timer = threading.Timer(0.05, dispatcher.call_after, args=(calls.append, "late"))
    timer.start()

    processed = dispatcher.process_pending(timeout=2.0)

    timer.join()
    assert processed == 1
    assert calls == ["late"]


def test_queue_dispatcher_survives_failing_callback():
    dispatcher = QueueDispatcher()
    calls = []

    def broken():
        raise RuntimeError("boom")

    dispatcher.call_after(broken)
    dispatcher.call_after(calls.append, "after")

    assert dispatcher.process_pending() == 2
    assert calls == ["after"]


def test_queue_dispatcher_rejects_second_consumer_thread():
    dispatcher = QueueDispatcher()
    dispatcher.process_pending()
    errors = []

    def drain():
        try:
            dispatcher.process_pending()
        except RuntimeError as exc:
            errors.append(exc)

    thread = threading.Thread(target=drain)
    thread.start()
    thread.join()

    assert len(errors) == 1
