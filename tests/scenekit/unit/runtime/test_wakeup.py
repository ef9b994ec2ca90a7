from __future__ import annotations

import threading

from scenekit.runtime.wakeup import WakeupChannel


def test_notifications_coalesce_into_one_wake() -> None:
    hook_calls: list[int] = []
    channel = WakeupChannel(wake_hook=lambda: hook_calls.append(1))

    for _ in range(5):
        channel.notify()

    assert channel.notify_count == 5
    assert hook_calls == [1]
    assert channel.consume()
    assert not channel.consume()
    assert channel.wake_count == 1


def test_wait_times_out_without_notification() -> None:
    assert not WakeupChannel().wait(timeout=0.01)


def test_notify_from_background_thread_wakes_waiter() -> None:
    channel = WakeupChannel()
    started = threading.Event()

    def produce() -> None:
        started.wait(timeout=2.0)
        for _ in range(100):
            channel.notify()

    worker = threading.Thread(target=produce)
    worker.start()
    started.set()
    assert channel.wait(timeout=2.0)
    worker.join(timeout=2.0)

    assert channel.notify_count == 100
    channel.consume()
    assert channel.wake_count == 1


def test_failing_wake_hook_does_not_break_notify() -> None:
    def broken() -> None:
        raise RuntimeError("no window")

    channel = WakeupChannel(wake_hook=broken)
    channel.notify()

    assert channel.pending
