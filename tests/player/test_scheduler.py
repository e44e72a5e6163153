import asyncio

import pytest

from apps.support.video.player.scheduler import AsyncioScheduler, TimerGroup
from tests.player.fakes import ManualScheduler


def test_call_every_rearms_until_cancelled():
    sched = ManualScheduler()
    ticks = []
    handle = sched.call_every(1.0, lambda: ticks.append(sched.now()))

    sched.advance(3.0)
    assert len(ticks) == 3

    handle.cancel()
    sched.advance(5.0)
    assert len(ticks) == 3
    assert sched.pending == 0


def test_timer_group_cancel_all_closes_group():
    sched = ManualScheduler()
    group = TimerGroup(sched)
    fired = []

    group.later(1.0, fired.append, "once")
    group.every(0.5, fired.append, "tick")
    group.blocking(lambda: 42, fired.append, fired.append)
    assert group.active_count() == 3

    group.cancel_all()
    sched.advance(10.0)

    assert fired == []
    assert group.closed
    assert group.later(1.0, fired.append, "late") is None
    assert sched.pending == 0


def test_blocking_result_delivered_on_advance():
    sched = ManualScheduler()
    results, failures = [], []

    sched.run_blocking(lambda: "ok", results.append, failures.append)
    assert results == []

    sched.advance(0)
    assert results == ["ok"]

    def boom():
        raise RuntimeError("down")

    sched.run_blocking(boom, results.append, failures.append)
    sched.advance(0)
    assert isinstance(failures[0], RuntimeError)


def test_asyncio_scheduler_runs_blocking_call_on_loop():
    loop = asyncio.new_event_loop()
    try:
        sched = AsyncioScheduler(loop)
        done = loop.create_future()

        sched.run_blocking(lambda: 7, done.set_result, done.set_exception)
        assert loop.run_until_complete(asyncio.wait_for(done, timeout=5)) == 7

        later = loop.create_future()
        sched.call_later(0.01, later.set_result, "fired")
        assert loop.run_until_complete(asyncio.wait_for(later, timeout=5)) == "fired"
    finally:
        loop.close()


def test_asyncio_timer_group_prunes_fired_handles():
    loop = asyncio.new_event_loop()
    try:
        group = TimerGroup(AsyncioScheduler(loop))
        fired = []

        for i in range(200):
            group.later(0, fired.append, i)
        assert group.active_count() == 200

        loop.run_until_complete(asyncio.sleep(0.05))

        assert len(fired) == 200
        assert group.active_count() == 0

        # next registration drops the finished handles
        group.later(60, fired.append, "late")
        assert len(group._handles) == 1

        group.cancel_all()
    finally:
        loop.close()


def test_asyncio_scheduler_uses_running_loop():
    async def build():
        return AsyncioScheduler(), asyncio.get_running_loop()

    loop = asyncio.new_event_loop()
    try:
        sched, running = loop.run_until_complete(build())
        assert sched._loop is running
    finally:
        loop.close()


def test_asyncio_scheduler_requires_loop_outside_async_context():
    with pytest.raises(RuntimeError):
        AsyncioScheduler()
