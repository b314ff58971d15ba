import asyncio

from expiry import ExpiryScheduler


async def test_timer_fires_after_timeout(scheduler):
    fired = []
    scheduler.schedule("ABC", fired.append)
    assert scheduler.is_scheduled("ABC")

    await asyncio.sleep(0.15)

    assert fired == ["ABC"]
    assert not scheduler.is_scheduled("ABC")
    assert len(scheduler) == 0


async def test_cancelled_timer_never_fires(scheduler):
    fired = []
    scheduler.schedule("ABC", fired.append)

    assert scheduler.cancel("ABC") is True
    await asyncio.sleep(0.15)

    assert fired == []


async def test_cancel_unknown_code_is_noop(scheduler):
    assert scheduler.cancel("missing") is False


async def test_reschedule_replaces_previous_timer(scheduler):
    first, second = [], []
    scheduler.schedule("ABC", first.append)
    scheduler.schedule("ABC", second.append)
    assert len(scheduler) == 1

    await asyncio.sleep(0.15)

    assert first == []
    assert second == ["ABC"]


async def test_timers_are_independent_per_code(scheduler):
    fired = []
    scheduler.schedule("A", fired.append)
    scheduler.schedule("B", fired.append)
    scheduler.cancel("A")

    await asyncio.sleep(0.15)

    assert fired == ["B"]


async def test_deadline_reported_while_scheduled():
    scheduler = ExpiryScheduler(timeout=300)
    assert scheduler.deadline("ABC") is None

    scheduler.schedule("ABC", lambda code: None)
    assert scheduler.deadline("ABC") is not None

    scheduler.cancel_all()
    assert scheduler.deadline("ABC") is None


async def test_callback_error_does_not_escape(scheduler):
    def boom(code):
        raise RuntimeError("boom")

    scheduler.schedule("ABC", boom)
    await asyncio.sleep(0.15)

    assert not scheduler.is_scheduled("ABC")
