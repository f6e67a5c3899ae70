"""Tests for the fixed-interval polling coordinator."""

from __future__ import annotations

import asyncio

import pytest

from vbox_tools.services.polling import PollState, poll_until_value


class Fetcher:
    """Returns None until attempt *ready_on*, then *value*."""

    def __init__(self, ready_on: int | None = None, value: str = "10.0.2.15") -> None:
        self.ready_on = ready_on
        self.value = value
        self.attempts = 0
        self.times: list[float] = []

    async def __call__(self):
        self.attempts += 1
        self.times.append(asyncio.get_running_loop().time())
        if self.ready_on is not None and self.attempts >= self.ready_on:
            return self.value
        return None


class TestPollState:
    def test_unbounded_always_retries(self):
        state = PollState(-1, 1.0, clock=lambda: 1000.0)
        assert state.unbounded
        assert state.deadline is None
        assert state.remaining() is None
        assert state.should_retry()

    def test_gives_up_within_one_interval(self):
        now = [0.0]
        state = PollState(3.0, 1.0, clock=lambda: now[0])
        assert state.should_retry()
        now[0] = 1.9
        assert state.should_retry()
        now[0] = 2.0
        assert not state.should_retry()
        assert state.remaining() == pytest.approx(1.0)

    def test_deadline_fixed_at_start(self):
        now = [10.0]
        state = PollState(5.0, 1.0, clock=lambda: now[0])
        now[0] = 12.0
        assert state.deadline == 15.0
        assert state.remaining() == pytest.approx(3.0)


@pytest.mark.asyncio
async def test_value_on_first_attempt():
    fetch = Fetcher(ready_on=1)
    assert await poll_until_value(fetch, timeout=5, interval=1.0) == "10.0.2.15"
    assert fetch.attempts == 1


@pytest.mark.asyncio
async def test_short_timeout_gives_up_without_sleeping():
    fetch = Fetcher()
    loop = asyncio.get_running_loop()
    start = loop.time()
    assert await poll_until_value(fetch, timeout=0.5, interval=1.0) is None
    assert fetch.attempts == 1
    assert loop.time() - start < 1.0


@pytest.mark.asyncio
async def test_unbounded_resolves_on_third_attempt():
    fetch = Fetcher(ready_on=3)
    result = await poll_until_value(fetch, timeout=-1, interval=0.05)
    assert result == "10.0.2.15"
    assert fetch.attempts == 3
    gaps = [b - a for a, b in zip(fetch.times, fetch.times[1:])]
    assert all(gap >= 0.04 for gap in gaps)


@pytest.mark.asyncio
async def test_bounded_wait_exhausts():
    fetch = Fetcher()
    loop = asyncio.get_running_loop()
    start = loop.time()
    assert await poll_until_value(fetch, timeout=0.3, interval=0.05) is None
    assert fetch.attempts > 1
    # Never sleeps past the deadline
    assert loop.time() - start < 0.3 + 0.05


@pytest.mark.asyncio
async def test_cancel_event_stops_polling():
    fetch = Fetcher()
    cancel = asyncio.Event()

    async def set_later():
        await asyncio.sleep(0.12)
        cancel.set()

    setter = asyncio.create_task(set_later())
    assert await poll_until_value(fetch, timeout=-1, interval=0.05, cancel=cancel) is None
    await setter
    assert fetch.attempts >= 1


@pytest.mark.asyncio
async def test_task_cancellation():
    fetch = Fetcher()
    task = asyncio.create_task(poll_until_value(fetch, timeout=-1, interval=0.05))
    await asyncio.sleep(0.12)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_fetch_error_propagates():
    async def broken():
        raise RuntimeError("vboxmanage gone")

    with pytest.raises(RuntimeError, match="vboxmanage gone"):
        await poll_until_value(broken, timeout=-1, interval=0.05)
