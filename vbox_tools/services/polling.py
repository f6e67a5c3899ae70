"""Retry a value fetch on a fixed interval until it appears or time runs out.

Attempts are strictly serialized: the next fetch is only issued after the
previous one has finished and the interval has elapsed.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from vbox_tools.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class PollState:
    """Deadline bookkeeping for one polling run.

    A negative *timeout* means wait forever.  The deadline is absolute and
    fixed at construction; only the remaining time is recomputed.
    """

    def __init__(self, timeout: float, interval: float, *, clock: Callable[[], float]) -> None:
        self.interval = interval
        self._clock = clock
        self.unbounded = timeout < 0
        self.deadline: Optional[float] = None if self.unbounded else clock() + timeout
        self.attempts = 0

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return self.deadline - self._clock()

    def should_retry(self) -> bool:
        """Give up once the deadline is no more than one interval away."""
        if self.unbounded:
            return True
        return self._clock() < self.deadline - self.interval


async def poll_until_value(
    fetch: Callable[[], Awaitable[Optional[T]]],
    *,
    timeout: float = -1,
    interval: float = 1.0,
    cancel: Optional[asyncio.Event] = None,
    name: str = "poll",
) -> Optional[T]:
    """Call *fetch* until it returns something other than ``None``.

    Returns ``None`` when the bounded wait is exhausted or *cancel* is set.
    Errors raised by *fetch* propagate immediately.  Cancelling the awaiting
    task stops polling as well.
    """
    loop = asyncio.get_running_loop()
    state = PollState(timeout, interval, clock=loop.time)

    while True:
        state.attempts += 1
        value = await fetch()
        if value is not None:
            log.debug(f"{name}.resolved", attempts=state.attempts)
            return value

        if not state.should_retry():
            log.info(f"{name}.gave_up", attempts=state.attempts)
            return None

        log.debug(f"{name}.retry", attempts=state.attempts, remaining=state.remaining())
        if cancel is None:
            await asyncio.sleep(interval)
        else:
            try:
                await asyncio.wait_for(cancel.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            else:
                log.info(f"{name}.cancelled", attempts=state.attempts)
                return None
