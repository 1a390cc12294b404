from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RateGate:
    """Bounds in-flight fetches and spaces out their dispatch.

    At most `max_concurrent` holders are admitted at once, and each admission
    happens at least `delay_seconds` after the previous one. Dispatch spacing
    is serialized behind a lock, so concurrent callers queue up and leave
    one delay apart. Nothing is retried here; exceptions raised inside the
    slot propagate to the caller.
    """

    def __init__(
        self,
        max_concurrent: int,
        delay_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.max_concurrent = max_concurrent
        self.delay_seconds = delay_seconds
        self._clock = clock
        self._sleep = sleep
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._dispatch_lock = asyncio.Lock()
        self._last_dispatch: Optional[float] = None
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def _wait_for_turn(self) -> None:
        async with self._dispatch_lock:
            if self._last_dispatch is not None:
                remaining = self.delay_seconds - (self._clock() - self._last_dispatch)
                if remaining > 0:
                    await self._sleep(remaining)
            self._last_dispatch = self._clock()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        async with self._semaphore:
            await self._wait_for_turn()
            self._in_flight += 1
            try:
                yield
            finally:
                self._in_flight -= 1
