# site_spider/crawler/ratelimit.py
"""
Politeness delay between consecutive fetches: a fixed interval plus jitter.
"""
from __future__ import annotations

import asyncio
import random
import time
from typing import Optional

# seeded once per process; the jitter does not need to be unpredictable
_RNG = random.Random(time.time_ns())


class RateLimiter:
    """Computes (and sleeps) the pause after each internal fetch.

    ``interval`` and ``jitter`` are in seconds. A zero interval disables the
    pause entirely; a zero jitter makes every pause exactly ``interval``.
    """

    def __init__(
        self,
        interval: float,
        jitter: float = 0.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        if interval < 0 or jitter < 0:
            raise ValueError("interval and jitter must be >= 0")
        self.interval = interval
        self.jitter = jitter
        self._rng = rng or _RNG

    def next_wait(self) -> float:
        if self.interval == 0:
            return 0.0
        if self.jitter == 0:
            return self.interval
        return self.interval + self._rng.uniform(0, self.jitter)

    async def pause(self) -> float:
        wait = self.next_wait()
        if wait > 0:
            await asyncio.sleep(wait)
        return wait
