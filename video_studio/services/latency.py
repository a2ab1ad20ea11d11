"""
Injectable latency strategies.

Services model the latency of their external backends by awaiting a
LatencyStrategy. Production wiring uses randomized or fixed delays; tests
inject NoLatency so pipelines run without sleeping.
"""

import asyncio
import random
from typing import Optional, Protocol


class LatencyStrategy(Protocol):
    """Anything with a single awaitable wait() operation."""

    async def wait(self) -> None: ...


class NoLatency:
    """Returns immediately (still yields to the event loop once)."""

    async def wait(self) -> None:
        await asyncio.sleep(0)


class FixedLatency:
    """Waits a constant number of milliseconds."""

    def __init__(self, delay_ms: float):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self.delay_ms = delay_ms

    async def wait(self) -> None:
        await asyncio.sleep(self.delay_ms / 1000.0)


class UniformLatency:
    """Waits a uniformly distributed delay in [min_ms, max_ms]."""

    def __init__(
        self,
        min_ms: float = 500.0,
        max_ms: float = 1500.0,
        rng: Optional[random.Random] = None,
    ):
        if min_ms < 0 or max_ms < min_ms:
            raise ValueError(f"Invalid latency range [{min_ms}, {max_ms}]")
        self.min_ms = min_ms
        self.max_ms = max_ms
        self._rng = rng or random.Random()

    def next_delay_ms(self) -> float:
        return self._rng.uniform(self.min_ms, self.max_ms)

    async def wait(self) -> None:
        await asyncio.sleep(self.next_delay_ms() / 1000.0)
