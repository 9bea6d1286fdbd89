"""Outbound flood protection (token bucket)."""

import asyncio
import time
from dataclasses import dataclass

from ..constants import FLOOD_BURST, FLOOD_INTERVAL


@dataclass
class BucketState:
    """Current token bucket state"""

    tokens: float  # Lines that may be written right now
    last_refill: float  # Monotonic time of the last refill


class FloodLimiter:
    """Paces outbound lines so the server does not penalize bursts.

    Up to ``burst`` lines go out back-to-back; after that one line is
    released every ``interval`` seconds. An interval of 0 disables pacing.
    """

    def __init__(
        self, burst: int = FLOOD_BURST, interval: float = FLOOD_INTERVAL
    ) -> None:
        self.burst = max(1, burst)
        self.interval = max(0.0, interval)
        self._state = BucketState(tokens=float(self.burst), last_refill=time.monotonic())
        self._lock = asyncio.Lock()

    def snapshot(self) -> dict[str, object]:
        """Return a serializable snapshot of limiter state for debugging."""
        return {
            "burst": self.burst,
            "interval": self.interval,
            "tokens": round(self._state.tokens, 3),
        }

    def _refill(self, now: float) -> None:
        if self.interval == 0:
            self._state.tokens = float(self.burst)
        else:
            earned = (now - self._state.last_refill) / self.interval
            self._state.tokens = min(float(self.burst), self._state.tokens + earned)
        self._state.last_refill = now

    def delay_needed(self) -> float:
        """Seconds until the next line may be written (0 if immediately)."""
        self._refill(time.monotonic())
        if self._state.tokens >= 1:
            return 0.0
        return (1 - self._state.tokens) * self.interval

    async def acquire(self) -> float:
        """Wait for one token and consume it.

        Returns:
            The number of seconds spent waiting.
        """
        async with self._lock:
            waited = 0.0
            delay = self.delay_needed()
            while delay > 0:
                await asyncio.sleep(delay)
                waited += delay
                delay = self.delay_needed()
            self._state.tokens -= 1
            return waited
