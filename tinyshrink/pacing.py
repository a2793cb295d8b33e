from __future__ import annotations

import random
import time
from typing import Callable, Optional


class JitteredDelay:
    """
    Sleep a random number of milliseconds in [min_ms, max_ms] per call.

    Not a real rate limiter, just enough spacing between uploads that the
    service doesn't flag us. min_ms == max_ms gives a fixed delay.
    """

    def __init__(
        self,
        min_ms: int = 500,
        max_ms: int = 1000,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        if min_ms < 0 or max_ms < min_ms:
            raise ValueError(f"invalid delay range: {min_ms}-{max_ms} ms")
        self.min_ms = min_ms
        self.max_ms = max_ms
        self._sleep = sleep
        self._rng = rng or random.Random()

    def next_delay_ms(self) -> float:
        if self.min_ms == self.max_ms:
            return float(self.min_ms)
        return self._rng.uniform(self.min_ms, self.max_ms)

    def wait(self) -> float:
        delay_ms = self.next_delay_ms()
        if delay_ms > 0:
            self._sleep(delay_ms / 1000.0)
        return delay_ms
