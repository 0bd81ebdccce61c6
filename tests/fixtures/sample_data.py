"""Test providers with controllable latency and failures."""

import threading
import time
from typing import List, Optional, Sequence


class StubProvider:
    """
    Provider returning a fixed raw quote after a fixed delay.

    Counts calls so tests can check work is not repeated.
    """

    def __init__(
        self,
        name: str,
        price: float = 100.0,
        code: str = "GOLD",
        delay: float = 0.0,
        error: Optional[Exception] = None,
        raw: Optional[str] = None,
    ):
        self.name = name
        self.price = price
        self.code = code
        self.delay = delay
        self.error = error
        self.raw = raw
        self._lock = threading.Lock()
        self.calls = 0
        self.started_at: Optional[float] = None

    def fetch(self, query: str) -> str:
        with self._lock:
            self.calls += 1
            self.started_at = time.perf_counter()
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.raw is not None:
            return self.raw
        return f"{self.name}:{self.price:.2f}:{self.code}"


def make_providers(count: int, delay: float = 0.0, prefix: str = "Shop") -> List[StubProvider]:
    """Create count providers with identical latency."""
    return [StubProvider(f"{prefix}{i + 1}", price=10.0 * (i + 1), delay=delay) for i in range(count)]


def reversed_latency_providers(delays: Sequence[float]) -> List[StubProvider]:
    """Create providers whose latencies follow delays, e.g. slowest first."""
    return [StubProvider(f"Shop{i + 1}", price=10.0 * (i + 1), delay=d) for i, d in enumerate(delays)]
