"""Simulated latency for slow synchronous collaborators."""

import random
import time
from typing import Optional


def random_delay_seconds(
    min_delay_ms: int,
    max_delay_ms: int,
    rng: Optional[random.Random] = None
) -> float:
    """
    Pick a delay uniformly in [min_delay_ms, max_delay_ms].

    Args:
        min_delay_ms: Lower bound in milliseconds
        max_delay_ms: Upper bound in milliseconds
        rng: Random source (defaults to a fresh unseeded one)

    Returns:
        Delay in seconds
    """
    if min_delay_ms < 0 or max_delay_ms < min_delay_ms:
        raise ValueError(f"invalid delay range: {min_delay_ms}..{max_delay_ms} ms")
    if max_delay_ms == min_delay_ms:
        return min_delay_ms / 1000.0
    rng = rng or random.Random()
    return rng.uniform(min_delay_ms, max_delay_ms) / 1000.0


def simulate_latency(
    min_delay_ms: int,
    max_delay_ms: int,
    rng: Optional[random.Random] = None
) -> float:
    """Sleep for a random delay in the range and return the seconds slept."""
    delay = random_delay_seconds(min_delay_ms, max_delay_ms, rng)
    if delay > 0:
        time.sleep(delay)
    return delay
