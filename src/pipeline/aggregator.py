"""Thread-safe aggregator for collecting pipeline outcomes."""

import threading
import time
from typing import Iterable, List

from src.models.data_models import Outcome, Summary


class OutcomeAggregator:
    """
    Thread-safe aggregator for per-provider outcomes.

    Uses a lock so outcomes can be added from worker threads while
    results stream in.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._outcomes: List[Outcome] = []
        self._start_time: float = 0.0
        self._end_time: float = 0.0

    def start_timer(self) -> None:
        """Start timing the pipeline execution."""
        self._start_time = time.perf_counter()

    def stop_timer(self) -> None:
        """Stop timing the pipeline execution."""
        self._end_time = time.perf_counter()

    def add_outcome(self, outcome: Outcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)

    def add_outcomes(self, outcomes: Iterable[Outcome]) -> None:
        with self._lock:
            self._outcomes.extend(outcomes)

    def get_summary(self) -> Summary:
        """
        Generate summary statistics.

        Returns:
            Summary with provider counts, processing time, success rate
        """
        with self._lock:
            processing_time = self._end_time - self._start_time if self._end_time > 0 else 0.0
            succeeded = sum(1 for outcome in self._outcomes if outcome.succeeded)
            total = len(self._outcomes)

            return Summary(
                total_providers=total,
                succeeded=succeeded,
                failed=total - succeeded,
                processing_time_seconds=processing_time,
                success_rate=succeeded / total if total > 0 else 0.0
            )

    def get_outcomes(self) -> List[Outcome]:
        """Get all outcomes."""
        with self._lock:
            return self._outcomes.copy()
