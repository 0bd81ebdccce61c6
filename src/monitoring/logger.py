"""Structured logging for pipeline monitoring."""

import json
import logging
from typing import Optional


class StructuredLogger:
    """Structured logger with uniform schema."""

    def __init__(self, name: str = "quote_pipeline", level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(handler)

    def log(self, event: str, level: int = logging.INFO, **kwargs) -> None:
        """
        Log structured event.

        Standard keys: event, provider, stage, error, elapsed_ms,
                      workers, queued, timeout
        """
        log_data = {"event": event, **kwargs}
        self.logger.log(level, json.dumps(log_data, default=str))

    def pipeline_start(self, query: str, providers: int, workers: int) -> None:
        self.log("pipeline_start", query=query, providers=providers, workers=workers)

    def pipeline_complete(self, succeeded: int, failed: int, elapsed_ms: float) -> None:
        self.log("pipeline_complete", succeeded=succeeded, failed=failed, elapsed_ms=elapsed_ms)

    def task_failed(self, task: str, error: BaseException) -> None:
        self.log("task_failed", level=logging.DEBUG, task=task, error=repr(error))

    def executor_saturated(self, queued: int) -> None:
        self.log("executor_saturated", level=logging.WARNING, queued=queued)

    def stage_dispatch_refused(self, task: str, error: BaseException) -> None:
        self.log("stage_dispatch_refused", level=logging.WARNING, task=task, error=repr(error))

    def provider_failed(self, provider: str, error: BaseException) -> None:
        self.log("provider_failed", level=logging.WARNING, provider=provider, error=str(error))

    def provider_timeout(self, provider: str, timeout: Optional[float]) -> None:
        self.log("provider_timeout", level=logging.WARNING, provider=provider, timeout=timeout)

    def late_result(self, provider: str, state: str) -> None:
        self.log("late_result", level=logging.DEBUG, provider=provider, state=state)

    def callback_error(self, task: str, error: BaseException) -> None:
        self.log("callback_error", level=logging.ERROR, task=task, error=repr(error))
