"""Task handle tracking one asynchronous unit of work."""

import logging
from concurrent.futures import Future, InvalidStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Generic, Optional, TypeVar

from src.models.data_models import TaskState
from src.models.errors import AsyncExecutionError, TaskTimeoutError


T = TypeVar("T")

_fallback_logger = logging.getLogger(__name__)


class TaskHandle(Generic[T]):
    """
    Handle for an in-flight unit of work, backed by a ``Future``.

    Moves PENDING → RUNNING → COMPLETED or FAILED. Terminal states are
    final: the first completion or failure wins and later attempts are
    ignored. Done-callbacks run once, on the thread that finished the
    work (or immediately when registered on a handle that is already
    terminal).
    """

    def __init__(self, name: str = "task", logger=None):
        self.name = name
        self.logger = logger
        self._future: Future = Future()

    def __repr__(self) -> str:
        return f"<TaskHandle {self.name} state={self.state.value}>"

    @property
    def state(self) -> TaskState:
        if not self._future.done():
            return TaskState.RUNNING if self._future.running() else TaskState.PENDING
        if self._future.exception(timeout=0) is None:
            return TaskState.COMPLETED
        return TaskState.FAILED

    @property
    def cause(self) -> Optional[BaseException]:
        """Original error of a failed handle, None otherwise."""
        if not self._future.done():
            return None
        return self._future.exception(timeout=0)

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> T:
        """
        Block until the handle is terminal and return its value.

        Args:
            timeout: Seconds to wait, None waits forever

        Returns:
            The work's return value

        Raises:
            AsyncExecutionError: If the work failed (carries the cause)
            TaskTimeoutError: If the deadline passed first; the work is
                not cancelled and a later call may still succeed
        """
        try:
            cause = self._future.exception(timeout)
        except FutureTimeoutError:
            raise TaskTimeoutError(timeout) from None
        if cause is not None:
            raise AsyncExecutionError(cause)
        return self._future.result(timeout=0)

    def add_done_callback(self, fn: Callable[["TaskHandle[T]"], None]) -> None:
        """Register fn(handle) to run once the handle is terminal."""
        self._future.add_done_callback(lambda _: self._invoke(fn))

    def _mark_running(self) -> bool:
        # Only the worker that owns the handle moves it out of PENDING.
        if self._future.running() or self._future.done():
            return False
        return self._future.set_running_or_notify_cancel()

    def _complete(self, value: T) -> bool:
        try:
            self._future.set_result(value)
        except InvalidStateError:
            return False
        return True

    def _fail(self, cause: BaseException) -> bool:
        try:
            self._future.set_exception(cause)
        except InvalidStateError:
            return False
        return True

    def _invoke(self, fn: Callable[["TaskHandle[T]"], None]) -> None:
        try:
            fn(self)
        except Exception as exc:
            if self.logger:
                self.logger.callback_error(self.name, exc)
            else:
                _fallback_logger.exception("done callback for %s raised", self.name)
