"""Bounded executor scheduling work onto a shared ThreadPoolExecutor."""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from src.models.data_models import TaskState
from src.models.errors import ExecutorSaturatedError
from src.executor.task_handle import TaskHandle


T = TypeVar("T")
U = TypeVar("U")


class BoundedExecutor:
    """
    Runs zero-argument work units on a fixed-size worker pool.

    The pool is created once and reused for every submission, so the
    number of threads never grows with the amount of offered work. Work
    that cannot start immediately waits in the pool's queue, which is
    unbounded unless ``max_queued`` is given. The bound applies to
    submit only; later stages of admitted work are never refused for it.

    Errors raised by a work unit are stored on its handle; they never
    kill a worker silently.
    """

    def __init__(
        self,
        max_workers: int = 4,
        max_queued: Optional[int] = None,
        logger=None,
        thread_name_prefix: str = "quote-worker"
    ):
        """
        Initialize executor.

        Args:
            max_workers: Number of worker threads
            max_queued: Maximum tasks waiting for a worker (None = unbounded)
            logger: Optional structured logger
            thread_name_prefix: Prefix for worker thread names
        """
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got: {max_workers}")
        if max_queued is not None and max_queued <= 0:
            raise ValueError(f"max_queued must be positive, got: {max_queued}")

        self.max_workers = max_workers
        self.max_queued = max_queued
        self.logger = logger
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix
        )
        self._lock = threading.Lock()
        self._queued = 0

    def __enter__(self) -> "BoundedExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

    @property
    def queued(self) -> int:
        """Number of submitted tasks not yet picked up by a worker."""
        with self._lock:
            return self._queued

    def submit(self, work: Callable[[], T], name: Optional[str] = None) -> TaskHandle[T]:
        """
        Schedule work and return its handle immediately.

        Raises:
            ExecutorSaturatedError: If the bounded queue is full
            RuntimeError: If the executor has been shut down
        """
        handle: TaskHandle[T] = TaskHandle(name or getattr(work, "__name__", "task"), self.logger)
        self._dispatch(handle, work)
        return handle

    def wait(self, handle: TaskHandle[T], timeout: Optional[float] = None) -> T:
        """
        Block until handle is terminal or timeout elapses.

        Raises:
            AsyncExecutionError: If the work failed
            TaskTimeoutError: If the deadline passed; the work keeps running
        """
        return handle.result(timeout)

    def chain(
        self,
        handle: TaskHandle[T],
        next_work: Callable[[T], U],
        name: Optional[str] = None
    ) -> TaskHandle[U]:
        """
        Run next_work(value) on this pool once handle completes.

        If handle fails, the returned handle fails with the same cause and
        next_work is never called. The stage is not subject to
        ``max_queued``; only new submissions are refused when the queue
        is full.
        """
        downstream: TaskHandle[U] = TaskHandle(
            name or getattr(next_work, "__name__", "stage"),
            self.logger
        )

        def _on_done(upstream: TaskHandle[T]) -> None:
            if upstream.state is TaskState.FAILED:
                downstream._fail(upstream.cause)
                return
            value = upstream.result(timeout=0)
            try:
                self._dispatch(downstream, lambda: next_work(value), enforce_limit=False)
            except RuntimeError as exc:
                if self.logger:
                    self.logger.stage_dispatch_refused(downstream.name, exc)
                downstream._fail(exc)

        handle.add_done_callback(_on_done)
        return downstream

    def settle(
        self,
        handle: TaskHandle[T],
        fn: Callable[[TaskHandle[T]], U],
        name: Optional[str] = None
    ) -> TaskHandle[U]:
        """
        Run fn(handle) once handle is terminal, whether it completed or failed.

        fn runs inline on the thread that finished handle, so it must be
        cheap. Its return value completes the returned handle; an error
        it raises fails it.
        """
        settled: TaskHandle[U] = TaskHandle(name or f"{handle.name}:settled", self.logger)

        def _on_done(upstream: TaskHandle[T]) -> None:
            try:
                value = fn(upstream)
            except Exception as exc:
                settled._fail(exc)
            else:
                settled._complete(value)

        handle.add_done_callback(_on_done)
        return settled

    def all_of(self, handles: Iterable[TaskHandle[Any]], name: str = "all_of") -> TaskHandle[List[Any]]:
        """
        Combine handles into one that completes with all their values.

        The combined handle fails as soon as any input fails; the other
        inputs keep running and their results are discarded.
        """
        handles = list(handles)
        combined: TaskHandle[List[Any]] = TaskHandle(name, self.logger)
        if not handles:
            combined._complete([])
            return combined

        lock = threading.Lock()
        remaining = [len(handles)]

        def _on_done(handle: TaskHandle[Any]) -> None:
            if handle.state is TaskState.FAILED:
                combined._fail(handle.cause)
                return
            with lock:
                remaining[0] -= 1
                finished = remaining[0] == 0
            if finished:
                combined._complete([h.result(timeout=0) for h in handles])

        for handle in handles:
            handle.add_done_callback(_on_done)
        return combined

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work. Running and queued tasks still finish."""
        self._pool.shutdown(wait=wait)

    def _dispatch(
        self,
        handle: TaskHandle[Any],
        work: Callable[[], Any],
        enforce_limit: bool = True
    ) -> None:
        # Continuation stages belong to work already admitted by submit.
        with self._lock:
            if enforce_limit and self.max_queued is not None and self._queued >= self.max_queued:
                if self.logger:
                    self.logger.executor_saturated(self._queued)
                raise ExecutorSaturatedError(self.max_queued)
            self._queued += 1

        try:
            self._pool.submit(self._run, handle, work)
        except RuntimeError:
            with self._lock:
                self._queued -= 1
            raise

    def _run(self, handle: TaskHandle[Any], work: Callable[[], Any]) -> None:
        with self._lock:
            self._queued -= 1
        handle._mark_running()

        try:
            value = work()
        except Exception as exc:
            if self.logger:
                self.logger.task_failed(handle.name, exc)
            handle._fail(exc)
        except BaseException as exc:
            handle._fail(exc)
            raise
        else:
            handle._complete(value)


_shared_lock = threading.Lock()
_shared_executor: Optional[BoundedExecutor] = None


def get_shared_executor(
    max_workers: int = 4,
    max_queued: Optional[int] = None,
    logger=None
) -> BoundedExecutor:
    """
    Return the process-wide executor, creating it on first use.

    The pool is sized once; arguments passed after creation are ignored.
    """
    global _shared_executor
    with _shared_lock:
        if _shared_executor is None:
            _shared_executor = BoundedExecutor(
                max_workers=max_workers,
                max_queued=max_queued,
                logger=logger
            )
        return _shared_executor


def shutdown_shared_executor(wait: bool = True) -> None:
    """Shut down the process-wide executor so the next call creates a fresh one."""
    global _shared_executor
    with _shared_lock:
        executor, _shared_executor = _shared_executor, None
    if executor is not None:
        executor.shutdown(wait=wait)
