"""Unit tests for task handle state transitions."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from src.executor.task_handle import TaskHandle
from src.models.data_models import TaskState
from src.models.errors import AsyncExecutionError, TaskTimeoutError


def test_new_handle_is_pending():
    handle = TaskHandle("t")

    assert handle.state is TaskState.PENDING
    assert not handle.done()
    assert handle.cause is None


def test_running_then_completed():
    handle = TaskHandle("t")

    assert handle._mark_running()
    assert handle.state is TaskState.RUNNING
    assert handle._complete(42)
    assert handle.state is TaskState.COMPLETED
    assert handle.result(timeout=0) == 42


def test_failed_handle_wraps_cause():
    handle = TaskHandle("t")
    cause = ValueError("boom")
    handle._fail(cause)

    with pytest.raises(AsyncExecutionError) as exc_info:
        handle.result(timeout=0)

    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert handle.cause is cause


def test_terminal_state_is_final():
    handle = TaskHandle("t")
    handle._complete("first")

    assert not handle._complete("second")
    assert not handle._fail(RuntimeError("late"))
    assert not handle._mark_running()
    assert handle.state is TaskState.COMPLETED
    assert handle.result(timeout=0) == "first"


def test_result_times_out_on_pending_handle():
    handle = TaskHandle("t")

    with pytest.raises(TaskTimeoutError) as exc_info:
        handle.result(timeout=0.05)

    assert exc_info.value.timeout == 0.05
    assert isinstance(exc_info.value, TimeoutError)
    assert handle.state is TaskState.PENDING


def test_result_wakes_when_completed_from_other_thread():
    handle = TaskHandle("t")
    timer = threading.Timer(0.05, handle._complete, args=("done",))
    timer.start()

    try:
        assert handle.result(timeout=2.0) == "done"
    finally:
        timer.cancel()


def test_callbacks_run_once_on_completion():
    handle = TaskHandle("t")
    seen = []
    handle.add_done_callback(lambda h: seen.append(h.result(timeout=0)))

    handle._complete(1)
    handle._complete(2)

    assert seen == [1]


def test_callback_on_terminal_handle_runs_immediately():
    handle = TaskHandle("t")
    handle._fail(RuntimeError("x"))
    seen = []

    handle.add_done_callback(lambda h: seen.append(h.state))

    assert seen == [TaskState.FAILED]


def test_callback_error_does_not_affect_handle():
    handle = TaskHandle("t")
    seen = []

    def bad_callback(h):
        raise RuntimeError("callback bug")

    handle.add_done_callback(bad_callback)
    handle.add_done_callback(lambda h: seen.append("ran"))
    handle._complete("ok")

    assert handle.result(timeout=0) == "ok"
    assert seen == ["ran"]


def test_many_waiters_are_released():
    handle = TaskHandle("t")
    results = []

    def waiter():
        results.append(handle.result(timeout=2.0))

    threads = [threading.Thread(target=waiter) for _ in range(5)]
    for thread in threads:
        thread.start()
    time.sleep(0.05)
    handle._complete("v")
    for thread in threads:
        thread.join(timeout=2.0)

    assert results == ["v"] * 5


def test_concurrent_finishers_have_one_winner():
    handle = TaskHandle("t")
    barrier = threading.Barrier(8)
    wins = []

    def finisher(i):
        barrier.wait()
        won = handle._complete(i) if i % 2 else handle._fail(RuntimeError(str(i)))
        if won:
            wins.append(i)

    threads = [threading.Thread(target=finisher, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=2.0)

    assert len(wins) == 1
    assert handle.done()


def test_callback_error_is_logged_through_structured_logger():
    logger = MagicMock()
    handle = TaskHandle("t", logger=logger)

    def bad_callback(h):
        raise RuntimeError("callback bug")

    handle.add_done_callback(bad_callback)
    handle._complete("ok")

    logger.callback_error.assert_called_once()
    assert logger.callback_error.call_args[0][0] == "t"
