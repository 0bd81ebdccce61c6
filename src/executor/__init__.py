"""Bounded thread-pool executor with chainable task handles."""

from .bounded_executor import BoundedExecutor, get_shared_executor, shutdown_shared_executor
from .task_handle import TaskHandle

__all__ = ["BoundedExecutor", "TaskHandle", "get_shared_executor", "shutdown_shared_executor"]
