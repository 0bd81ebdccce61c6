"""Core data models for the quote aggregation pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class DiscountCode(Enum):
    """Closed set of discount codes, valued by percentage off."""
    NONE = 0
    SILVER = 10
    GOLD = 20
    PLATINUM = 30
    DIAMOND = 40

    @property
    def percentage(self) -> int:
        return self.value

    @property
    def rate(self) -> float:
        """Discount as a fraction of the price."""
        return self.value / 100.0


class TaskState(Enum):
    """Lifecycle states of a task handle."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.FAILED)


class OutcomeStatus(Enum):
    """Per-provider result tags."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Quote:
    """Structured form of a provider's raw quote."""
    shop_name: str
    price: float
    discount_code: DiscountCode


@dataclass
class Outcome:
    """Result of one provider's fetch → parse → discount chain."""
    provider: str
    status: OutcomeStatus
    value: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, provider: str, value: str) -> "Outcome":
        return cls(provider=provider, status=OutcomeStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, provider: str, error: BaseException) -> "Outcome":
        return cls(provider=provider, status=OutcomeStatus.FAILURE, error=error)

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def describe(self) -> str:
        """Human readable line for presentation layers."""
        if self.succeeded:
            return self.value or ""
        return f"shop {self.provider} unavailable: {self.error}"


@dataclass
class Summary:
    """Pipeline execution summary."""
    total_providers: int
    succeeded: int
    failed: int
    processing_time_seconds: float
    success_rate: float  # Range 0.0-1.0


@dataclass
class PipelineResult:
    """Complete pipeline execution result."""
    query: str
    summary: Summary
    outcomes: List[Outcome]
