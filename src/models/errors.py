"""Exception hierarchy for the quote aggregation pipeline."""

from typing import Optional


class QuotePipelineError(Exception):
    """Base class for all pipeline errors."""


class ProviderFetchError(QuotePipelineError):
    """A provider could not produce a quote for the query."""

    def __init__(self, provider: str, message: str = "product not available"):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class MalformedQuoteError(QuotePipelineError):
    """A raw quote string could not be parsed."""

    def __init__(self, raw: str, reason: str):
        super().__init__(f"malformed quote {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


class DiscountContractError(QuotePipelineError):
    """
    The discount engine received an invalid quote.

    Parsing guarantees valid quotes, so this signals a broken pipeline
    rather than a misbehaving provider and is never turned into an outcome.
    """


class AsyncExecutionError(QuotePipelineError):
    """Wraps an error captured from a work unit run on the executor."""

    def __init__(self, cause: BaseException):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause
        self.__cause__ = cause


class TaskTimeoutError(QuotePipelineError, TimeoutError):
    """Waiting on a task handle exceeded its deadline. The work keeps running."""

    def __init__(self, timeout: Optional[float]):
        super().__init__(f"task did not finish within {timeout}s")
        self.timeout = timeout


class ExecutorSaturatedError(QuotePipelineError):
    """The executor's bounded submission queue is full."""

    def __init__(self, max_queued: int):
        super().__init__(f"executor queue is full ({max_queued} tasks waiting)")
        self.max_queued = max_queued


class ConfigurationError(QuotePipelineError):
    """Configuration file could not be loaded."""
