"""Concurrent price lookup across many slow providers."""

import threading
from typing import Callable, Dict, List, Optional, Sequence, Union

from src.executor import BoundedExecutor, TaskHandle
from src.models.data_models import Outcome, TaskState
from src.models.errors import (
    AsyncExecutionError,
    DiscountContractError,
    ExecutorSaturatedError,
    TaskTimeoutError,
)
from src.quotes.discount import DiscountService
from src.quotes.parser import parse_quote
from src.quotes.provider import Provider


def provider_name(provider: Provider) -> str:
    return getattr(provider, "name", repr(provider))


class PriceFinder:
    """
    Fans a query out to every provider and collects one outcome each.

    Each provider gets its own chain of three stages on the shared
    executor: fetch, parse, discount. A stage starts only after the
    previous one produced a value, and a failure skips the remaining
    stages of that provider only. The caller blocks once per provider,
    when collecting results.
    """

    def __init__(
        self,
        executor: BoundedExecutor,
        discount_service: Optional[DiscountService] = None,
        logger=None
    ):
        """
        Initialize price finder.

        Args:
            executor: Shared bounded executor running every stage
            discount_service: Discount engine (defaults to a zero-latency one)
            logger: Optional structured logger
        """
        self.executor = executor
        self.discount_service = discount_service or DiscountService()
        self.logger = logger

    def find_prices(
        self,
        providers: Sequence[Provider],
        query: str,
        per_call_timeout: Optional[float] = None
    ) -> List[Outcome]:
        """
        Quote query at every provider concurrently.

        Args:
            providers: Providers to ask, in the order results are wanted
            query: Product to price
            per_call_timeout: Seconds to wait for each provider's chain

        Returns:
            One Outcome per provider, in input order

        Raises:
            DiscountContractError: If the discount stage received an
                invalid quote, which means the pipeline itself is broken
        """
        providers = list(providers)
        chains = [self._start(provider, query) for provider in providers]
        return [
            self._collect(provider, chain, per_call_timeout)
            for provider, chain in zip(providers, chains)
        ]

    def stream_prices(
        self,
        providers: Sequence[Provider],
        query: str,
        consumer: Callable[[Outcome], None],
        timeout: Optional[float] = None
    ) -> List[Outcome]:
        """
        Like find_prices, but hand each outcome to consumer as soon as its
        chain settles.

        consumer is called in completion order, one call at a time, from
        whichever thread finished the chain. Providers still running when
        timeout expires are reported as timeouts and never reach consumer.

        Returns:
            One Outcome per provider, in input order
        """
        providers = list(providers)
        names = [provider_name(provider) for provider in providers]
        lock = threading.Lock()
        delivered: Dict[int, Outcome] = {}
        closed = [False]

        def _deliver(index: int, outcome: Outcome) -> None:
            with lock:
                if closed[0]:
                    return
                delivered[index] = outcome
                consumer(outcome)

        def _settler(index: int) -> Callable[[TaskHandle[str]], Outcome]:
            def _settle(chain: TaskHandle[str]) -> Outcome:
                if chain.state is TaskState.FAILED:
                    if isinstance(chain.cause, DiscountContractError):
                        raise chain.cause
                    outcome = Outcome.failure(names[index], chain.cause)
                else:
                    outcome = Outcome.success(names[index], chain.result(timeout=0))
                _deliver(index, outcome)
                return outcome
            return _settle

        handles = []
        for index, provider in enumerate(providers):
            chain = self._start(provider, query)
            if isinstance(chain, ExecutorSaturatedError):
                _deliver(index, Outcome.failure(names[index], chain))
            else:
                handles.append(
                    self.executor.settle(chain, _settler(index), name=f"{names[index]}:settled")
                )

        joined = self.executor.all_of(handles, name="stream_prices")
        try:
            self.executor.wait(joined, timeout)
        except AsyncExecutionError as exc:
            with lock:
                closed[0] = True
            raise exc.cause
        except TaskTimeoutError:
            pass

        with lock:
            closed[0] = True
            settled = dict(delivered)

        outcomes = []
        for index, name in enumerate(names):
            if index in settled:
                outcomes.append(settled[index])
            else:
                if self.logger:
                    self.logger.provider_timeout(name, timeout)
                outcomes.append(Outcome.failure(name, TaskTimeoutError(timeout)))
        return outcomes

    def _start(self, provider: Provider, query: str) -> Union[TaskHandle[str], ExecutorSaturatedError]:
        name = provider_name(provider)
        try:
            fetched = self.executor.submit(lambda: provider.fetch(query), name=f"{name}:fetch")
        except ExecutorSaturatedError as exc:
            if self.logger:
                self.logger.provider_failed(name, exc)
            return exc
        parsed = self.executor.chain(fetched, parse_quote, name=f"{name}:parse")
        return self.executor.chain(parsed, self.discount_service.apply_discount, name=f"{name}:discount")

    def _collect(
        self,
        provider: Provider,
        chain: Union[TaskHandle[str], ExecutorSaturatedError],
        timeout: Optional[float]
    ) -> Outcome:
        name = provider_name(provider)
        if isinstance(chain, ExecutorSaturatedError):
            return Outcome.failure(name, chain)

        try:
            value = self.executor.wait(chain, timeout)
        except AsyncExecutionError as exc:
            if isinstance(exc.cause, DiscountContractError):
                raise exc.cause
            if self.logger:
                self.logger.provider_failed(name, exc.cause)
            return Outcome.failure(name, exc.cause)
        except TaskTimeoutError as exc:
            if self.logger:
                self.logger.provider_timeout(name, timeout)
                chain.add_done_callback(
                    lambda late: self.logger.late_result(name, late.state.value)
                )
            return Outcome.failure(name, exc)

        return Outcome.success(name, value)
