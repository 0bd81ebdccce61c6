"""Pipeline orchestrator wiring configuration, shops and the worker pool."""

from typing import Callable, List, Optional

from src.executor import BoundedExecutor, get_shared_executor
from src.models.config import PipelineConfig
from src.models.data_models import Outcome, PipelineResult
from src.monitoring.logger import StructuredLogger
from src.pipeline.aggregator import OutcomeAggregator
from src.pipeline.price_finder import PriceFinder
from src.quotes.discount import DiscountService
from src.quotes.provider import Shop


class PipelineOrchestrator:
    """Orchestrates one price lookup run."""

    def __init__(self, config: PipelineConfig, executor: Optional[BoundedExecutor] = None):
        """
        Initialize orchestrator with pipeline configuration.

        Args:
            config: Pipeline configuration object
            executor: Executor to run on; when omitted, the process-wide
                shared executor is used, sized from config on first use
        """
        self.config = config
        self.logger = StructuredLogger(level=config.log_level)
        self.executor = executor

    def build_shops(self) -> List[Shop]:
        """Create the configured shops."""
        return [
            Shop(
                name,
                min_delay_ms=self.config.provider_min_delay_ms,
                max_delay_ms=self.config.provider_max_delay_ms,
                seed=self.config.random_seed,
            )
            for name in self.config.shops
        ]

    def run(self, consumer: Optional[Callable[[Outcome], None]] = None) -> PipelineResult:
        """
        Run the pipeline: fan out to shops → parse → discount → collect.

        Args:
            consumer: When given, outcomes are streamed to it in
                completion order as they settle

        Returns:
            PipelineResult with the query, summary and ordered outcomes

        Raises:
            DiscountContractError: If the pipeline handed an invalid quote
                to the discount engine
        """
        shops = self.build_shops()
        executor = self.executor or get_shared_executor(
            max_workers=self.config.worker_pool_size,
            max_queued=self.config.max_queued_tasks,
            logger=self.logger
        )
        finder = PriceFinder(
            executor,
            discount_service=DiscountService(
                min_delay_ms=self.config.discount_min_delay_ms,
                max_delay_ms=self.config.discount_max_delay_ms
            ),
            logger=self.logger
        )
        aggregator = OutcomeAggregator()

        self.logger.pipeline_start(
            query=self.config.query,
            providers=len(shops),
            workers=executor.max_workers
        )
        aggregator.start_timer()

        try:
            if consumer is None:
                outcomes = finder.find_prices(shops, self.config.query, self.config.per_call_timeout)
            else:
                outcomes = finder.stream_prices(
                    shops,
                    self.config.query,
                    consumer,
                    timeout=self.config.per_call_timeout
                )
        finally:
            aggregator.stop_timer()

        aggregator.add_outcomes(outcomes)
        summary = aggregator.get_summary()
        self.logger.pipeline_complete(
            succeeded=summary.succeeded,
            failed=summary.failed,
            elapsed_ms=summary.processing_time_seconds * 1000
        )

        return PipelineResult(
            query=self.config.query,
            summary=summary,
            outcomes=aggregator.get_outcomes()
        )
