"""Pytest configuration and shared fixtures."""

import pytest

from src.executor import BoundedExecutor, shutdown_shared_executor


@pytest.fixture
def executor():
    """Provide a bounded executor with enough workers for small batches."""
    pool = BoundedExecutor(max_workers=8)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture(autouse=True)
def shared_executor_reset():
    """Give every test a fresh process-wide executor sized by its own config."""
    shutdown_shared_executor()
    yield
    shutdown_shared_executor()


@pytest.fixture
def sample_config():
    """Provide a fast, deterministic configuration for testing."""
    from src.models.config import PipelineConfig

    return PipelineConfig(
        worker_pool_size=4,
        per_call_timeout=5.0,
        provider_min_delay_ms=0,
        provider_max_delay_ms=20,
        discount_min_delay_ms=0,
        discount_max_delay_ms=5,
        random_seed=42,
        query="myPhone27S",
        shops=["BestPrice", "LetsSaveBig", "MyFavoriteShop", "BuyItAll"],
        log_level="WARNING",
    )
