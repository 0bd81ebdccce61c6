"""End-to-end tests: config file → orchestrator → JSON output."""

import json
from pathlib import Path

import yaml

from src.models.config import ConfigManager
from src.pipeline.orchestrator import PipelineOrchestrator
from src.pipeline.output import JSONOutputFormatter
from src.quotes.parser import parse_quote


def _write_config(tmp_path: Path, **overrides) -> Path:
    settings = {
        "worker_pool_size": 4,
        "per_call_timeout": 3.0,
        "provider_min_delay_ms": 10,
        "provider_max_delay_ms": 50,
        "discount_min_delay_ms": 0,
        "discount_max_delay_ms": 10,
        "random_seed": 2024,
        "query": "myPhone27S",
        "shops": ["BestPrice", "LetsSaveBig", "MyFavoriteShop", "BuyItAll"],
        "log_level": "WARNING",
        "output_directory": str(tmp_path / "out"),
    }
    settings.update(overrides)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(settings))
    return path


def test_full_run_writes_ordered_results(tmp_path):
    config = ConfigManager(_write_config(tmp_path)).load_config()

    result = PipelineOrchestrator(config).run()
    JSONOutputFormatter().save(result, str(config.output_path))

    data = json.loads(config.output_path.read_text(encoding="utf-8"))
    assert [o["provider"] for o in data["outcomes"]] == config.shops
    assert data["summary"]["succeeded"] == 4
    for outcome in data["outcomes"]:
        assert outcome["value"].startswith(f"{outcome['provider']} price is ")


def test_discounted_price_matches_raw_quote(tmp_path):
    """Each reported price is the shop's raw price minus its code's discount."""
    config = ConfigManager(_write_config(tmp_path)).load_config()
    orchestrator = PipelineOrchestrator(config)

    result = orchestrator.run()

    for shop, outcome in zip(orchestrator.build_shops(), result.outcomes):
        quote = parse_quote(shop.fetch(config.query))
        expected = quote.price * (1 - quote.discount_code.rate)
        assert outcome.value == (
            f"{quote.shop_name} price is {expected:.2f} (code {quote.discount_code.name})"
        )


def test_many_shops_on_small_pool(tmp_path):
    shops = [f"Bebit{i}" for i in range(1, 41)]
    config = ConfigManager(_write_config(
        tmp_path,
        shops=shops,
        worker_pool_size=8,
        provider_min_delay_ms=0,
        provider_max_delay_ms=20,
    )).load_config()

    result = PipelineOrchestrator(config).run()

    assert [o.provider for o in result.outcomes] == shops
    assert result.summary.succeeded == 40


def test_bounded_queue_reports_rejected_shops(tmp_path):
    config = ConfigManager(_write_config(
        tmp_path,
        shops=[f"Shop{i}" for i in range(10)],
        worker_pool_size=1,
        max_queued_tasks=3,
        provider_min_delay_ms=50,
        provider_max_delay_ms=50,
    )).load_config()

    result = PipelineOrchestrator(config).run()

    assert result.summary.total_providers == 10
    assert result.summary.failed >= 1
    rejected = [o for o in result.outcomes if not o.succeeded]
    assert all(type(o.error).__name__ == "ExecutorSaturatedError" for o in rejected)
