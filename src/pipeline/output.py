"""JSON output formatter for pipeline results.

Serializes a price lookup run: the query, summary statistics, and one
entry per provider in input order. Failed providers carry the error
type and message instead of a value.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from src.models.data_models import Outcome, PipelineResult


class JSONOutputFormatter:
    """
    Formats pipeline results as JSON.

    Example output structure:
    {
        "query": "myPhone27S",
        "summary": {
            "total_providers": 4,
            "succeeded": 3,
            "failed": 1,
            "processing_time_seconds": 1.02,
            "success_rate": 0.75
        },
        "outcomes": [
            {
                "provider": "BestPrice",
                "status": "success",
                "value": "BestPrice price is 123.45 (code GOLD)",
                "error": null
            },
            {
                "provider": "BuyItAll",
                "status": "failure",
                "value": null,
                "error": {"type": "ProviderFetchError", "message": "..."}
            }
        ]
    }
    """

    def format(self, result: PipelineResult) -> Dict[str, Any]:
        """
        Format pipeline result as JSON-serializable dictionary.

        Args:
            result: Complete pipeline execution result

        Returns:
            Dictionary with query, summary, and outcomes sections
        """
        return {
            "query": result.query,
            "summary": self._format_summary(result),
            "outcomes": self._format_outcomes(result.outcomes)
        }

    def _format_summary(self, result: PipelineResult) -> Dict[str, Any]:
        return {
            "total_providers": result.summary.total_providers,
            "succeeded": result.summary.succeeded,
            "failed": result.summary.failed,
            "processing_time_seconds": round(result.summary.processing_time_seconds, 2),
            "success_rate": round(result.summary.success_rate, 4)
        }

    def _format_outcomes(self, outcomes: List[Outcome]) -> list:
        return [
            {
                "provider": outcome.provider,
                "status": outcome.status.value,
                "value": outcome.value,
                "error": self._format_error(outcome.error)
            }
            for outcome in outcomes
        ]

    def _format_error(self, error):
        if error is None:
            return None
        return {"type": type(error).__name__, "message": str(error)}

    def save(self, result: PipelineResult, path: str = "out/prices.json") -> None:
        """
        Save formatted result to JSON file.

        Creates parent directories if they don't exist. Uses 2-space
        indentation for readability.

        Args:
            result: Pipeline result to save
            path: Output file path (default: out/prices.json)
        """
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        formatted_data = self.format(result)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(formatted_data, f, indent=2, ensure_ascii=False)
