"""
Usage telemetry and cost tracking.

Records one telemetry entry per resolved question. Sinks are best-effort:
a failing write is logged and never surfaces to the caller.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List

from trip_assistant.shared.contracts.query import QueryTelemetry


logger = logging.getLogger(__name__)


# Token pricing per 1M tokens
MODEL_COSTS = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    "gpt-5-mini": {"input": 0.25, "output": 2.00},
    "mistral-small-latest": {"input": 1.00, "output": 3.00},
}


def calculate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """
    Calculate the cost of an LLM call based on token usage.

    Args:
        model: Model identifier (e.g., "gpt-4o-mini")
        input_tokens: Number of input/prompt tokens
        output_tokens: Number of output/completion tokens

    Returns:
        Cost in USD (0.0 for models without a price entry)
    """
    costs = MODEL_COSTS.get(model, {"input": 0.0, "output": 0.0})
    input_cost = (input_tokens / 1_000_000) * costs["input"]
    output_cost = (output_tokens / 1_000_000) * costs["output"]
    return input_cost + output_cost


class TelemetrySink(ABC):
    """Destination for query telemetry."""

    @abstractmethod
    def write(self, record: QueryTelemetry) -> None:
        raise NotImplementedError

    def emit(self, record: QueryTelemetry) -> None:
        """Write a record, logging and swallowing any failure."""
        try:
            self.write(record)
        except Exception as e:
            logger.warning(f"[trip={record.trip_id}] Telemetry write failed: {e}")


class InMemoryTelemetrySink(TelemetrySink):
    """Keeps records in a list; used in tests and local runs."""

    def __init__(self):
        self.records: List[QueryTelemetry] = []

    def write(self, record: QueryTelemetry) -> None:
        self.records.append(record)


class JsonlTelemetrySink(TelemetrySink):
    """
    Appends records to a JSON Lines file.

    Args:
        logs_dir: Directory for the log file (default: "logs")
        filename: Log file name inside logs_dir
    """

    def __init__(self, logs_dir: str = "logs", filename: str = "query_telemetry.jsonl"):
        self.log_file = Path(logs_dir) / filename
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def write(self, record: QueryTelemetry) -> None:
        entry = record.model_dump(mode="json", by_alias=True)
        with self._lock:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")

    def summarize(self) -> Dict[str, float]:
        """
        Totals across every record in the log file.

        Returns:
            Dictionary with query counts, token totals and cost
        """
        summary = {
            "total_queries": 0,
            "cached_queries": 0,
            "deterministic_queries": 0,
            "total_tokens": 0,
            "total_cost_usd": 0.0,
        }
        if not self.log_file.exists():
            return summary

        with open(self.log_file, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    continue

                summary["total_queries"] += 1
                summary["cached_queries"] += int(bool(entry.get("cached")))
                summary["deterministic_queries"] += int(bool(entry.get("deterministic")))
                summary["total_tokens"] += entry.get("tokensUsed", 0)
                summary["total_cost_usd"] += entry.get("estimatedCostUsd", 0.0)

        summary["total_cost_usd"] = round(summary["total_cost_usd"], 6)
        return summary
