"""
Query contracts.

Response shape returned by the query resolver, plus the records written to
the response cache and the telemetry sink.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import ConfigDict, Field

from trip_assistant.shared.contracts.events import WireModel


class UsageStats(WireModel):
    """Token usage, cost and latency shared by every LLM-backed response."""

    tokens_used: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    estimated_cost_usd: float = 0.0
    latency_ms: int = 0


class QueryResponse(UsageStats):
    """Answer to a single trip question."""

    answer: str
    cached: Optional[bool] = None
    deterministic: Optional[bool] = None


class CacheEntry(WireModel):
    """
    A cached answer, keyed by hash of trip id and normalized question.

    Entries are immutable once written.
    """

    model_config = ConfigDict(frozen=True)

    trip_id: str
    question_hash: str
    answer: str
    tokens_used: int = 0
    created_at: datetime
    expires_at: datetime


class QueryTelemetry(UsageStats):
    """One telemetry record per resolved question."""

    user_id: Optional[str] = None
    trip_id: str
    question: str
    answer: str
    cached: bool = False
    deterministic: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
