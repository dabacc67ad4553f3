"""
State schema for the query graph.

Defines the data that flows through the LangGraph workflow while a single
question is resolved, plus the dependencies handed to every node.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TypedDict

from trip_assistant.query.config import QueryGraphConfig
from trip_assistant.shared.cache import ResponseCache
from trip_assistant.shared.contracts.events import Event, Trip
from trip_assistant.shared.llm.client import LLMClient
from trip_assistant.shared.logging.telemetry import TelemetrySink


class QueryState(TypedDict, total=False):
    """State for one question, from validation to the final answer."""

    # Request
    trip: Trip
    trip_id: str
    user_id: Optional[str]
    events: List[Event]
    question: str
    started_at: float

    # Routing
    cached: bool
    deterministic: bool
    function_name: Optional[str]

    # LLM context
    context: Dict[str, Any]
    estimated_tokens: int

    # Result
    answer: str
    tokens_used: int
    prompt_tokens: int
    completion_tokens: int
    estimated_cost_usd: float
    latency_ms: int


@dataclass
class QueryDependencies:
    """Collaborators the query nodes call into."""

    llm: LLMClient
    cache: ResponseCache
    telemetry: TelemetrySink
    config: QueryGraphConfig
