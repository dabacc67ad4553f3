"""
State schema for the agent graph.

Defines the data that flows through one conversation turn, plus the
dependencies handed to every node.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, TypedDict

from trip_assistant.agent.config import AgentGraphConfig
from trip_assistant.shared.cache import ResponseCache
from trip_assistant.shared.contracts.agent import AgentAction, AgentMessage
from trip_assistant.shared.contracts.events import Event
from trip_assistant.shared.llm.client import LLMClient, LLMResult
from trip_assistant.shared.logging.telemetry import TelemetrySink


class AgentState(TypedDict, total=False):
    """State for one agent turn."""

    # Request
    trip_id: str
    trip_name: str
    trip_start: datetime
    trip_end: datetime
    events: List[Event]
    messages: List[AgentMessage]
    started_at: float

    # Routing
    question: Optional[str]
    deterministic: bool
    function_name: Optional[str]

    # LLM exchange
    llm_messages: List[Dict[str, Any]]
    first_call: LLMResult
    actions: List[AgentAction]

    # Result
    reply: str
    tokens_used: int
    prompt_tokens: int
    completion_tokens: int
    estimated_cost_usd: float
    latency_ms: int


@dataclass
class AgentDependencies:
    """Collaborators the agent nodes call into."""

    llm: LLMClient
    cache: ResponseCache
    telemetry: TelemetrySink
    config: AgentGraphConfig
