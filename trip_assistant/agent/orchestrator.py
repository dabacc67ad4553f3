"""
Agent orchestrator.

Runs one multi-turn conversation step that can propose changes to the
trip. Proposals are returned to the caller and never applied here.
"""

import logging
import time
from datetime import datetime
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from trip_assistant.agent.config import DEFAULT_CONFIG, AgentGraphConfig
from trip_assistant.agent.graph.build import create_agent_graph
from trip_assistant.agent.schemas import AgentDependencies, AgentState
from trip_assistant.events.dates import as_utc
from trip_assistant.events.normalizer import normalize_events
from trip_assistant.shared.cache import ResponseCache
from trip_assistant.shared.contracts.agent import AgentChatResponse, AgentMessage
from trip_assistant.shared.errors import TripNotFoundError, ValidationError
from trip_assistant.shared.llm.client import LLMClient
from trip_assistant.shared.logging.telemetry import InMemoryTelemetrySink, TelemetrySink
from trip_assistant.shared.stores import TripStore


logger = logging.getLogger(__name__)


def parse_messages(messages: Any) -> List[AgentMessage]:
    """
    Validate a conversation.

    Raises:
        ValidationError: If messages is not a non-empty list of
            system/user/assistant turns
    """
    if not isinstance(messages, list) or not messages:
        raise ValidationError("Messages array is required")

    try:
        return [
            message if isinstance(message, AgentMessage) else AgentMessage.model_validate(message)
            for message in messages
        ]
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid message: {e.errors()[0]['msg']}") from e


class AgentOrchestrator:
    """
    Conversational trip agent.

    Args:
        llm: Chat client with tool-calling support
        cache: Response cache written by the deterministic short-circuit
        telemetry: Sink for deterministic short-circuit records
        trip_store: Source of trips and events for chat_about_trip()
        config: Model settings and the context ceiling
    """

    def __init__(
        self,
        llm: LLMClient,
        cache: Optional[ResponseCache] = None,
        telemetry: Optional[TelemetrySink] = None,
        trip_store: Optional[TripStore] = None,
        config: AgentGraphConfig = DEFAULT_CONFIG,
    ):
        self.deps = AgentDependencies(
            llm=llm,
            cache=cache if cache is not None else ResponseCache(),
            telemetry=telemetry if telemetry is not None else InMemoryTelemetrySink(),
            config=config,
        )
        self.trip_store = trip_store
        self.graph = create_agent_graph(self.deps)

    def chat(
        self,
        trip_id: str,
        trip_name: str,
        trip_start: datetime,
        trip_end: datetime,
        events: List[Any],
        messages: List[Any],
    ) -> AgentChatResponse:
        """
        Run one conversation turn.

        Args:
            trip_id: Trip identifier (cache key component)
            trip_name: Display name sent to the model
            trip_start: Trip start bound
            trip_end: Trip end bound
            events: Raw event records or Event models; normalized here
            messages: Conversation so far, oldest first

        Returns:
            AgentChatResponse with the reply and any proposed actions

        Raises:
            ValidationError: Empty or malformed message list
            ContextTooLargeError: Serialized context exceeds the ceiling
            UpstreamCallError: An LLM call failed or returned bad tool arguments
        """
        initial_state: AgentState = {
            "trip_id": trip_id,
            "trip_name": trip_name,
            "trip_start": as_utc(trip_start),
            "trip_end": as_utc(trip_end),
            "events": normalize_events(events),
            "messages": parse_messages(messages),
            "started_at": time.perf_counter(),
        }

        logger.info(
            f"[trip={trip_id}] [graph=agent] Starting turn | "
            f"messages={len(initial_state['messages'])}, events={len(initial_state['events'])}"
        )
        final_state = self.graph.invoke(initial_state)

        return AgentChatResponse(
            reply=final_state.get("reply", ""),
            actions=final_state.get("actions", []),
            tokens_used=final_state.get("tokens_used", 0),
            prompt_tokens=final_state.get("prompt_tokens", 0),
            completion_tokens=final_state.get("completion_tokens", 0),
            estimated_cost_usd=final_state.get("estimated_cost_usd", 0.0),
            latency_ms=final_state.get("latency_ms", 0),
        )

    def chat_about_trip(self, trip_id: str, messages: List[Any]) -> AgentChatResponse:
        """
        Load a trip from the store and run one turn against it.

        Raises:
            TripNotFoundError: If the store has no such trip
        """
        parse_messages(messages)
        trip = self.trip_store.get_trip(trip_id) if self.trip_store is not None else None
        if trip is None:
            raise TripNotFoundError(f"Trip {trip_id} not found")

        return self.chat(
            trip.id,
            trip.name,
            trip.start_date,
            trip.end_date,
            self.trip_store.list_events(trip_id),
            messages,
        )
