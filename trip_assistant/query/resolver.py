"""
Query resolver.

Answers one natural-language question about a trip. Each request runs the
query graph, which stops at the first applicable branch: cached answer,
deterministic function, or LLM.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from trip_assistant.events.normalizer import normalize_events
from trip_assistant.query.config import DEFAULT_CONFIG, QueryGraphConfig
from trip_assistant.query.graph.build import create_query_graph
from trip_assistant.query.schemas import QueryDependencies, QueryState
from trip_assistant.query.validation import validate_question
from trip_assistant.shared.cache import ResponseCache
from trip_assistant.shared.contracts.events import Trip
from trip_assistant.shared.contracts.query import QueryResponse
from trip_assistant.shared.errors import TripNotFoundError
from trip_assistant.shared.llm.client import LLMClient
from trip_assistant.shared.logging.telemetry import InMemoryTelemetrySink, TelemetrySink
from trip_assistant.shared.stores import TripStore


logger = logging.getLogger(__name__)

NO_EVENTS_ANSWER = (
    "This trip has no events yet. "
    "Add some events to your trip to ask questions about it!"
)


class QueryResolver:
    """
    Resolves trip questions.

    Args:
        llm: Chat client used on the LLM path
        cache: Shared response cache
        telemetry: Sink receiving one record per resolved question
        trip_store: Source of trips and events for ask()
        config: Model settings and request limits
    """

    def __init__(
        self,
        llm: LLMClient,
        cache: Optional[ResponseCache] = None,
        telemetry: Optional[TelemetrySink] = None,
        trip_store: Optional[TripStore] = None,
        config: QueryGraphConfig = DEFAULT_CONFIG,
    ):
        self.deps = QueryDependencies(
            llm=llm,
            cache=cache if cache is not None else ResponseCache(),
            telemetry=telemetry if telemetry is not None else InMemoryTelemetrySink(),
            config=config,
        )
        self.trip_store = trip_store
        self.graph = create_query_graph(self.deps)

    def ask(self, trip_id: str, question: str, user_id: Optional[str] = None) -> QueryResponse:
        """
        Load a trip and its events from the store and answer a question.

        Raises:
            TripNotFoundError: If the store has no such trip
            ValidationError: If the question is rejected
        """
        if self.trip_store is None:
            raise TripNotFoundError(f"Trip {trip_id} not found")

        trip = self.trip_store.get_trip(trip_id)
        if trip is None:
            raise TripNotFoundError(f"Trip {trip_id} not found")

        raw_events = self.trip_store.list_events(trip_id)
        if not raw_events:
            validate_question(question, max_length=self.deps.config.max_question_length)
            logger.info(f"[trip={trip_id}] [graph=query] Trip has no events, skipping resolution")
            return QueryResponse(answer=NO_EVENTS_ANSWER)

        return self.resolve(trip, raw_events, question, user_id=user_id)

    def resolve(
        self,
        trip: Trip,
        events: List[Any],
        question: str,
        user_id: Optional[str] = None,
    ) -> QueryResponse:
        """
        Answer a question against already-loaded trip data.

        Args:
            trip: Trip metadata (name and date bounds)
            events: Raw event records or Event models; normalized here
            question: The user's question
            user_id: Recorded in telemetry only

        Raises:
            ValidationError: Bad question shape, length or injection pattern
            ContextTooLargeError: Serialized context exceeds the ceiling
            UpstreamCallError: The LLM call failed or returned nothing
        """
        initial_state: QueryState = {
            "trip": trip,
            "trip_id": trip.id,
            "user_id": user_id,
            "events": normalize_events(events),
            "question": question,
            "started_at": time.perf_counter(),
        }

        logger.info(
            f"[trip={trip.id}] [graph=query] Resolving question | events={len(initial_state['events'])}"
        )
        final_state = self.graph.invoke(initial_state)
        return _to_response(final_state)


def _to_response(state: Dict[str, Any]) -> QueryResponse:
    return QueryResponse(
        answer=state["answer"],
        tokens_used=state.get("tokens_used", 0),
        prompt_tokens=state.get("prompt_tokens", 0),
        completion_tokens=state.get("completion_tokens", 0),
        estimated_cost_usd=state.get("estimated_cost_usd", 0.0),
        latency_ms=state.get("latency_ms", 0),
        cached=True if state.get("cached") else None,
        deterministic=True if state.get("deterministic") and not state.get("cached") else None,
    )
