"""
Service container.

Collaborators are constructed once at process start and handed to the
resolver, the orchestrator and the generator explicitly. The API reads
them from ``app.state.services``.
"""

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from fastapi import Request

from trip_assistant.agent.orchestrator import AgentOrchestrator
from trip_assistant.generation.generator import ItineraryGenerator
from trip_assistant.query.config import DEFAULT_CONFIG as QUERY_CONFIG
from trip_assistant.query.resolver import QueryResolver
from trip_assistant.shared.cache import ResponseCache
from trip_assistant.shared.llm.client import LLMClient
from trip_assistant.shared.logging.telemetry import (
    InMemoryTelemetrySink,
    JsonlTelemetrySink,
    TelemetrySink,
)
from trip_assistant.shared.stores import InMemoryTripStore, TripStore


logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Process-wide collaborators and the components built on them."""

    llm: LLMClient
    cache: ResponseCache
    telemetry: TelemetrySink
    trip_store: TripStore
    resolver: QueryResolver
    orchestrator: AgentOrchestrator
    generator: ItineraryGenerator


def build_services(
    llm: Optional[LLMClient] = None,
    cache: Optional[ResponseCache] = None,
    telemetry: Optional[TelemetrySink] = None,
    trip_store: Optional[TripStore] = None,
) -> Services:
    """
    Wire the resolver, orchestrator and generator onto shared collaborators.

    Missing collaborators are built from the environment: an OpenAI-backed
    LLM client, an in-memory cache and trip store, and a JSON Lines
    telemetry sink under TELEMETRY_DIR when that variable is set.
    """
    llm = llm or LLMClient()
    cache = cache or ResponseCache(ttl=timedelta(hours=QUERY_CONFIG.cache_ttl_hours))
    trip_store = trip_store or InMemoryTripStore()

    if telemetry is None:
        telemetry_dir = os.environ.get("TELEMETRY_DIR")
        telemetry = JsonlTelemetrySink(telemetry_dir) if telemetry_dir else InMemoryTelemetrySink()

    logger.info(
        f"Services built | telemetry={type(telemetry).__name__}, "
        f"trip_store={type(trip_store).__name__}"
    )

    return Services(
        llm=llm,
        cache=cache,
        telemetry=telemetry,
        trip_store=trip_store,
        resolver=QueryResolver(llm, cache=cache, telemetry=telemetry, trip_store=trip_store),
        orchestrator=AgentOrchestrator(llm, cache=cache, telemetry=telemetry, trip_store=trip_store),
        generator=ItineraryGenerator(llm),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the app's service container."""
    return request.app.state.services
