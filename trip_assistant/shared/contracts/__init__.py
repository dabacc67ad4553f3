"""Contracts shared between the resolver, the agent and the API layer."""

from trip_assistant.shared.contracts.events import (
    AccommodationEvent,
    Event,
    EventRef,
    ExperienceEvent,
    GeoPoint,
    Location,
    MealEvent,
    TravelEvent,
    Trip,
    Waypoint,
)
from trip_assistant.shared.contracts.query import (
    CacheEntry,
    QueryResponse,
    QueryTelemetry,
    UsageStats,
)
from trip_assistant.shared.contracts.agent import (
    AgentAction,
    AgentChatResponse,
    AgentMessage,
    GenerateItineraryResponse,
    GenerationSummary,
)

__all__ = [
    "AccommodationEvent",
    "Event",
    "EventRef",
    "ExperienceEvent",
    "GeoPoint",
    "Location",
    "MealEvent",
    "TravelEvent",
    "Trip",
    "Waypoint",
    "CacheEntry",
    "QueryResponse",
    "QueryTelemetry",
    "UsageStats",
    "AgentAction",
    "AgentChatResponse",
    "AgentMessage",
    "GenerateItineraryResponse",
    "GenerationSummary",
]
