"""Event normalization and serialization."""

from trip_assistant.events.normalizer import normalize_event, normalize_events, validate_event
from trip_assistant.events.serializer import (
    create_ai_context,
    estimate_token_count,
    serialize_events_for_ai,
)

__all__ = [
    "normalize_event",
    "normalize_events",
    "validate_event",
    "create_ai_context",
    "estimate_token_count",
    "serialize_events_for_ai",
]
