"""
Event serializer.

Flattens canonical events into a compact structure for LLM context: one
record per event with country/city/venue pulled up from whichever nested
location is relevant for the category, and a small metadata dict.
"""

import json
import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from trip_assistant.events.dates import sort_key, to_iso
from trip_assistant.shared.contracts.events import (
    AccommodationEvent,
    Event,
    ExperienceEvent,
    MealEvent,
    TravelEvent,
)


def serialize_event_for_ai(event: Event) -> Dict[str, Any]:
    """
    Flatten one canonical event.

    Returns:
        Dict with id, category, type, title, start, end, country, city,
        venue and (when non-empty) metadata
    """
    if isinstance(event, TravelEvent):
        departure = event.departure.location
        arrival = event.arrival.location
        flat = _base(event, event.departure.date, event.arrival.date)
        flat["country"] = departure.country or arrival.country
        flat["city"] = departure.city
        flat["venue"] = departure.name
        metadata = {
            "departureCity": departure.city,
            "arrivalCity": arrival.city,
            "departureName": departure.name,
            "arrivalName": arrival.name,
            "flightNumber": event.flight_number,
            "trainNumber": event.train_number,
            "bookingReference": event.booking_reference,
        }
    elif isinstance(event, AccommodationEvent):
        check_in = event.check_in.location
        flat = _base(event, event.check_in.date, event.check_out.date)
        flat["country"] = check_in.country
        flat["city"] = check_in.city
        flat["venue"] = event.place_name or event.location.name
        metadata = {
            "checkIn": event.check_in.date,
            "checkOut": event.check_out.date,
            "bookingReference": event.booking_reference,
        }
    elif isinstance(event, ExperienceEvent):
        flat = _base(event, event.start_date, event.end_date)
        flat.update(_place(event))
        metadata = {"bookingReference": event.booking_reference}
    elif isinstance(event, MealEvent):
        flat = _base(event, event.date, event.date)
        flat.update(_place(event))
        metadata = {"bookingReference": event.reservation_reference}
    else:
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    # Drop empty metadata to keep the token count down
    metadata = {key: value for key, value in metadata.items() if value is not None}
    if metadata:
        flat["metadata"] = metadata
    return flat


def serialize_events_for_ai(events: Iterable[Event]) -> List[Dict[str, Any]]:
    """Flatten events and sort them by start time (stable, unparsable first)."""
    flattened = [serialize_event_for_ai(event) for event in events]
    return sorted(flattened, key=lambda item: sort_key(item["start"]))


def estimate_token_count(payload: Any) -> int:
    """Rough token estimate: one token per four characters of compact JSON."""
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
    return math.ceil(len(text) / 4)


def create_ai_context(
    trip_name: str,
    trip_start: datetime,
    trip_end: datetime,
    events: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """Wrap trip name, bounds and flattened events into the LLM context object."""
    return {
        "trip": {
            "name": trip_name,
            "startDate": to_iso(trip_start),
            "endDate": to_iso(trip_end),
        },
        "events": events,
    }


def _base(event: Event, start: Optional[str], end: Optional[str]) -> Dict[str, Any]:
    return {
        "id": event.id,
        "category": event.category,
        "type": event.type,
        "title": event.title,
        "start": start or "",
        "end": end or "",
    }


def _place(event: Event) -> Dict[str, str]:
    return {
        "country": event.location.country,
        "city": event.location.city,
        "venue": event.location.name,
    }
