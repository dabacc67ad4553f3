"""
Event normalizer.

Turns loosely-typed event records (from the store, from user edits, from
LLM tool calls or generation output) into canonical Event models:

1. Accommodation events get ``placeName`` backfilled from legacy name fields.
2. Every location has string ``name``/``city``/``country`` and an optional
   well-formed geolocation.
3. ``start``/``end`` are recomputed from the category-specific dates.
4. Fields outside the category's allow-list are written into ``notes``
   under an "Additional information" header instead of being dropped.
5. A random id is assigned when missing.

Normalization never raises.
"""

import copy
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel

from trip_assistant.shared.contracts.events import (
    EVENT_TYPES,
    AccommodationEvent,
    Event,
    ExperienceEvent,
    GeoPoint,
    Location,
    MealEvent,
    TravelEvent,
    Waypoint,
)


logger = logging.getLogger(__name__)


COMMON_FIELDS = ("id", "category", "type", "title", "start", "end", "location", "notes")

CATEGORY_FIELDS: Dict[str, Tuple[str, ...]] = {
    "travel": (
        "departure",
        "arrival",
        "airline",
        "flightNumber",
        "trainNumber",
        "seat",
        "car",
        "class",
        "bookingReference",
    ),
    "accommodation": ("placeName", "checkIn", "checkOut", "roomNumber", "bookingReference"),
    "experience": ("startDate", "endDate", "bookingReference"),
    "meal": ("date", "reservationReference"),
}

WAYPOINT_FIELDS = ("date", "location")

# Legacy fields that may carry an accommodation's name, in priority order
PLACE_NAME_FIELDS = ("placeName", "hotelName", "hostelName", "airbnbName")

# Category used when the input has none we recognize
FALLBACK_CATEGORY = "experience"

ADDITIONAL_INFO_HEADER = "Additional information:"


@dataclass
class FieldPartition:
    """Result of splitting a raw record against a category allow-list."""

    known: Dict[str, Any] = field(default_factory=dict)
    unknown: Dict[str, Any] = field(default_factory=dict)


def allowed_fields(category: str) -> Tuple[str, ...]:
    """Top-level wire keys allowed for a category."""
    return COMMON_FIELDS + CATEGORY_FIELDS.get(category, ())


def partition_fields(raw: Mapping[str, Any], category: str) -> FieldPartition:
    """
    Split a raw event record into known and unknown fields.

    Unknown fields holding None are dropped, matching how an absent field
    would be treated.
    """
    allowed = allowed_fields(category)
    partition = FieldPartition()
    for key, value in raw.items():
        if key in allowed:
            partition.known[key] = value
        elif value is not None:
            partition.unknown[key] = value
    return partition


def format_unknown_fields(unknown: Mapping[str, Any]) -> List[str]:
    """Render unknown fields as ``key: <JSON value>`` lines."""
    return [
        f"{key}: {json.dumps(value, ensure_ascii=False, separators=(',', ':'), default=str)}"
        for key, value in unknown.items()
    ]


def ensure_location(value: Any) -> Location:
    """Coerce anything into a Location with string name/city/country."""
    if isinstance(value, Location):
        return value
    if not isinstance(value, Mapping):
        return Location()

    geolocation = None
    geo = value.get("geolocation")
    if isinstance(geo, Mapping) and _is_number(geo.get("lat")) and _is_number(geo.get("lng")):
        geolocation = GeoPoint(lat=geo["lat"], lng=geo["lng"])

    return Location(
        name=_text(value.get("name")),
        city=_text(value.get("city")),
        country=_text(value.get("country")),
        geolocation=geolocation,
    )


def normalize_event(event: Any) -> Event:
    """
    Normalize a loosely-typed event record into a canonical Event.

    Args:
        event: A mapping (wire-shaped, camelCase keys) or an Event model

    Returns:
        Canonical TravelEvent, AccommodationEvent, ExperienceEvent or MealEvent
    """
    if isinstance(event, BaseModel):
        raw = event.model_dump(by_alias=True, exclude_none=True)
    elif isinstance(event, Mapping):
        raw = copy.deepcopy(dict(event))
    else:
        logger.warning(f"Normalizing non-mapping event of type {type(event).__name__}")
        raw = {}

    category = raw.get("category")
    if not isinstance(category, str) or category not in CATEGORY_FIELDS:
        raw = _as_fallback_category(raw)
        category = FALLBACK_CATEGORY

    if category == "accommodation":
        raw["placeName"] = next(
            (_text(raw.get(key)) for key in PLACE_NAME_FIELDS if raw.get(key)), ""
        )

    partition = partition_fields(raw, category)
    known = partition.known
    extra_lines = format_unknown_fields(partition.unknown)

    event_type = known.get("type")
    if event_type not in EVENT_TYPES[category]:
        # Coerced subtypes keep their original value in notes
        if event_type not in (None, ""):
            extra_lines += format_unknown_fields({"originalType": event_type})
        event_type = "other"

    base = {
        "id": _text(known.get("id")) or str(uuid.uuid4()),
        "type": event_type,
        "title": _text(known.get("title")),
        "location": ensure_location(known.get("location")),
    }

    if category == "travel":
        departure, departure_extra = _waypoint(known.get("departure"), "departure")
        arrival, arrival_extra = _waypoint(known.get("arrival"), "arrival")
        extra_lines += departure_extra + arrival_extra
        normalized = TravelEvent(
            **base,
            start=departure.date,
            end=arrival.date,
            departure=departure,
            arrival=arrival,
            airline=_optional_text(known.get("airline")),
            flight_number=_optional_text(known.get("flightNumber")),
            train_number=_optional_text(known.get("trainNumber")),
            seat=_optional_text(known.get("seat")),
            car=_optional_text(known.get("car")),
            travel_class=_optional_text(known.get("class")),
            booking_reference=_optional_text(known.get("bookingReference")),
        )
    elif category == "accommodation":
        check_in, check_in_extra = _waypoint(known.get("checkIn"), "checkIn")
        check_out, check_out_extra = _waypoint(known.get("checkOut"), "checkOut")
        extra_lines += check_in_extra + check_out_extra
        normalized = AccommodationEvent(
            **base,
            start=check_in.date,
            end=check_out.date,
            place_name=_text(known.get("placeName")),
            check_in=check_in,
            check_out=check_out,
            room_number=_optional_text(known.get("roomNumber")),
            booking_reference=_optional_text(known.get("bookingReference")),
        )
    elif category == "experience":
        start_date = _text(known.get("startDate"))
        end_date = _text(known.get("endDate"))
        normalized = ExperienceEvent(
            **base,
            start=start_date,
            end=end_date,
            start_date=start_date,
            end_date=end_date,
            booking_reference=_optional_text(known.get("bookingReference")),
        )
    elif category == "meal":
        meal_date = _text(known.get("date"))
        normalized = MealEvent(
            **base,
            start=meal_date,
            end=meal_date,
            date=meal_date,
            reservation_reference=_optional_text(known.get("reservationReference")),
        )
    else:
        raise AssertionError(f"Unhandled event category: {category}")

    normalized.notes = _merge_notes(_text(known.get("notes")), extra_lines)
    return normalized


def normalize_events(events: Iterable[Any]) -> List[Event]:
    """Normalize every record in an iterable."""
    return [normalize_event(event) for event in events]


def validate_event(event: Mapping[str, Any]) -> bool:
    """Check that a raw record carries the dates its category requires."""
    category = event.get("category")
    if category == "accommodation":
        return bool(_nested_date(event, "checkIn") and _nested_date(event, "checkOut"))
    if category == "travel":
        return bool(_nested_date(event, "departure") and _nested_date(event, "arrival"))
    if category == "experience":
        return bool(event.get("startDate") and event.get("endDate"))
    if category == "meal":
        return bool(event.get("date"))
    return False


def _as_fallback_category(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Re-shape a record with an unrecognized category as an experience."""
    original = raw.pop("category", None)
    logger.warning(f"Unrecognized event category {original!r}; normalizing as {FALLBACK_CATEGORY}")
    if original is not None:
        raw["originalCategory"] = original
    raw["category"] = FALLBACK_CATEGORY
    raw.setdefault("startDate", raw.get("start") or "")
    raw.setdefault("endDate", raw.get("end") or "")
    return raw


def _waypoint(value: Any, label: str) -> Tuple[Waypoint, List[str]]:
    """Coerce a nested date/location object, quarantining its extra keys."""
    if not isinstance(value, Mapping):
        return Waypoint(), []
    extra = {
        f"{label}.{key}": item
        for key, item in value.items()
        if key not in WAYPOINT_FIELDS and item is not None
    }
    waypoint = Waypoint(
        date=_text(value.get("date")),
        location=ensure_location(value.get("location")),
    )
    return waypoint, format_unknown_fields(extra)


def _merge_notes(notes: str, extra_lines: List[str]) -> str:
    if not extra_lines:
        return notes
    if notes:
        notes += "\n\n"
    return notes + ADDITIONAL_INFO_HEADER + "\n" + "\n".join(extra_lines)


def _nested_date(event: Mapping[str, Any], key: str) -> Optional[str]:
    value = event.get(key)
    if isinstance(value, Mapping):
        return value.get("date")
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return _text(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
