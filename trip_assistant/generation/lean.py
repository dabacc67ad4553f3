"""
Lean event expansion.

Generated itineraries use a compact schema: travel and accommodation legs
are flat ``{date, name, city, country}`` objects, and experience and meal
events carry ``name``/``city``/``country`` at the top level. Expansion
rewrites these into the nested shape the normalizer expects.
"""

import secrets
from typing import Any, Dict, Mapping

PLACEHOLDER_NOTES = "placeholder"

LEG_FIELDS = {
    "travel": ("departure", "arrival"),
    "accommodation": ("checkIn", "checkOut"),
}

PLACE_FIELDS = ("name", "city", "country")


def _expand_leg(leg: Any) -> Any:
    if not isinstance(leg, Mapping):
        return leg
    rest = {key: value for key, value in leg.items() if key not in ("date", *PLACE_FIELDS)}
    return {
        "date": leg.get("date"),
        "location": {field: leg.get(field) or "" for field in PLACE_FIELDS},
        **rest,
    }


def expand_lean_event(event: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Expand a lean event into the canonical nested shape.

    Travel events take their top-level location from the departure leg and
    accommodation events from check-in, unless a location is already set.
    """
    expanded = dict(event)
    category = expanded.get("category")
    if not isinstance(category, str):
        category = None

    if category in LEG_FIELDS:
        for key in LEG_FIELDS[category]:
            if expanded.get(key):
                expanded[key] = _expand_leg(expanded[key])

        first_leg = expanded.get(LEG_FIELDS[category][0])
        if not expanded.get("location") and isinstance(first_leg, Mapping) and first_leg.get("location"):
            expanded["location"] = dict(first_leg["location"])

    elif category in ("experience", "meal") and not expanded.get("location"):
        expanded["location"] = {field: expanded.get(field) or "" for field in PLACE_FIELDS}
        for field in PLACE_FIELDS:
            expanded.pop(field, None)

    return expanded


def placeholder_id() -> str:
    return f"placeholder-{secrets.token_hex(4)}"


def to_placeholder_event(event: Mapping[str, Any]) -> Dict[str, Any]:
    """Expand a lean event and mark it as a generated placeholder."""
    expanded = expand_lean_event(event)
    expanded["id"] = placeholder_id()
    expanded["notes"] = expanded.get("notes") or PLACEHOLDER_NOTES
    return expanded
