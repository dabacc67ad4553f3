"""
Query classifier.

Maps a natural-language question onto one of a closed catalogue of
deterministic aggregate functions. Rows are tested in order and the first
phrase hit wins; anything unmatched goes to the LLM.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying a question."""

    is_deterministic: bool
    function_name: Optional[str] = None


# (phrases, function name). Order matters: earlier rows win.
QUERY_PATTERNS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (
        (
            "how many countries",
            "number of countries",
            "count countries",
            "countries visiting",
            "countries am i",
            "list countries",
            "which countries",
        ),
        "listCountries",
    ),
    (
        ("how many flights", "number of flights", "count flights", "total flights"),
        "countFlights",
    ),
    (
        ("how many events", "number of events", "total events", "count events"),
        "countEvents",
    ),
    (
        (
            "hotel nights",
            "accommodation nights",
            "nights staying",
            "how many nights",
            "number of nights",
        ),
        "calculateHotelNights",
    ),
    (
        ("longest layover", "biggest layover", "maximum layover", "worst layover"),
        "calculateLongestLayover",
    ),
    (
        (
            "total travel time",
            "total travel duration",
            "time traveling",
            "hours traveling",
            "travel duration",
        ),
        "calculateTotalTravelDuration",
    ),
    (
        ("busiest day", "most events", "most busy day", "busiest date"),
        "findBusiestDay",
    ),
    (
        (
            "free days",
            "days with no events",
            "days without events",
            "empty days",
            "no scheduled",
        ),
        "findFreeDays",
    ),
    (
        ("what cities", "which cities", "list cities", "cities visiting", "cities am i"),
        "listCities",
    ),
    (
        (
            "trip duration",
            "length of trip",
            "days traveling",
            "duration of trip",
            "total days",
        ),
        "calculateTripDuration",
    ),
)


def classify_query(question: str) -> Classification:
    """
    Decide whether a question can be answered by exact computation.

    Args:
        question: Raw user question

    Returns:
        Classification with the matching function name, or
        is_deterministic=False when no row matches
    """
    normalized = question.lower().strip()
    for phrases, function_name in QUERY_PATTERNS:
        if any(phrase in normalized for phrase in phrases):
            return Classification(is_deterministic=True, function_name=function_name)
    return Classification(is_deterministic=False)
