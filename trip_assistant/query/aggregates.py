"""
Deterministic aggregate functions over itinerary events.

These answer common trip questions exactly, without an LLM call. All
functions are pure; dates are read from the category-specific fields.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

from trip_assistant.events.dates import as_utc, date_part, parse_iso, sort_key
from trip_assistant.shared.contracts.events import (
    AccommodationEvent,
    Event,
    ExperienceEvent,
    MealEvent,
    TravelEvent,
)


DAY = timedelta(days=1)

# Gaps at or above this are separate trip legs, not layovers
MAX_LAYOVER = timedelta(hours=48)

# Free days are listed up to this many in the answer sentence
FREE_DAYS_PREVIEW = 5

DateLike = Union[datetime, date]


@dataclass(frozen=True)
class HoursMinutes:
    """A duration broken into whole hours and leftover minutes."""

    hours: int
    minutes: int

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> "HoursMinutes":
        total_minutes = int(delta.total_seconds() // 60)
        return cls(hours=total_minutes // 60, minutes=total_minutes % 60)


@dataclass(frozen=True)
class BusiestDay:
    date: str
    count: int


def _countries_of(event: Event) -> List[str]:
    if isinstance(event, TravelEvent):
        return [event.departure.location.country, event.arrival.location.country]
    if isinstance(event, AccommodationEvent):
        return [event.check_in.location.country]
    if isinstance(event, (ExperienceEvent, MealEvent)):
        return [event.location.country]
    raise TypeError(f"Unsupported event type: {type(event).__name__}")


def _cities_of(event: Event) -> List[str]:
    if isinstance(event, TravelEvent):
        return [event.departure.location.city, event.arrival.location.city]
    if isinstance(event, AccommodationEvent):
        return [event.check_in.location.city]
    if isinstance(event, (ExperienceEvent, MealEvent)):
        return [event.location.city]
    raise TypeError(f"Unsupported event type: {type(event).__name__}")


def _unique(values: List[str]) -> List[str]:
    """Deduplicate non-empty strings, keeping first-seen order."""
    return list(dict.fromkeys(value for value in values if value))


def list_countries(events: List[Event]) -> List[str]:
    """Countries referenced by travel legs, check-ins or event locations."""
    return _unique([country for event in events for country in _countries_of(event)])


def count_countries(events: List[Event]) -> int:
    return len(list_countries(events))


def list_cities(events: List[Event]) -> List[str]:
    """Cities referenced by travel legs, check-ins or event locations."""
    return _unique([city for event in events for city in _cities_of(event)])


def count_flights(events: List[Event]) -> int:
    return sum(1 for event in events if isinstance(event, TravelEvent) and event.type == "flight")


def count_events(events: List[Event]) -> int:
    return len(events)


def count_events_by_category(events: List[Event]) -> Dict[str, int]:
    counts = {"travel": 0, "accommodation": 0, "experience": 0, "meal": 0}
    for event in events:
        counts[event.category] += 1
    return counts


def calculate_hotel_nights(events: List[Event]) -> int:
    """Sum of nights per stay; partial days round up."""
    total = 0
    for event in events:
        if not isinstance(event, AccommodationEvent):
            continue
        check_in = parse_iso(event.check_in.date)
        check_out = parse_iso(event.check_out.date)
        if check_in is None or check_out is None:
            continue
        total += math.ceil((check_out - check_in) / DAY)
    return total


def calculate_longest_layover(events: List[Event]) -> Optional[HoursMinutes]:
    """
    Longest gap between one travel event's arrival and the next departure.

    Travel events are ordered by start. Gaps that are not positive, or are
    48 hours or longer, are not layovers.

    Returns:
        HoursMinutes for the longest layover, or None if there is none
    """
    travel = sorted(
        (event for event in events if isinstance(event, TravelEvent)),
        key=lambda event: sort_key(event.start),
    )

    longest: Optional[timedelta] = None
    for previous, following in zip(travel, travel[1:]):
        arrival = parse_iso(previous.arrival.date)
        departure = parse_iso(following.departure.date)
        if arrival is None or departure is None:
            continue
        gap = departure - arrival
        if timedelta(0) < gap < MAX_LAYOVER and (longest is None or gap > longest):
            longest = gap

    if longest is None:
        return None
    return HoursMinutes.from_timedelta(longest)


def calculate_total_travel_duration(events: List[Event]) -> HoursMinutes:
    """Sum of arrival minus departure over all travel events."""
    total = timedelta(0)
    for event in events:
        if not isinstance(event, TravelEvent):
            continue
        departure = parse_iso(event.departure.date)
        arrival = parse_iso(event.arrival.date)
        if departure is None or arrival is None:
            continue
        total += arrival - departure
    return HoursMinutes.from_timedelta(total)


def find_busiest_day(events: List[Event]) -> Optional[BusiestDay]:
    """
    Day with the most events, bucketed by the date part of ``start``.

    Ties go to the day that first reaches the maximum count while scanning
    events in their given order.
    """
    counts: Dict[str, int] = {}
    busiest: Optional[BusiestDay] = None
    for event in events:
        day = date_part(event.start)
        counts[day] = counts.get(day, 0) + 1
        if busiest is None or counts[day] > busiest.count:
            busiest = BusiestDay(date=day, count=counts[day])
    return busiest


def find_free_days(events: List[Event], trip_start: DateLike, trip_end: DateLike) -> List[str]:
    """Dates in the inclusive range with no event starting on them."""
    busy = {date_part(event.start) for event in events}
    current = as_utc(trip_start).date()
    last = as_utc(trip_end).date()

    free = []
    while current <= last:
        day = current.isoformat()
        if day not in busy:
            free.append(day)
        current += DAY
    return free


def calculate_trip_duration(trip_start: DateLike, trip_end: DateLike) -> int:
    """Inclusive number of calendar days between trip start and end."""
    start = as_utc(trip_start)
    end = as_utc(trip_end)
    return (end.date() - start.date()).days + 1


def get_earliest_event(events: List[Event]) -> Optional[Event]:
    if not events:
        return None
    return min(events, key=lambda event: sort_key(event.start))


def get_latest_event(events: List[Event]) -> Optional[Event]:
    if not events:
        return None
    return max(events, key=lambda event: sort_key(event.end or event.start))


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def _answer_count_countries(events, trip_start, trip_end) -> str:
    count = count_countries(events)
    return f"You are visiting {count} {_plural(count, 'country', 'countries')}."


def _answer_list_countries(events, trip_start, trip_end) -> str:
    countries = list_countries(events)
    if not countries:
        return "No countries found in your itinerary."
    noun = _plural(len(countries), "country", "countries")
    return f"You are visiting {len(countries)} {noun}: {', '.join(countries)}."


def _answer_count_flights(events, trip_start, trip_end) -> str:
    count = count_flights(events)
    return f"You have {count} {_plural(count, 'flight', 'flights')}."


def _answer_count_events(events, trip_start, trip_end) -> str:
    count = count_events(events)
    return f"Your trip has {count} {_plural(count, 'event', 'events')}."


def _answer_hotel_nights(events, trip_start, trip_end) -> str:
    nights = calculate_hotel_nights(events)
    return f"You have {nights} {_plural(nights, 'night', 'nights')} of accommodation."


def _answer_longest_layover(events, trip_start, trip_end) -> str:
    layover = calculate_longest_layover(events)
    if layover is None:
        return "No layovers found between consecutive travel events."
    if layover.hours == 0:
        return f"Your longest layover is {layover.minutes} minutes."
    return f"Your longest layover is {layover.hours} hours and {layover.minutes} minutes."


def _answer_total_travel(events, trip_start, trip_end) -> str:
    duration = calculate_total_travel_duration(events)
    return f"Your total travel time is {duration.hours} hours and {duration.minutes} minutes."


def _answer_busiest_day(events, trip_start, trip_end) -> str:
    busiest = find_busiest_day(events)
    if busiest is None:
        return "No events found."
    noun = _plural(busiest.count, "event", "events")
    return f"Your busiest day is {busiest.date} with {busiest.count} {noun}."


def _answer_free_days(events, trip_start, trip_end) -> str:
    if trip_start is None or trip_end is None:
        return "Cannot determine free days without trip start and end dates."
    free_days = find_free_days(events, trip_start, trip_end)
    if not free_days:
        return "You have no free days - every day has at least one event!"
    preview = ", ".join(free_days[:FREE_DAYS_PREVIEW])
    more = "..." if len(free_days) > FREE_DAYS_PREVIEW else ""
    noun = _plural(len(free_days), "day", "days")
    return f"You have {len(free_days)} free {noun}: {preview}{more}."


def _answer_list_cities(events, trip_start, trip_end) -> str:
    cities = list_cities(events)
    if not cities:
        return "No cities found in your itinerary."
    noun = _plural(len(cities), "city", "cities")
    return f"You are visiting {len(cities)} {noun}: {', '.join(cities)}."


def _answer_trip_duration(events, trip_start, trip_end) -> str:
    if trip_start is None or trip_end is None:
        return "Cannot determine trip duration without start and end dates."
    days = calculate_trip_duration(trip_start, trip_end)
    return f"Your trip is {days} {_plural(days, 'day', 'days')} long."


DETERMINISTIC_FUNCTIONS: Dict[str, Callable[..., str]] = {
    "countCountries": _answer_count_countries,
    "listCountries": _answer_list_countries,
    "countFlights": _answer_count_flights,
    "countEvents": _answer_count_events,
    "calculateHotelNights": _answer_hotel_nights,
    "calculateLongestLayover": _answer_longest_layover,
    "calculateTotalTravelDuration": _answer_total_travel,
    "findBusiestDay": _answer_busiest_day,
    "findFreeDays": _answer_free_days,
    "listCities": _answer_list_cities,
    "calculateTripDuration": _answer_trip_duration,
}

UNKNOWN_FUNCTION_ANSWER = "Unknown deterministic function."


def execute_deterministic_function(
    function_name: str,
    events: List[Event],
    trip_start: Optional[DateLike] = None,
    trip_end: Optional[DateLike] = None,
) -> str:
    """
    Run a catalogue function by name and phrase the result as a sentence.

    Unknown names return a fixed sentence instead of raising.
    """
    handler = DETERMINISTIC_FUNCTIONS.get(function_name)
    if handler is None:
        return UNKNOWN_FUNCTION_ANSWER
    return handler(events, trip_start, trip_end)
