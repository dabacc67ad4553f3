"""
Tests for event normalization and serialization.

Covers allow-list quarantine into notes, start/end recomputation, subtype
coercion, the category fallback, and the flattened LLM context.
"""

from datetime import datetime, timezone

from trip_assistant.events.dates import parse_iso, to_iso
from trip_assistant.events.normalizer import (
    ADDITIONAL_INFO_HEADER,
    normalize_event,
    normalize_events,
    partition_fields,
    validate_event,
)
from trip_assistant.events.serializer import (
    create_ai_context,
    estimate_token_count,
    serialize_event_for_ai,
    serialize_events_for_ai,
)
from trip_assistant.shared.contracts.events import (
    AccommodationEvent,
    ExperienceEvent,
    MealEvent,
    TravelEvent,
)


# ============================================================================
# Test Fixtures
# ============================================================================


def _make_meal(**overrides):
    meal = {
        "id": "meal-1",
        "category": "meal",
        "type": "restaurant",
        "title": "Dinner at Le Train Bleu",
        "date": "2024-06-02T19:00:00Z",
        "location": {"name": "Le Train Bleu", "city": "Paris", "country": "France"},
    }
    meal.update(overrides)
    return meal


def _make_experience(**overrides):
    experience = {
        "id": "exp-1",
        "category": "experience",
        "type": "museum",
        "title": "Louvre",
        "startDate": "2024-06-02T09:00:00Z",
        "endDate": "2024-06-02T12:00:00Z",
        "location": {"name": "Louvre", "city": "Paris", "country": "France"},
    }
    experience.update(overrides)
    return experience


# ============================================================================
# TestNormalizeEvent
# ============================================================================


class TestNormalizeEvent:
    """Tests for normalize_event."""

    def test_travel_start_end_from_legs(self, sample_events):
        """Travel start/end should come from departure/arrival dates."""
        event = normalize_event({**sample_events[0], "start": "bogus", "end": "bogus"})

        assert isinstance(event, TravelEvent)
        assert event.start == "2024-06-01T08:00:00Z"
        assert event.end == "2024-06-01T18:00:00Z"
        assert event.flight_number == "AF23"

    def test_accommodation_start_end_from_check_in_out(self, sample_events):
        """Accommodation start/end should come from check-in/check-out."""
        event = normalize_event(sample_events[1])

        assert isinstance(event, AccommodationEvent)
        assert event.start == "2024-06-01T15:00:00Z"
        assert event.end == "2024-06-04T11:00:00Z"

    def test_experience_and_meal_dates(self):
        """Experience uses startDate/endDate; meal uses date for both."""
        experience = normalize_event(_make_experience())
        meal = normalize_event(_make_meal())

        assert isinstance(experience, ExperienceEvent)
        assert (experience.start, experience.end) == ("2024-06-02T09:00:00Z", "2024-06-02T12:00:00Z")
        assert isinstance(meal, MealEvent)
        assert meal.start == meal.end == "2024-06-02T19:00:00Z"

    def test_unknown_fields_quarantined_into_notes(self):
        """Fields outside the allow-list should be appended to notes as JSON."""
        event = normalize_event(_make_meal(notes="Window seat", dressCode="smart", guests=4))

        assert event.notes.startswith("Window seat\n\n" + ADDITIONAL_INFO_HEADER)
        assert 'dressCode: "smart"' in event.notes
        assert "guests: 4" in event.notes
        assert "dressCode" not in event.to_wire()

    def test_notes_without_existing_text(self):
        """Quarantined fields alone should start with the header."""
        event = normalize_event(_make_meal(extra={"a": 1}))

        assert event.notes == ADDITIONAL_INFO_HEADER + '\nextra: {"a":1}'

    def test_nested_leg_extras_quarantined(self, sample_events):
        """Unknown keys inside a travel leg should be quarantined with a prefix."""
        raw = dict(sample_events[0])
        raw["departure"] = {**raw["departure"], "terminal": "4"}

        event = normalize_event(raw)

        assert 'departure.terminal: "4"' in event.notes

    def test_missing_location_filled(self):
        """A missing location should become empty strings."""
        event = normalize_event(_make_meal(location=None))

        assert event.location.name == ""
        assert event.location.city == ""
        assert event.location.country == ""

    def test_malformed_geolocation_dropped(self):
        """A geolocation without numeric lat/lng should be dropped."""
        event = normalize_event(
            _make_meal(location={"name": "X", "geolocation": {"lat": "48.8", "lng": 2.3}})
        )

        assert event.location.geolocation is None

    def test_valid_geolocation_kept(self):
        """A numeric geolocation should survive normalization."""
        event = normalize_event(
            _make_meal(location={"name": "X", "geolocation": {"lat": 48.8, "lng": 2.3}})
        )

        assert event.location.geolocation.lat == 48.8

    def test_place_name_backfilled_from_legacy_field(self, sample_events):
        """placeName should be taken from hotelName when missing."""
        raw = dict(sample_events[1])
        raw.pop("placeName")
        raw["hotelName"] = "Le Meurice"

        event = normalize_event(raw)

        assert event.place_name == "Le Meurice"

    def test_unknown_type_coerced_to_other(self):
        """A subtype outside the catalogue becomes 'other' and is kept in notes."""
        event = normalize_event(_make_meal(type="food-truck"))

        assert event.type == "other"
        assert 'originalType: "food-truck"' in event.notes

    def test_known_type_not_quarantined(self):
        """A catalogue subtype should pass through without a notes entry."""
        event = normalize_event(_make_meal(type="restaurant"))

        assert event.type == "restaurant"
        assert "originalType" not in event.notes

    def test_non_string_category_falls_back(self):
        """A category that is not a string should normalize as an experience."""
        event = normalize_event({"id": "x-2", "category": ["meal"], "title": "Lunch"})

        assert isinstance(event, ExperienceEvent)
        assert 'originalCategory: ["meal"]' in event.notes

    def test_unknown_category_falls_back_to_experience(self):
        """An unrecognized category should normalize as an experience."""
        event = normalize_event(
            {
                "id": "x-1",
                "category": "spa",
                "title": "Massage",
                "start": "2024-06-03T10:00:00Z",
                "end": "2024-06-03T11:00:00Z",
            }
        )

        assert isinstance(event, ExperienceEvent)
        assert event.start == "2024-06-03T10:00:00Z"
        assert 'originalCategory: "spa"' in event.notes

    def test_missing_id_assigned(self):
        """An event without id should get a generated one."""
        raw = _make_meal()
        raw.pop("id")

        event = normalize_event(raw)

        assert event.id

    def test_input_not_mutated(self):
        """Normalization should not modify the caller's record."""
        raw = _make_meal(extra="value")
        before = dict(raw)

        normalize_event(raw)

        assert raw == before

    def test_non_mapping_does_not_raise(self):
        """Garbage input should still produce an event."""
        event = normalize_event("not an event")

        assert isinstance(event, ExperienceEvent)

    def test_normalize_is_idempotent_on_models(self, sample_events):
        """Normalizing an already-normalized event should keep its data."""
        first = normalize_event(sample_events[0])
        second = normalize_event(first)

        assert second.to_wire() == first.to_wire()


class TestPartitionAndValidate:
    """Tests for partition_fields and validate_event."""

    def test_partition_splits_known_and_unknown(self):
        """Known keys are per category; None-valued unknowns are dropped."""
        partition = partition_fields({"date": "x", "checkIn": {}, "foo": None, "bar": 1}, "meal")

        assert partition.known == {"date": "x"}
        assert partition.unknown == {"checkIn": {}, "bar": 1}

    def test_validate_event(self, sample_events):
        """Records need their category's dates."""
        assert validate_event(sample_events[0]) is True
        assert validate_event(sample_events[1]) is True
        assert validate_event(_make_meal(date="")) is False
        assert validate_event({"category": "spa"}) is False


# ============================================================================
# TestSerializer
# ============================================================================


class TestSerializer:
    """Tests for the LLM context serializer."""

    def test_travel_flattened(self, sample_events):
        """Travel should take country/city/venue from departure."""
        flat = serialize_event_for_ai(normalize_event(sample_events[0]))

        assert flat["country"] == "USA"
        assert flat["city"] == "New York"
        assert flat["venue"] == "JFK"
        assert flat["metadata"]["arrivalCity"] == "Paris"
        assert flat["metadata"]["flightNumber"] == "AF23"
        assert "trainNumber" not in flat["metadata"]

    def test_accommodation_venue_is_place_name(self, sample_events):
        """Accommodation venue should be the place name."""
        flat = serialize_event_for_ai(normalize_event(sample_events[1]))

        assert flat["venue"] == "Hotel Lutetia"
        assert flat["metadata"]["checkOut"] == "2024-06-04T11:00:00Z"

    def test_empty_metadata_omitted(self):
        """An experience without a booking reference should have no metadata."""
        flat = serialize_event_for_ai(normalize_event(_make_experience()))

        assert "metadata" not in flat

    def test_sorted_by_start(self, sample_events):
        """Serialized events should be ordered by start time."""
        flattened = serialize_events_for_ai(normalize_events(reversed(sample_events)))

        assert [item["id"] for item in flattened] == ["flight-1", "hotel-1", "flight-2"]

    def test_context_shape_and_estimate(self, sample_events):
        """Context should carry trip name and ISO bounds; estimate is chars/4."""
        context = create_ai_context(
            "Summer",
            datetime(2024, 6, 1, tzinfo=timezone.utc),
            datetime(2024, 6, 5, tzinfo=timezone.utc),
            [],
        )

        assert context == {
            "trip": {
                "name": "Summer",
                "startDate": "2024-06-01T00:00:00.000Z",
                "endDate": "2024-06-05T00:00:00.000Z",
            },
            "events": [],
        }
        assert estimate_token_count({"a": "bc"}) == 3  # {"a":"bc"} is 10 chars


class TestDates:
    """Tests for ISO helpers."""

    def test_parse_iso_variants(self):
        """Z suffix, offsets and date-only strings should parse to aware UTC."""
        assert parse_iso("2024-06-01T15:00Z") == datetime(2024, 6, 1, 15, tzinfo=timezone.utc)
        assert parse_iso("2024-06-01T17:00:00+02:00") == datetime(2024, 6, 1, 15, tzinfo=timezone.utc)
        assert parse_iso("2024-06-01") == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert parse_iso("not a date") is None
        assert parse_iso("") is None

    def test_to_iso_millisecond_format(self):
        """Formatting should match the JavaScript toISOString shape."""
        assert to_iso(datetime(2024, 6, 1, 8, 30, 0, 123456, tzinfo=timezone.utc)) == "2024-06-01T08:30:00.123Z"
