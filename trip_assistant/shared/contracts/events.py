"""
Itinerary event contract.

Defines the canonical event shape as a discriminated union over the four
event categories. Field names are snake_case in Python and camelCase on the
wire (``checkIn``, ``placeName``, ``flightNumber``...).
"""

from datetime import datetime
from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


EventCategory = Literal["travel", "accommodation", "experience", "meal"]

TravelType = Literal["flight", "train", "car", "boat", "bus", "other"]
AccommodationType = Literal["hotel", "hostel", "airbnb", "other"]
ExperienceType = Literal["activity", "tour", "museum", "concert", "other"]
MealType = Literal["restaurant", "other"]

# Subtype catalogue per category, used by the normalizer to coerce unknown types
EVENT_TYPES: Dict[str, tuple] = {
    "travel": ("flight", "train", "car", "boat", "bus", "other"),
    "accommodation": ("hotel", "hostel", "airbnb", "other"),
    "experience": ("activity", "tour", "museum", "concert", "other"),
    "meal": ("restaurant", "other"),
}


class WireModel(BaseModel):
    """Base model with camelCase wire aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump using wire aliases, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GeoPoint(WireModel):
    """A latitude/longitude pair."""

    lat: float
    lng: float


class Location(WireModel):
    """A named place. Always present on an event, possibly with empty strings."""

    name: str = ""
    city: str = ""
    country: str = ""
    geolocation: Optional[GeoPoint] = None


class Waypoint(WireModel):
    """A dated location: departure/arrival legs and check-in/check-out."""

    date: str = ""
    location: Location = Field(default_factory=Location)


class BaseEvent(WireModel):
    """Fields shared by every event category."""

    id: str
    title: str = ""
    start: str = ""
    end: str = ""
    location: Location = Field(default_factory=Location)
    notes: str = ""


class TravelEvent(BaseEvent):
    category: Literal["travel"] = "travel"
    type: TravelType = "other"
    departure: Waypoint = Field(default_factory=Waypoint)
    arrival: Waypoint = Field(default_factory=Waypoint)
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    train_number: Optional[str] = None
    seat: Optional[str] = None
    car: Optional[str] = None
    travel_class: Optional[str] = Field(default=None, alias="class")
    booking_reference: Optional[str] = None


class AccommodationEvent(BaseEvent):
    category: Literal["accommodation"] = "accommodation"
    type: AccommodationType = "other"
    place_name: str = ""
    check_in: Waypoint = Field(default_factory=Waypoint)
    check_out: Waypoint = Field(default_factory=Waypoint)
    room_number: Optional[str] = None
    booking_reference: Optional[str] = None


class ExperienceEvent(BaseEvent):
    category: Literal["experience"] = "experience"
    type: ExperienceType = "other"
    start_date: str = ""
    end_date: str = ""
    booking_reference: Optional[str] = None


class MealEvent(BaseEvent):
    category: Literal["meal"] = "meal"
    type: MealType = "other"
    date: str = ""
    reservation_reference: Optional[str] = None


Event = Annotated[
    Union[TravelEvent, AccommodationEvent, ExperienceEvent, MealEvent],
    Field(discriminator="category"),
]


class EventRef(WireModel):
    """Partial event payload: just enough to identify an event."""

    id: str
    title: str


class Trip(WireModel):
    """
    A trip as supplied by the external store.

    Read-only to this package.
    """

    id: str
    name: str = "Untitled Trip"
    start_date: datetime
    end_date: datetime
    user_id: str = ""
    shared_with: Dict[str, Literal["editor", "viewer"]] = Field(default_factory=dict)

