"""
Trip and event store.

The document store that owns trips and events lives outside this package.
TripStore is the interface the resolver and the API read through; the
in-memory implementation backs local runs and tests.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from trip_assistant.shared.contracts.events import Trip


class TripStore(ABC):
    """Read access to trips and their raw event records."""

    @abstractmethod
    def get_trip(self, trip_id: str) -> Optional[Trip]:
        raise NotImplementedError

    @abstractmethod
    def list_events(self, trip_id: str) -> List[Dict[str, Any]]:
        raise NotImplementedError


class InMemoryTripStore(TripStore):
    """Trips and events held in dictionaries (replace with a document store in production)."""

    def __init__(self):
        self._trips: Dict[str, Trip] = {}
        self._events: Dict[str, List[Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def add_trip(self, trip: Trip, events: Optional[List[Mapping[str, Any]]] = None) -> None:
        with self._lock:
            self._trips[trip.id] = trip
            self._events[trip.id] = [dict(event) for event in (events or [])]

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        return self._trips.get(trip_id)

    def list_events(self, trip_id: str) -> List[Dict[str, Any]]:
        return [dict(event) for event in self._events.get(trip_id, [])]
