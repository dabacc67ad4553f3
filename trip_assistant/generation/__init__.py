"""
Itinerary generation with incremental event extraction.
"""

from trip_assistant.generation.config import GenerationConfig
from trip_assistant.generation.generator import ItineraryGenerator
from trip_assistant.generation.lean import expand_lean_event
from trip_assistant.generation.scanner import EventStreamExtractor, ScanState, ScannerState, transition

__all__ = [
    "GenerationConfig",
    "ItineraryGenerator",
    "expand_lean_event",
    "EventStreamExtractor",
    "ScanState",
    "ScannerState",
    "transition",
]
