"""Logging configuration and usage telemetry."""

from trip_assistant.shared.logging.config import (
    StructuredFormatter,
    log_state_transition,
    setup_logging,
)
from trip_assistant.shared.logging.telemetry import (
    InMemoryTelemetrySink,
    JsonlTelemetrySink,
    TelemetrySink,
    calculate_cost,
)

__all__ = [
    "setup_logging",
    "log_state_transition",
    "StructuredFormatter",
    "TelemetrySink",
    "InMemoryTelemetrySink",
    "JsonlTelemetrySink",
    "calculate_cost",
]
