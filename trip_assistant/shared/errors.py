"""
Error taxonomy for the trip assistant.

Every error the engine raises on purpose derives from TripAssistantError.
The status_code attribute is only read by the API layer when turning an
error into an HTTP response.
"""


class TripAssistantError(Exception):
    """Base class for caller-visible errors."""

    status_code: int = 500


class ValidationError(TripAssistantError):
    """Raised when a question or request fails input validation."""

    status_code = 400


class TripNotFoundError(TripAssistantError):
    """Raised when the trip store has no trip for the requested id."""

    status_code = 404


class ContextTooLargeError(TripAssistantError):
    """Raised when the serialized trip context exceeds the token ceiling."""

    status_code = 413


class InvalidActionTransitionError(TripAssistantError):
    """Raised when an agent action is moved out of a terminal status."""

    status_code = 409


class UpstreamCallError(TripAssistantError):
    """Raised when the LLM call fails or returns unusable output."""

    status_code = 502


class ParseError(Exception):
    """Raised when LLM output cannot be parsed as JSON."""

    pass
