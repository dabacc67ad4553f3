"""
Shared fixtures: a scripted LLM client and a small sample itinerary.
"""

from datetime import datetime, timezone

import pytest

from trip_assistant.shared.contracts.events import Trip
from trip_assistant.shared.llm.client import LLMResult, StreamChunk, ToolCall


class FakeLLMClient:
    """
    Stands in for LLMClient.

    complete() pops scripted results in order; stream() replays scripted
    chunks. An Exception in either script is raised at that point.
    """

    def __init__(self, results=None, chunks=None):
        self.results = list(results or [])
        self.chunks = list(chunks or [])
        self.calls = []

    def complete(
        self,
        messages,
        model,
        temperature=None,
        max_tokens=None,
        tools=None,
        response_format=None,
    ):
        self.calls.append(
            {
                "messages": messages,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "tools": tools,
                "response_format": response_format,
            }
        )
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def stream(self, messages, model, temperature=None, max_tokens=None):
        self.calls.append({"messages": messages, "model": model, "stream": True})
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


def make_result(content="", tool_calls=None, prompt_tokens=100, completion_tokens=20, finish_reason="stop"):
    return LLMResult(
        content=content,
        tool_calls=tool_calls or [],
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        finish_reason=finish_reason,
    )


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def llm_result():
    """Factory for scripted LLMResult values."""
    return make_result


@pytest.fixture
def tool_call():
    """Factory for scripted tool calls."""

    def _make(name, arguments, call_id="call_1"):
        return ToolCall(id=call_id, name=name, arguments=arguments)

    return _make


@pytest.fixture
def stream_chunk():
    return StreamChunk


@pytest.fixture
def trip():
    return Trip(
        id="trip-1",
        name="Summer in Europe",
        start_date=datetime(2024, 6, 1, tzinfo=timezone.utc),
        end_date=datetime(2024, 6, 5, tzinfo=timezone.utc),
        user_id="user-1",
    )


@pytest.fixture
def sample_events():
    """New York to Paris, Paris to London, and a Paris hotel stay."""
    return [
        {
            "id": "flight-1",
            "category": "travel",
            "type": "flight",
            "title": "NYC to Paris",
            "departure": {
                "date": "2024-06-01T08:00:00Z",
                "location": {"name": "JFK", "city": "New York", "country": "USA"},
            },
            "arrival": {
                "date": "2024-06-01T18:00:00Z",
                "location": {"name": "CDG", "city": "Paris", "country": "France"},
            },
            "flightNumber": "AF23",
        },
        {
            "id": "hotel-1",
            "category": "accommodation",
            "type": "hotel",
            "title": "Hotel Lutetia",
            "placeName": "Hotel Lutetia",
            "checkIn": {
                "date": "2024-06-01T15:00:00Z",
                "location": {"name": "Hotel Lutetia", "city": "Paris", "country": "France"},
            },
            "checkOut": {
                "date": "2024-06-04T11:00:00Z",
                "location": {"name": "Hotel Lutetia", "city": "Paris", "country": "France"},
            },
        },
        {
            "id": "flight-2",
            "category": "travel",
            "type": "flight",
            "title": "Paris to London",
            "departure": {
                "date": "2024-06-04T14:00:00Z",
                "location": {"name": "CDG", "city": "Paris", "country": "France"},
            },
            "arrival": {
                "date": "2024-06-04T15:30:00Z",
                "location": {"name": "LHR", "city": "London", "country": "UK"},
            },
        },
    ]
