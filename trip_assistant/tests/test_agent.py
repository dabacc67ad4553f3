"""
Tests for the agent orchestrator.

Covers tool-call conversion into proposed actions, the two-call token
accounting, the deterministic short-circuit and action status transitions.
"""

import json

import pytest

from trip_assistant.agent.config import get_config
from trip_assistant.agent.orchestrator import AgentOrchestrator
from trip_assistant.agent.tools import TOOL_DEFINITIONS, parse_tool_calls_to_actions
from trip_assistant.events.normalizer import normalize_events
from trip_assistant.shared.cache import ResponseCache
from trip_assistant.shared.contracts.agent import AgentAction
from trip_assistant.shared.contracts.events import EventRef, MealEvent, TravelEvent
from trip_assistant.shared.errors import (
    ContextTooLargeError,
    InvalidActionTransitionError,
    TripNotFoundError,
    UpstreamCallError,
    ValidationError,
)
from trip_assistant.shared.logging.telemetry import InMemoryTelemetrySink
from trip_assistant.shared.stores import InMemoryTripStore


# ============================================================================
# Test Fixtures
# ============================================================================


def _make_orchestrator(llm, cache=None, telemetry=None, trip_store=None, **config):
    return AgentOrchestrator(
        llm,
        cache=cache or ResponseCache(),
        telemetry=telemetry or InMemoryTelemetrySink(),
        trip_store=trip_store,
        config=get_config(**config),
    )


def _chat(orchestrator, trip, events, content):
    return orchestrator.chat(
        trip.id,
        trip.name,
        trip.start_date,
        trip.end_date,
        events,
        [{"role": "user", "content": content}],
    )


CREATE_DINNER = json.dumps(
    {
        "category": "meal",
        "type": "restaurant",
        "title": "Dinner at Septime",
        "start": "2024-06-02T19:00:00",
        "date": "2024-06-02T19:00:00",
        "location": {"name": "Septime", "city": "Paris", "country": "France"},
    }
)


# ============================================================================
# TestToolDefinitions
# ============================================================================


class TestToolDefinitions:
    """Tests for the tool schema set."""

    def test_three_tools(self):
        """Exactly create, edit and delete are offered."""
        names = [tool["function"]["name"] for tool in TOOL_DEFINITIONS]

        assert names == ["create_event", "edit_event", "delete_event"]

    def test_required_arguments(self):
        """Edit and delete must name the target event."""
        by_name = {tool["function"]["name"]: tool["function"]["parameters"] for tool in TOOL_DEFINITIONS}

        assert by_name["create_event"]["required"] == ["category", "type", "title", "start", "location"]
        assert by_name["edit_event"]["required"] == ["eventId"]
        assert by_name["delete_event"]["required"] == ["eventId"]


# ============================================================================
# TestParseToolCalls
# ============================================================================


class TestParseToolCalls:
    """Tests for parse_tool_calls_to_actions."""

    def test_create_event(self, tool_call, sample_events):
        """create_event yields a normalized event with a pending id."""
        actions = parse_tool_calls_to_actions(
            [tool_call("create_event", CREATE_DINNER)], normalize_events(sample_events)
        )

        action = actions[0]
        assert action.type == "create_event"
        assert action.status == "proposed"
        assert isinstance(action.event, MealEvent)
        assert action.event.id.startswith("pending-")
        assert action.event.start == "2024-06-02T19:00:00"
        assert len(action.id) == 16

    def test_create_event_without_location(self, tool_call):
        """A missing location defaults to an empty one."""
        actions = parse_tool_calls_to_actions(
            [tool_call("create_event", json.dumps({"category": "meal", "title": "Lunch"}))], []
        )

        assert actions[0].event.location.name == ""

    def test_edit_event_merges_over_existing(self, tool_call, sample_events):
        """edit_event keeps the existing event's fields not being changed."""
        arguments = json.dumps(
            {
                "eventId": "flight-1",
                "arrival": {
                    "date": "2024-06-01T19:00:00Z",
                    "location": {"name": "ORY", "city": "Paris", "country": "France"},
                },
            }
        )

        actions = parse_tool_calls_to_actions(
            [tool_call("edit_event", arguments)], normalize_events(sample_events)
        )

        event = actions[0].event
        assert isinstance(event, TravelEvent)
        assert event.id == "flight-1"
        assert event.title == "NYC to Paris"
        assert event.flight_number == "AF23"
        assert event.end == "2024-06-01T19:00:00Z"
        assert event.arrival.location.name == "ORY"

    def test_edit_unknown_event(self, tool_call):
        """Editing an id not in the trip still yields a titled proposal."""
        actions = parse_tool_calls_to_actions(
            [tool_call("edit_event", json.dumps({"eventId": "ghost"}))], []
        )

        assert actions[0].event.id == "ghost"
        assert actions[0].event.title == "Unknown Event"

    def test_delete_event(self, tool_call, sample_events):
        """delete_event carries the target id, its title and the reason."""
        arguments = json.dumps({"eventId": "hotel-1", "reason": "Staying with friends"})

        actions = parse_tool_calls_to_actions(
            [tool_call("delete_event", arguments)], normalize_events(sample_events)
        )

        action = actions[0]
        assert action.event == EventRef(id="hotel-1", title="Hotel Lutetia")
        assert action.reason == "Staying with friends"

    def test_arguments_wrapped_in_prose_recovered(self, tool_call):
        """Arguments wrapped in prose should be recovered by the fallback."""
        arguments = 'Here you go: {"eventId": "x-1"} thanks'

        actions = parse_tool_calls_to_actions([tool_call("delete_event", arguments)], [])

        assert actions[0].event.id == "x-1"

    def test_unparseable_arguments(self, tool_call):
        """Arguments that are not JSON at all are an upstream failure."""
        with pytest.raises(UpstreamCallError):
            parse_tool_calls_to_actions([tool_call("delete_event", "not json")], [])

    def test_unknown_tool_ignored(self, tool_call):
        """Calls to tools outside the set produce no action."""
        assert parse_tool_calls_to_actions([tool_call("book_flight", "{}")], []) == []


# ============================================================================
# TestAgentAction
# ============================================================================


class TestAgentAction:
    """Tests for action status transitions."""

    def _make_action(self):
        return AgentAction(id="a1", type="delete_event", event=EventRef(id="e1", title="T"))

    def test_confirm_and_reject(self):
        """Proposed actions can move to confirmed or rejected."""
        action = self._make_action()

        assert action.confirm().status == "confirmed"
        assert action.reject().status == "rejected"
        assert action.status == "proposed"

    def test_terminal_states(self):
        """Confirmed or rejected actions never change again."""
        confirmed = self._make_action().confirm()

        with pytest.raises(InvalidActionTransitionError):
            confirmed.reject()
        with pytest.raises(InvalidActionTransitionError):
            confirmed.confirm()

    def test_wire_shape(self):
        """Actions serialize with camelCase keys and the event payload."""
        wire = self._make_action().to_wire()

        assert wire == {
            "id": "a1",
            "type": "delete_event",
            "event": {"id": "e1", "title": "T"},
            "status": "proposed",
        }


# ============================================================================
# TestAgentOrchestrator
# ============================================================================


class TestAgentOrchestrator:
    """Tests for AgentOrchestrator.chat."""

    def test_plain_reply(self, fake_llm, llm_result, trip, sample_events):
        """Without tool calls the first reply is returned as is."""
        fake_llm.results = [llm_result("Your hotel is in Paris.", prompt_tokens=500, completion_tokens=10)]
        orchestrator = _make_orchestrator(fake_llm)

        response = _chat(orchestrator, trip, sample_events, "Where am I staying?")

        assert response.reply == "Your hotel is in Paris."
        assert response.actions == []
        assert response.tokens_used == 510
        assert len(fake_llm.calls) == 1

        call = fake_llm.calls[0]
        assert call["tools"] == TOOL_DEFINITIONS
        assert call["temperature"] == 0.3
        assert call["max_tokens"] == 2000
        assert call["messages"][0]["role"] == "system"
        assert "Current Trip Data:" in call["messages"][0]["content"]
        assert call["messages"][-1] == {"role": "user", "content": "Where am I staying?"}

    def test_tool_calls_become_proposals_with_summary(
        self, fake_llm, llm_result, tool_call, trip, sample_events
    ):
        """Tool calls produce proposals; the summary call's tokens are added."""
        fake_llm.results = [
            llm_result(
                "",
                tool_calls=[tool_call("create_event", CREATE_DINNER, call_id="call_9")],
                prompt_tokens=1000,
                completion_tokens=50,
            ),
            llm_result("I've proposed a dinner at Septime.", prompt_tokens=1100, completion_tokens=20),
        ]
        orchestrator = _make_orchestrator(fake_llm)

        response = _chat(orchestrator, trip, sample_events, "Book dinner at Septime on the 2nd")

        assert response.reply == "I've proposed a dinner at Septime."
        assert [action.type for action in response.actions] == ["create_event"]
        assert response.actions[0].status == "proposed"
        assert response.prompt_tokens == 2100
        assert response.completion_tokens == 70
        assert response.tokens_used == 2170
        assert response.estimated_cost_usd == pytest.approx(2100 / 1e6 * 0.15 + 70 / 1e6 * 0.60)

        summary_call = fake_llm.calls[1]
        assert summary_call["tools"] is None
        assert summary_call["max_tokens"] == 500
        assert summary_call["messages"][-2]["tool_calls"][0]["id"] == "call_9"
        assert summary_call["messages"][-1] == {
            "role": "tool",
            "tool_call_id": "call_9",
            "content": json.dumps({"success": True, "status": "proposed_to_user"}),
        }

    def test_empty_summary_keeps_first_reply(self, fake_llm, llm_result, tool_call, trip, sample_events):
        """An empty summary falls back to the first call's text."""
        fake_llm.results = [
            llm_result("Proposing it now.", tool_calls=[tool_call("delete_event", '{"eventId": "hotel-1"}')]),
            llm_result(""),
        ]
        orchestrator = _make_orchestrator(fake_llm)

        response = _chat(orchestrator, trip, sample_events, "Remove the hotel")

        assert response.reply == "Proposing it now."

    def test_deterministic_short_circuit(self, fake_llm, trip, sample_events):
        """Catalogue questions skip the model and are cached."""
        cache = ResponseCache()
        telemetry = InMemoryTelemetrySink()
        orchestrator = _make_orchestrator(fake_llm, cache=cache, telemetry=telemetry)

        response = _chat(orchestrator, trip, sample_events, "How many flights do I have?")

        assert response.reply == "You have 2 flights."
        assert response.actions == []
        assert response.tokens_used == 0
        assert fake_llm.calls == []
        assert cache.get("trip-1", "How many flights do I have?").answer == "You have 2 flights."
        assert telemetry.records[0].deterministic is True

    def test_uses_latest_user_message(self, fake_llm, llm_result, trip, sample_events):
        """Only the latest user message is classified."""
        fake_llm.results = [llm_result("Sure.")]
        orchestrator = _make_orchestrator(fake_llm)

        response = orchestrator.chat(
            trip.id,
            trip.name,
            trip.start_date,
            trip.end_date,
            sample_events,
            [
                {"role": "user", "content": "How many flights?"},
                {"role": "assistant", "content": "You have 2 flights."},
                {"role": "user", "content": "Add a museum visit"},
            ],
        )

        assert response.reply == "Sure."
        assert len(fake_llm.calls[0]["messages"]) == 4

    def test_context_too_large(self, fake_llm, trip, sample_events):
        """Over the ceiling the model is never called."""
        orchestrator = _make_orchestrator(fake_llm, context_token_limit=10)

        with pytest.raises(ContextTooLargeError):
            _chat(orchestrator, trip, sample_events, "Add a museum visit")

        assert fake_llm.calls == []

    def test_llm_failure_wrapped(self, fake_llm, trip, sample_events):
        """Model failures surface as UpstreamCallError."""
        fake_llm.results = [RuntimeError("boom")]
        orchestrator = _make_orchestrator(fake_llm)

        with pytest.raises(UpstreamCallError, match="AI agent error: boom"):
            _chat(orchestrator, trip, sample_events, "Add a museum visit")

    @pytest.mark.parametrize("messages", [[], None, [{"role": "robot", "content": "hi"}]])
    def test_invalid_messages(self, fake_llm, trip, messages):
        """Empty or malformed conversations are rejected."""
        orchestrator = _make_orchestrator(fake_llm)

        with pytest.raises(ValidationError):
            orchestrator.chat(trip.id, trip.name, trip.start_date, trip.end_date, [], messages)

    def test_chat_about_trip(self, fake_llm, trip, sample_events):
        """The store-backed entry point loads the trip."""
        store = InMemoryTripStore()
        store.add_trip(trip, sample_events)
        orchestrator = _make_orchestrator(fake_llm, trip_store=store)

        response = orchestrator.chat_about_trip(
            "trip-1", [{"role": "user", "content": "What's the trip duration?"}]
        )

        assert response.reply == "Your trip is 5 days long."

        with pytest.raises(TripNotFoundError):
            orchestrator.chat_about_trip("missing", [{"role": "user", "content": "hi"}])
