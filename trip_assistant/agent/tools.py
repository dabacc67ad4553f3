"""
Tool definitions and tool-call conversion for the agent orchestrator.

The model can call create_event, edit_event and delete_event. Calls are
never executed: each one becomes an AgentAction in the ``proposed`` status
for the caller to confirm or reject.
"""

import logging
import secrets
from typing import Any, Dict, List, Optional

from trip_assistant.events.normalizer import normalize_event
from trip_assistant.shared.contracts.agent import AgentAction
from trip_assistant.shared.contracts.events import Event, EventRef
from trip_assistant.shared.errors import ParseError, UpstreamCallError
from trip_assistant.shared.llm.client import ToolCall
from trip_assistant.shared.parsing import parse_json_response


logger = logging.getLogger(__name__)

UNKNOWN_EVENT_TITLE = "Unknown Event"

ALL_EVENT_TYPES = [
    "flight", "train", "car", "boat", "bus",
    "hotel", "hostel", "airbnb",
    "activity", "tour", "museum", "concert",
    "restaurant", "other",
]


def _location_schema(required: Optional[List[str]] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "city": {"type": "string"},
            "country": {"type": "string"},
        },
    }
    if required:
        schema["required"] = required
    return schema


def _waypoint_schema(description: Optional[str] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "date": {"type": "string"},
            "location": _location_schema(),
        },
    }
    if description:
        schema["description"] = description
    return schema


# =============================================================================
# Tool Definitions
# =============================================================================

CREATE_EVENT_TOOL = {
    "type": "function",
    "function": {
        "name": "create_event",
        "description": "Create a new event in the trip itinerary.",
        "parameters": {
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "enum": ["travel", "accommodation", "experience", "meal"],
                    "description": "The event category",
                },
                "type": {
                    "type": "string",
                    "enum": ALL_EVENT_TYPES,
                    "description": "The specific event type",
                },
                "title": {"type": "string", "description": "Event title"},
                "start": {"type": "string", "description": "Start date/time in ISO 8601"},
                "end": {"type": "string", "description": "End date/time in ISO 8601"},
                "notes": {"type": "string", "description": "Optional notes"},
                "location": _location_schema(required=["name"]),
                "departure": _waypoint_schema("For travel events only"),
                "arrival": _waypoint_schema("For travel events only"),
                "checkIn": _waypoint_schema("For accommodation events only"),
                "checkOut": _waypoint_schema("For accommodation events only"),
                "startDate": {"type": "string", "description": "For experience events only"},
                "endDate": {"type": "string", "description": "For experience events only"},
                "date": {"type": "string", "description": "For meal events only"},
            },
            "required": ["category", "type", "title", "start", "location"],
        },
    },
}

EDIT_EVENT_TOOL = {
    "type": "function",
    "function": {
        "name": "edit_event",
        "description": "Edit an existing event. Only include fields that should change.",
        "parameters": {
            "type": "object",
            "properties": {
                "eventId": {"type": "string", "description": "The ID of the event to edit"},
                "title": {"type": "string"},
                "start": {"type": "string"},
                "end": {"type": "string"},
                "notes": {"type": "string"},
                "location": _location_schema(),
                "departure": _waypoint_schema(),
                "arrival": _waypoint_schema(),
                "checkIn": _waypoint_schema(),
                "checkOut": _waypoint_schema(),
                "startDate": {"type": "string"},
                "endDate": {"type": "string"},
                "date": {"type": "string"},
            },
            "required": ["eventId"],
        },
    },
}

DELETE_EVENT_TOOL = {
    "type": "function",
    "function": {
        "name": "delete_event",
        "description": "Delete an event from the trip.",
        "parameters": {
            "type": "object",
            "properties": {
                "eventId": {"type": "string", "description": "The ID of the event to delete"},
                "reason": {"type": "string", "description": "Brief explanation of why"},
            },
            "required": ["eventId"],
        },
    },
}

TOOL_DEFINITIONS = [CREATE_EVENT_TOOL, EDIT_EVENT_TOOL, DELETE_EVENT_TOOL]


# =============================================================================
# Tool Call Conversion
# =============================================================================


def generate_action_id() -> str:
    return secrets.token_hex(8)


def parse_tool_arguments(call: ToolCall) -> Dict[str, Any]:
    """
    Decode the JSON arguments of a tool call.

    Raises:
        UpstreamCallError: If the arguments are not a JSON object, even
            after the outermost-object fallback
    """
    try:
        args = parse_json_response(call.arguments)
    except ParseError as e:
        raise UpstreamCallError(f"AI agent error: malformed arguments for {call.name}: {e}") from e

    if not isinstance(args, dict):
        raise UpstreamCallError(f"AI agent error: arguments for {call.name} must be an object")
    return args


def parse_tool_calls_to_actions(tool_calls: List[ToolCall], events: List[Event]) -> List[AgentAction]:
    """
    Convert model tool calls into proposed actions.

    Args:
        tool_calls: Calls requested by the model, in order
        events: Current trip events, used to resolve edit and delete targets

    Returns:
        One proposed AgentAction per recognized tool call
    """
    events_by_id = {event.id: event for event in events}
    actions: List[AgentAction] = []

    for call in tool_calls:
        args = parse_tool_arguments(call)

        if call.name == "create_event":
            raw = {
                "id": f"pending-{generate_action_id()}",
                **args,
                "location": args.get("location") or {"name": ""},
            }
            actions.append(
                AgentAction(id=generate_action_id(), type="create_event", event=normalize_event(raw))
            )

        elif call.name == "edit_event":
            updates = dict(args)
            event_id = str(updates.pop("eventId", ""))
            existing = events_by_id.get(event_id)
            merged = {
                **(existing.to_wire() if existing else {}),
                "id": event_id,
                "title": updates.get("title") or (existing.title if existing else UNKNOWN_EVENT_TITLE),
                **updates,
            }
            actions.append(
                AgentAction(id=generate_action_id(), type="edit_event", event=normalize_event(merged))
            )

        elif call.name == "delete_event":
            event_id = str(args.get("eventId", ""))
            existing = events_by_id.get(event_id)
            actions.append(
                AgentAction(
                    id=generate_action_id(),
                    type="delete_event",
                    event=EventRef(
                        id=event_id,
                        title=(existing.title if existing else "") or UNKNOWN_EVENT_TITLE,
                    ),
                    reason=args.get("reason"),
                )
            )

        else:
            logger.warning(f"Ignoring unknown tool call | name={call.name}")

    return actions
