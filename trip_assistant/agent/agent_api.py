"""
FastAPI endpoints for the agent orchestrator and itinerary generation.
"""

import json
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from trip_assistant.services import Services, get_services
from trip_assistant.shared.contracts.agent import AgentChatResponse, GenerateItineraryResponse
from trip_assistant.shared.contracts.events import WireModel
from trip_assistant.shared.errors import TripAssistantError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agent", tags=["agent"])


# ============================================================================
# Request Models
# ============================================================================


class AgentChatRequest(WireModel):
    """Request body for one agent turn."""

    trip_id: Optional[str] = None
    messages: Optional[List[Any]] = None


class GenerateItineraryRequest(WireModel):
    """Request body for itinerary generation."""

    trip_name: Any = None
    start_date: Any = None
    end_date: Any = None
    trip_description: Any = None


def _to_http_error(e: Exception, _log: str, action: str) -> HTTPException:
    if isinstance(e, TripAssistantError):
        logger.warning(f"{_log}Request failed | status={e.status_code}, error={e}")
        return HTTPException(status_code=e.status_code, detail=str(e))
    logger.exception(f"{_log}Unexpected failure: {e}")
    return HTTPException(status_code=500, detail=f"Failed to {action}: {str(e)}")


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/chat", response_model=AgentChatResponse)
def agent_chat(request: AgentChatRequest, services: Services = Depends(get_services)):
    """Run one conversation turn; proposed actions are returned, never applied."""
    if not request.trip_id:
        raise HTTPException(status_code=400, detail="Invalid tripId")

    _log = f"[trip={request.trip_id}] [graph=agent] [api=chat] "
    try:
        response = services.orchestrator.chat_about_trip(request.trip_id, request.messages)
    except Exception as e:
        raise _to_http_error(e, _log, "process agent request")

    logger.info(f"{_log}Turn complete | actions={len(response.actions)}, tokens={response.tokens_used}")
    return response


@router.post("/generate-itinerary", response_model=GenerateItineraryResponse)
def generate_itinerary(request: GenerateItineraryRequest, services: Services = Depends(get_services)):
    """Generate placeholder events from a trip description in one call."""
    _log = f"[trip_name={request.trip_name}] [graph=generation] [api=generate-itinerary] "
    try:
        return services.generator.generate_all(
            request.trip_name,
            request.start_date,
            request.end_date,
            request.trip_description,
        )
    except Exception as e:
        raise _to_http_error(e, _log, "generate itinerary")


@router.post("/generate-itinerary-stream")
def generate_itinerary_stream(request: GenerateItineraryRequest, services: Services = Depends(get_services)):
    """
    Stream generated events as server-sent events.

    Each event is one ``{"event": ...}`` message, followed by a single
    ``{"done": true, ...}`` summary. A failure after the stream has started
    is sent inline as ``{"error": ...}``.
    """
    _log = f"[trip_name={request.trip_name}] [graph=generation] [api=generate-itinerary-stream] "
    generator = services.generator

    try:
        generator.validate_request(
            request.trip_name,
            request.start_date,
            request.end_date,
            request.trip_description,
        )
    except Exception as e:
        raise _to_http_error(e, _log, "generate itinerary")

    def event_generator():
        try:
            for kind, payload in generator.stream_itinerary(
                request.trip_name,
                request.start_date,
                request.end_date,
                request.trip_description,
            ):
                if kind == "event":
                    yield json.dumps({"event": payload.to_wire()})
                else:
                    yield json.dumps({"done": True, **payload.to_wire()})
        except Exception as e:
            logger.error(f"{_log}Stream aborted: {e}")
            yield json.dumps({"error": str(e) or "Generation failed"})

    return EventSourceResponse(
        event_generator(),
        headers={
            "Cache-Control": "no-cache, no-transform",
            "X-Accel-Buffering": "no",
        },
    )
