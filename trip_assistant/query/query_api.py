"""
FastAPI endpoint for trip questions.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException

from trip_assistant.services import Services, get_services
from trip_assistant.shared.contracts.events import WireModel
from trip_assistant.shared.contracts.query import QueryResponse
from trip_assistant.shared.errors import TripAssistantError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["query"])


class TripQueryRequest(WireModel):
    """Request body for a trip question."""

    trip_id: Optional[str] = None
    question: Any = None
    user_id: Optional[str] = None


@router.post("/trip-query", response_model=QueryResponse, response_model_exclude_none=True)
def trip_query(request: TripQueryRequest, services: Services = Depends(get_services)):
    """
    Answer a question about a trip.

    Served from the cache, a deterministic function, or the LLM.
    """
    if not request.trip_id:
        raise HTTPException(status_code=400, detail="Invalid tripId")

    _log = f"[trip={request.trip_id}] [graph=query] [api=trip-query] "
    logger.info(f"{_log}Question received")

    try:
        response = services.resolver.ask(request.trip_id, request.question, user_id=request.user_id)
    except TripAssistantError as e:
        logger.warning(f"{_log}Request failed | status={e.status_code}, error={e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.exception(f"{_log}Unexpected failure: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to process query: {str(e)}")

    logger.info(
        f"{_log}Answered | cached={bool(response.cached)}, "
        f"deterministic={bool(response.deterministic)}, tokens={response.tokens_used}"
    )
    return response
