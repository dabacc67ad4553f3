"""
FastAPI application entry point.

Assembles the FastAPI app with the query and agent routers.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trip_assistant.agent.agent_api import router as agent_router
from trip_assistant.query.query_api import router as query_router
from trip_assistant.services import Services, build_services
from trip_assistant.shared.logging.config import setup_logging


logger = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        services: Pre-built service container. Built from the environment
            when omitted.
    """
    app = FastAPI(
        title="Trip Assistant",
        description="Itinerary questions, trip-editing agent and itinerary generation",
        version="0.1.0",
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = services or build_services()

    # Include routers
    app.include_router(query_router)
    app.include_router(agent_router)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Trip Assistant",
            "version": "0.1.0",
            "endpoints": {
                "query": "/api/trip-query",
                "agent": "/api/agent/chat",
                "generation": "/api/agent/generate-itinerary",
                "generation_stream": "/api/agent/generate-itinerary-stream",
            },
        }

    @app.get("/health")
    async def health():
        """Global health check endpoint."""
        return {"status": "healthy"}

    return app


if __name__ == "__main__":
    import uvicorn

    setup_logging(json_logs=os.environ.get("LOG_FORMAT") == "json")
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
