"""Health check endpoint for monitoring service status."""

from typing import Literal

from fastapi import APIRouter, status
from pydantic import BaseModel

from chat_relay.managers.ai_responder import ai_responder
from chat_relay.managers.connection_registry import connection_registry

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: Literal["healthy"]
    active_connections: int
    ai_provider: Literal["configured", "not_configured"]


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check() -> HealthResponse:
    """
    Report relay status.

    The relay keeps serving chat without an AI credential (replies fall
    back to a fixed text), so a missing provider is reported but does not
    make the service unhealthy.

    Returns:
        HealthResponse: Number of open connections and provider state.
    """
    return HealthResponse(
        status="healthy",
        active_connections=len(connection_registry),
        ai_provider=(
            "configured" if ai_responder.is_configured else "not_configured"
        ),
    )
