"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get(
    "/metrics",
    response_class=Response,
    summary="Prometheus metrics endpoint",
    tags=["metrics"],
)
async def metrics() -> Response:
    """
    Expose relay and AI responder metrics in Prometheus text format.

    Example:
        ```
        # HELP ai_generation_total AI generation attempts by outcome
        # TYPE ai_generation_total counter
        ai_generation_total{outcome="ok"} 12.0
        ai_generation_total{outcome="provider_error"} 1.0
        ```
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
