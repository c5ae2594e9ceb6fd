"""Prometheus metrics for the AI responder."""

from chat_relay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_histogram,
)

ai_generation_total = _get_or_create_counter(
    "ai_generation_total",
    "AI generation attempts by outcome",
    ["outcome"],  # ok, not_configured, provider_error, empty_response
)

ai_generation_duration_seconds = _get_or_create_histogram(
    "ai_generation_duration_seconds",
    "AI provider round trip duration in seconds",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

__all__ = ["ai_generation_total", "ai_generation_duration_seconds"]
