"""
Prometheus metrics for WebSocket connection monitoring.

This module defines metrics for tracking relay connections, frame rates,
rejected frames and frame processing durations.
"""

from chat_relay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
    _get_or_create_histogram,
)

# WebSocket Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of active WebSocket connections"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total",
    "Total WebSocket connections",
    ["status"],  # accepted, rejected_origin
)

ws_messages_received_total = _get_or_create_counter(
    "ws_messages_received_total", "Total WebSocket frames received"
)

ws_messages_sent_total = _get_or_create_counter(
    "ws_messages_sent_total", "Total WebSocket frames written"
)

ws_messages_rejected_total = _get_or_create_counter(
    "ws_messages_rejected_total",
    "Inbound frames rejected by validation",
    ["reason"],  # invalid_json, not_an_object, invalid_text, binary_frame
)

ws_send_failures_total = _get_or_create_counter(
    "ws_send_failures_total", "Frames that could not be written to a socket"
)

ws_message_processing_duration_seconds = _get_or_create_histogram(
    "ws_message_processing_duration_seconds",
    "Inbound frame processing duration in seconds (echo, generate, reply)",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_messages_rejected_total",
    "ws_send_failures_total",
    "ws_message_processing_duration_seconds",
]
