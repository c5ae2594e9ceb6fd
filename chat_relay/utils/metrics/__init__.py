"""
Prometheus metrics definitions and utilities.

All relay metrics are re-exported here so callers only need one import:

    from chat_relay.utils.metrics import ws_messages_sent_total
"""

from chat_relay.utils.metrics._helpers import _get_or_create_gauge
from chat_relay.utils.metrics.ai import (
    ai_generation_duration_seconds,
    ai_generation_total,
)
from chat_relay.utils.metrics.websocket import (
    ws_connections_active,
    ws_connections_total,
    ws_message_processing_duration_seconds,
    ws_messages_received_total,
    ws_messages_rejected_total,
    ws_messages_sent_total,
    ws_send_failures_total,
)

app_info = _get_or_create_gauge(
    "app_info",
    "Application information",
    ["version", "python_version", "environment"],
)

__all__ = [
    # WebSocket metrics
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_messages_rejected_total",
    "ws_send_failures_total",
    "ws_message_processing_duration_seconds",
    # AI responder metrics
    "ai_generation_total",
    "ai_generation_duration_seconds",
    # Application metrics
    "app_info",
]
