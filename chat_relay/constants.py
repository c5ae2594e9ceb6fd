"""
Application-level constants for hardcoded relay behavior.

These values define the wire vocabulary and the user-facing texts of the
relay. They are not configurable via environment variables; for configurable
values see chat_relay/settings.
"""

from enum import StrEnum

# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# WebSocket close code for policy violations (RFC 6455 standard)
# Used when rejecting connections from a disallowed origin
WS_POLICY_VIOLATION_CODE = 1008

# Event name of the transient typing indicator frame
TYPING_EVENT = "aiTyping"


class Sender(StrEnum):
    """Origin of an outbound chat frame."""

    USER = "user"
    BOT = "bot"
    SERVER_INFO = "server_info"


# ============================================================================
# User-facing texts
# ============================================================================

# Never include internal error details in these; they are sent to clients
WELCOME_TEMPLATE = "Welcome! You are connected as {client_id}."
INVALID_MESSAGE_TEXT = (
    "Invalid message format. Expected JSON with a string 'text' field."
)
PROCESSING_ERROR_TEXT = "Error processing your message."

# AI responder fallbacks
AI_NOT_CONFIGURED_TEXT = "Sorry, the AI service is not available right now."
AI_ERROR_TEXT = "Sorry, I encountered an error trying to respond."
