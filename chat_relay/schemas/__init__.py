from chat_relay.schemas.generation import (
    GenerationFallback,
    GenerationOk,
    GenerationResult,
)
from chat_relay.schemas.message import (
    InboundMessage,
    OutboundMessage,
    TypingIndicator,
)

__all__ = [
    "GenerationFallback",
    "GenerationOk",
    "GenerationResult",
    "InboundMessage",
    "OutboundMessage",
    "TypingIndicator",
]
