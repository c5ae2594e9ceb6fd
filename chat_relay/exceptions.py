"""
Custom exception classes for the relay.

These exceptions never cross the WebSocket boundary: the relay turns them
into generic `server_info` frames or fallback bot texts.
"""


class RelayError(Exception):
    """Base class for relay errors."""

    pass


class InvalidMessageError(RelayError):
    """
    Inbound frame failed validation.

    Raised when a frame is not JSON, is not a JSON object, or lacks a
    string `text` field.
    """

    def __init__(self, reason: str, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or reason)


class ProviderNotConfiguredError(RelayError):
    """No AI provider credential was available at startup."""

    pass


class ProviderResponseError(RelayError):
    """
    AI provider returned an unusable response.

    Raised for responses that carry no text (blocked prompts, empty
    candidates) or an unexpected JSON shape.
    """

    pass
