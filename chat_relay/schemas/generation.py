"""Outcome of one AI generation attempt."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from chat_relay.constants import AI_ERROR_TEXT, AI_NOT_CONFIGURED_TEXT

FallbackReason = Literal["not_configured", "provider_error", "empty_response"]


class GenerationOk(BaseModel):  # type: ignore[misc]
    model_config = ConfigDict(frozen=True)

    text: str

    @property
    def outcome(self) -> str:
        return "ok"


class GenerationFallback(BaseModel):  # type: ignore[misc]
    """
    Provider could not produce text.

    `reason` is for logs and metrics; clients only ever see `text`, one of
    the fixed fallback strings.
    """

    model_config = ConfigDict(frozen=True)

    reason: FallbackReason
    detail: str | None = None

    @property
    def outcome(self) -> str:
        return self.reason

    @property
    def text(self) -> str:
        if self.reason == "not_configured":
            return AI_NOT_CONFIGURED_TEXT
        return AI_ERROR_TEXT


GenerationResult = GenerationOk | GenerationFallback
