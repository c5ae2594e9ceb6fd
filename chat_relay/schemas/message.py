import json
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    ValidationError,
    field_validator,
)

from chat_relay.constants import TYPING_EVENT, Sender
from chat_relay.exceptions import InvalidMessageError


def _new_message_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InboundMessage(BaseModel):  # type: ignore[misc]
    """
    Chat frame sent by a client.

    Only `text` is validated; it must be present and a JSON string (an
    empty string is valid). `sender` and `timestamp` are informational and
    dropped when they are not strings.
    """

    model_config = ConfigDict(extra="ignore")

    text: StrictStr
    sender: str | None = None
    timestamp: str | None = None

    @field_validator("sender", "timestamp", mode="before")
    @classmethod
    def _ignore_non_string(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @classmethod
    def parse_frame(cls, raw: str | bytes | None) -> "InboundMessage":
        """
        Decode one inbound WebSocket frame.

        Args:
            raw: Frame payload. Binary frames arrive as bytes and are
                rejected, the relay only speaks text.

        Returns:
            The validated inbound message.

        Raises:
            InvalidMessageError: With `reason` set to one of
                `binary_frame`, `invalid_json`, `not_an_object` or
                `invalid_text`.
        """
        if not isinstance(raw, str):
            raise InvalidMessageError("binary_frame")

        try:
            data = json.loads(raw)
        except ValueError as ex:
            raise InvalidMessageError("invalid_json", str(ex)) from ex

        if not isinstance(data, dict):
            raise InvalidMessageError(
                "not_an_object", f"expected object, got {type(data).__name__}"
            )

        try:
            return cls.model_validate(data)
        except ValidationError as ex:
            raise InvalidMessageError("invalid_text", str(ex)) from ex


class OutboundMessage(BaseModel):  # type: ignore[misc]
    """Chat frame written by the relay, either broadcast or unicast."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=_new_message_id)
    text: str
    sender: Sender
    original_client_id: str | None = Field(
        default=None, alias="originalClientId"
    )
    timestamp: datetime = Field(default_factory=_utcnow)

    def to_frame(self) -> str:
        """Serialize to the JSON text written on the wire."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def user_echo(cls, text: str, client_id: str) -> "OutboundMessage":
        return cls(text=text, sender=Sender.USER, original_client_id=client_id)

    @classmethod
    def bot_reply(
        cls, text: str, client_id: str | None = None
    ) -> "OutboundMessage":
        return cls(text=text, sender=Sender.BOT, original_client_id=client_id)

    @classmethod
    def server_info(
        cls, text: str, client_id: str | None = None
    ) -> "OutboundMessage":
        return cls(
            text=text, sender=Sender.SERVER_INFO, original_client_id=client_id
        )


class TypingIndicator(BaseModel):  # type: ignore[misc]
    """Transient frame telling one client the bot is composing a reply."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    event: Literal["aiTyping"] = TYPING_EVENT
    is_typing: bool = Field(alias="isTyping")

    def to_frame(self) -> str:
        """Serialize to the JSON text written on the wire."""
        return self.model_dump_json(by_alias=True)
