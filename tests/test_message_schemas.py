"""Tests for inbound frame parsing and outbound frame serialization."""

import json
from datetime import datetime

import pytest

from chat_relay.constants import AI_ERROR_TEXT, AI_NOT_CONFIGURED_TEXT, Sender
from chat_relay.exceptions import InvalidMessageError
from chat_relay.schemas import (
    GenerationFallback,
    GenerationOk,
    InboundMessage,
    OutboundMessage,
    TypingIndicator,
)


class TestInboundMessage:
    """Tests for InboundMessage.parse_frame."""

    def test_text_only(self):
        message = InboundMessage.parse_frame('{"text": "hello"}')

        assert message.text == "hello"
        assert message.sender is None
        assert message.timestamp is None

    def test_empty_text_is_valid(self):
        assert InboundMessage.parse_frame('{"text": ""}').text == ""

    def test_optional_fields_and_extra_keys(self):
        message = InboundMessage.parse_frame(
            json.dumps(
                {
                    "text": "hi",
                    "sender": "alice",
                    "timestamp": "2024-05-01T10:00:00Z",
                    "color": "blue",
                }
            )
        )

        assert message.sender == "alice"
        assert message.timestamp == "2024-05-01T10:00:00Z"

    def test_non_string_optional_fields_are_ignored(self):
        """Only `text` is validated; odd sender/timestamp values are dropped."""
        message = InboundMessage.parse_frame(
            '{"text": "hi", "sender": 42, "timestamp": 1714557600}'
        )

        assert message.text == "hi"
        assert message.sender is None
        assert message.timestamp is None

    @pytest.mark.parametrize(
        "raw, reason",
        [
            ('{"foo": "bar"}', "invalid_text"),
            ('{"text": 5}', "invalid_text"),
            ('{"text": null}', "invalid_text"),
            ('{"text": ["a"]}', "invalid_text"),
            ('{"text": true}', "invalid_text"),
            ("not json", "invalid_json"),
            ("", "invalid_json"),
            ('"just a string"', "not_an_object"),
            ('[{"text": "hi"}]', "not_an_object"),
            (b'{"text": "hi"}', "binary_frame"),
            (None, "binary_frame"),
        ],
    )
    def test_rejected_frames(self, raw, reason):
        with pytest.raises(InvalidMessageError) as exc_info:
            InboundMessage.parse_frame(raw)

        assert exc_info.value.reason == reason


class TestOutboundMessage:
    """Tests for OutboundMessage construction and wire format."""

    def test_user_echo_frame(self):
        message = OutboundMessage.user_echo("hello", "client-3")
        frame = json.loads(message.to_frame())

        assert frame["sender"] == "user"
        assert frame["text"] == "hello"
        assert frame["originalClientId"] == "client-3"
        assert frame["id"] == message.id
        # ISO-8601 with UTC offset
        assert datetime.fromisoformat(
            frame["timestamp"].replace("Z", "+00:00")
        ).utcoffset() is not None

    def test_missing_client_id_is_omitted(self):
        frame = json.loads(OutboundMessage.server_info("Welcome").to_frame())

        assert frame["sender"] == "server_info"
        assert "originalClientId" not in frame

    def test_bot_reply_sender(self):
        assert OutboundMessage.bot_reply("hi").sender is Sender.BOT

    def test_ids_are_unique(self):
        ids = {OutboundMessage.bot_reply("x").id for _ in range(100)}
        assert len(ids) == 100

    def test_typing_indicator_frame(self):
        assert json.loads(TypingIndicator(is_typing=False).to_frame()) == {
            "event": "aiTyping",
            "isTyping": False,
        }


class TestGenerationResult:
    """Tests for the AI generation result types."""

    def test_ok_carries_text(self):
        result = GenerationOk(text="42")

        assert result.text == "42"
        assert result.outcome == "ok"

    def test_not_configured_fallback_text(self):
        result = GenerationFallback(reason="not_configured")

        assert result.text == AI_NOT_CONFIGURED_TEXT
        assert result.outcome == "not_configured"

    @pytest.mark.parametrize("reason", ["provider_error", "empty_response"])
    def test_error_fallback_text_hides_detail(self, reason):
        result = GenerationFallback(reason=reason, detail="HTTP 500 from upstream")

        assert result.text == AI_ERROR_TEXT
        assert "500" not in result.text
