"""Tests for the command line interface."""

import json

from typer.testing import CliRunner

from cli import format_frame, typer_app

runner = CliRunner()


def test_config_masks_api_key(monkeypatch):
    from chat_relay.settings import app_settings

    monkeypatch.setattr(app_settings, "GOOGLE_API_KEY", None)

    result = runner.invoke(typer_app, ["config"])

    assert result.exit_code == 0
    assert "GEMINI_MODEL" in result.output
    assert "not set" in result.output


class TestFormatFrame:
    def test_user_frame_shows_client_id(self):
        raw = json.dumps(
            {"sender": "user", "text": "hello", "originalClientId": "client-4"}
        )

        assert format_frame(raw) == "[cyan]client-4[/cyan]: hello"

    def test_bot_frame(self):
        raw = json.dumps({"sender": "bot", "text": "Hi there!"})

        assert format_frame(raw) == "[green]bot[/green]: Hi there!"

    def test_typing_frames(self):
        assert "typing" in format_frame('{"event": "aiTyping", "isTyping": true}')
        assert format_frame('{"event": "aiTyping", "isTyping": false}') == ""

    def test_not_json(self):
        assert format_frame("garbage") == "[red]? garbage[/red]"

    def test_json_that_is_not_an_object(self):
        assert format_frame("[1]") == "[red]? [1][/red]"
        assert format_frame('"text"') == '[red]? "text"[/red]'
