"""Tests for structured logging formatters and the log context."""

import json
import logging

import pytest

from chat_relay.logging import (
    HumanReadableFormatter,
    StructuredJSONFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from chat_relay.uvicorn_filters import ExcludeMetricsFilter


@pytest.fixture(autouse=True)
def reset_context():
    clear_log_context()
    yield
    clear_log_context()


def make_record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="chat_relay",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


class TestLogContext:
    def test_set_does_not_mutate_previous_dict(self):
        set_log_context(client_id="client-1")
        before = get_log_context()

        set_log_context(frame="x")

        assert before == {"client_id": "client-1"}
        assert get_log_context() == {"client_id": "client-1", "frame": "x"}

    def test_clear(self):
        set_log_context(client_id="client-1")
        clear_log_context()

        assert get_log_context() == {}


class TestFormatters:
    def test_json_includes_context_and_extras(self):
        set_log_context(client_id="client-7")

        data = json.loads(
            StructuredJSONFormatter().format(make_record(reason="invalid_json"))
        )

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["client_id"] == "client-7"
        assert data["reason"] == "invalid_json"
        assert "environment" in data

    def test_json_truncates_oversized_message(self):
        data = json.loads(
            StructuredJSONFormatter().format(make_record("x" * 300_000))
        )

        assert data["message"].endswith("... [TRUNCATED]")
        assert len(data["message"]) < 300_000

    def test_human_readable_shows_client_id(self):
        set_log_context(client_id="client-2")

        line = HumanReadableFormatter().format(make_record("connected"))

        assert "[client-2]" in line
        assert line.endswith("INFO: connected")

    def test_human_readable_without_context(self):
        line = HumanReadableFormatter().format(
            make_record("boom", level=logging.ERROR)
        )

        assert "[-]" in line
        assert "boom" in line


class TestExcludeMetricsFilter:
    @pytest.mark.parametrize(
        "message, expected",
        [
            ('127.0.0.1 - "GET /metrics HTTP/1.1" 200', False),
            ('127.0.0.1 - "GET /health HTTP/1.1" 200', False),
            ('127.0.0.1 - "GET /ws HTTP/1.1" 101', True),
        ],
    )
    def test_filter(self, message, expected):
        assert ExcludeMetricsFilter().filter(make_record(message)) is expected
