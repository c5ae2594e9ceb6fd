"""
Mock factory functions for WebSocket testing.

Provides mocks for WebSocket connections and helpers to inspect what was
written to them.
"""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from starlette.websockets import WebSocket, WebSocketState


def create_mock_websocket(open: bool = True):
    """
    Creates a mock WebSocket connection with common methods.

    Args:
        open: Whether both sides of the socket report CONNECTED.

    Returns:
        MagicMock: Mocked WebSocket instance
    """
    ws_mock = MagicMock(spec=WebSocket)

    # Send operations
    ws_mock.send_text = AsyncMock()
    ws_mock.send_json = AsyncMock()
    ws_mock.send_bytes = AsyncMock()

    # Connection lifecycle
    ws_mock.accept = AsyncMock()
    ws_mock.close = AsyncMock()

    state = WebSocketState.CONNECTED if open else WebSocketState.DISCONNECTED
    ws_mock.client_state = state
    ws_mock.application_state = state
    ws_mock.headers = {}

    return ws_mock


def close_mock_websocket(ws_mock) -> None:
    """Mark a mock socket as closed by the client."""
    ws_mock.client_state = WebSocketState.DISCONNECTED


def sent_frames(ws_mock) -> list[dict[str, Any]]:
    """
    Decode every frame written to a mock socket with `send_text`.

    Returns:
        list[dict]: Frames in the order they were sent.
    """
    return [json.loads(call.args[0]) for call in ws_mock.send_text.await_args_list]


def chat_frames(ws_mock) -> list[dict[str, Any]]:
    """Frames written to a mock socket, without typing indicators."""
    return [frame for frame in sent_frames(ws_mock) if "sender" in frame]
