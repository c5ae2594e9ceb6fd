"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the connection registry, the
message relay and a stubbed AI responder.
"""

import os

# Tests never talk to the real provider; set before importing chat_relay
os.environ.pop("GOOGLE_API_KEY", None)
os.environ.setdefault("ENV", "dev")

import pytest  # noqa: E402

from chat_relay.managers.connection_registry import ConnectionRegistry  # noqa: E402
from chat_relay.managers.message_relay import MessageRelay  # noqa: E402
from tests.mocks.responder_mocks import create_stub_responder  # noqa: E402
from tests.mocks.websocket_mocks import create_mock_websocket  # noqa: E402


@pytest.fixture
def registry():
    """
    Provides an empty connection registry.

    Returns:
        ConnectionRegistry: Registry assigning ids `client-1`, `client-2`, ...
    """
    return ConnectionRegistry(id_prefix="client-")


@pytest.fixture
def responder():
    """
    Provides a stub AI responder answering every prompt with "Hi there!".

    Returns:
        MagicMock: Responder whose `generate` is an AsyncMock.
    """
    return create_stub_responder("Hi there!")


@pytest.fixture
def relay(registry, responder):
    """
    Provides a message relay without typing indicator, broadcasting replies.

    Args:
        registry: Fixture providing the registry
        responder: Fixture providing the stub responder
    """
    return MessageRelay(
        registry, responder, typing_indicator=False, bot_reply_scope="all"
    )


@pytest.fixture
def connected(registry):
    """
    Registers three open mock sockets.

    Returns:
        list: The mock sockets, in registration order.
    """
    sockets = [create_mock_websocket() for _ in range(3)]
    for websocket in sockets:
        registry.register(websocket)
    return sockets
