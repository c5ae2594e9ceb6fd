"""Tests for the health check and metrics endpoints."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import SecretStr

from chat_relay.managers.ai_responder import ai_responder
from chat_relay.managers.connection_registry import ConnectionRegistry
from tests.mocks.websocket_mocks import create_mock_websocket


@pytest.fixture
def app():
    """
    Create a minimal FastAPI app with only the health and metrics endpoints.

    Returns:
        FastAPI: FastAPI application instance.
    """
    from chat_relay.api.http.health import router as health_router
    from chat_relay.api.http.metrics import router as metrics_router

    test_app = FastAPI()
    test_app.include_router(health_router)
    test_app.include_router(metrics_router)
    return test_app


@pytest.fixture
def client(app):
    """
    Create a test client for the FastAPI application.

    Args:
        app: FastAPI application fixture.

    Returns:
        TestClient: FastAPI test client instance.
    """
    return TestClient(app)


def test_health_without_ai_credential(client):
    """
    Test a missing AI credential is reported but the service stays healthy.

    Args:
        client: FastAPI test client fixture.
    """
    registry = ConnectionRegistry()

    with patch("chat_relay.api.http.health.connection_registry", registry):
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "active_connections": 0,
        "ai_provider": "not_configured",
    }


def test_health_counts_connections(client):
    """
    Test the active connection count comes from the registry.

    Args:
        client: FastAPI test client fixture.
    """
    registry = ConnectionRegistry()
    registry.register(create_mock_websocket())
    registry.register(create_mock_websocket())

    with (
        patch("chat_relay.api.http.health.connection_registry", registry),
        patch.object(ai_responder.settings, "API_KEY", SecretStr("key")),
    ):
        response = client.get("/health")

    assert response.json()["active_connections"] == 2
    assert response.json()["ai_provider"] == "configured"


def test_metrics_endpoint(client):
    """
    Test the Prometheus endpoint exposes the relay metrics.

    Args:
        client: FastAPI test client fixture.
    """
    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "ws_connections_active" in response.text
    assert "ai_generation_total" in response.text
