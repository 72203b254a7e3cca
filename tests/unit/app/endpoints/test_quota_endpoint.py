"""Unit tests for the /quota REST API endpoint."""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from configuration import AppConfig


@pytest.fixture(name="client")
def client_fixture(reset_configuration: AppConfig) -> TestClient:
    """Test client for the app with fresh quota state."""
    _ = reset_configuration
    return TestClient(app)


def test_anonymous_quota(client: TestClient) -> None:
    """Test quota status of anonymous caller."""
    response = client.get("/quota")

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "user_id": None,
        "plan": None,
        "requests_per_day": 10,
        "used_today": 0,
        "remaining": 10,
    }


def test_quota_does_not_consume(client: TestClient) -> None:
    """Test that asking for quota status is free."""
    for _ in range(3):
        client.get("/quota")

    assert client.get("/quota").json()["used_today"] == 0
