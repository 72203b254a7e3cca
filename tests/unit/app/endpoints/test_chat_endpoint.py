"""Unit tests for the /chat REST API endpoint."""

from typing import Any

import pytest
from authlib.jose import jwt
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from app.main import app
from client import UpstreamClientHolder
from configuration import AppConfig
from models.user_record import UserRecord
from tests.unit import config_dict
from tests.unit.helpers import StubUpstreamClient
from upstream.upstream_error import classify_upstream_error, transport_error

MESSAGES = {"messages": [{"role": "user", "content": "Hello"}]}
OK_BODY = {"choices": [{"message": {"role": "assistant", "content": "ok"}}]}


@pytest.fixture(name="upstream")
def upstream_fixture(
    mocker: MockerFixture, reset_configuration: AppConfig
) -> StubUpstreamClient:
    """Stub upstream client answering with 'ok'."""
    _ = reset_configuration
    stub = StubUpstreamClient(body=OK_BODY)
    mocker.patch.object(UpstreamClientHolder, "get_client", return_value=stub)
    return stub


@pytest.fixture(name="client")
def client_fixture() -> TestClient:
    """Test client for the app."""
    return TestClient(app)


def test_chat_success(client: TestClient, upstream: StubUpstreamClient) -> None:
    """Test that content of the first choice is returned."""
    response = client.post("/chat", json=MESSAGES)

    assert response.status_code == 200
    assert response.json() == {"ok": True, "content": "ok"}
    assert upstream.calls == [(MESSAGES["messages"], False)]


def test_chat_missing_content(client: TestClient, upstream: StubUpstreamClient) -> None:
    """Test that missing content is returned as empty string."""
    upstream.body = {"choices": []}
    response = client.post("/chat", json=MESSAGES)

    assert response.status_code == 200
    assert response.json() == {"ok": True, "content": ""}


def test_anonymous_daily_limit(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that 11th anonymous request of the day is denied."""
    for _ in range(10):
        response = client.post("/chat", json=MESSAGES)
        assert response.status_code == 200
        assert response.json() == {"ok": True, "content": "ok"}

    response = client.post("/chat", json=MESSAGES)

    assert response.status_code == 429
    body = response.json()
    assert body["ok"] is False
    assert body["code"] == "APP_LIMIT"
    assert body["retry_after_sec"] == 86400
    assert body["message"]
    # quota denial never triggers an upstream call
    assert len(upstream.calls) == 10


def test_anonymous_limit_per_origin(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that anonymous quota is keyed by forwarded client address."""
    for _ in range(10):
        client.post("/chat", json=MESSAGES, headers={"X-Forwarded-For": "1.1.1.1"})

    denied = client.post(
        "/chat", json=MESSAGES, headers={"X-Forwarded-For": "1.1.1.1"}
    )
    allowed = client.post(
        "/chat", json=MESSAGES, headers={"X-Forwarded-For": "2.2.2.2"}
    )

    assert denied.status_code == 429
    assert allowed.status_code == 200
    assert len(upstream.calls) == 11


@pytest.mark.parametrize(
    "payload",
    [{"messages": "hello"}, {"messages": None}, {}, {"messages": [1, 2]}],
)
def test_invalid_body(
    client: TestClient, upstream: StubUpstreamClient, payload: Any
) -> None:
    """Test that malformed body is rejected without consuming quota."""
    response = client.post("/chat", json=payload)

    assert response.status_code == 400
    assert response.json() == {
        "ok": False,
        "code": "VALIDATION",
        "message": "messages must be array",
    }
    assert not upstream.calls
    assert client.get("/quota").json()["used_today"] == 0


def test_upstream_rate_limit(client: TestClient, upstream: StubUpstreamClient) -> None:
    """Test that upstream rate limit is reported with 60 s retry hint."""
    upstream.error = classify_upstream_error(429, "Rate limit reached")

    response = client.post("/chat", json=MESSAGES)

    assert response.status_code == 429
    body = response.json()
    assert body["code"] == "RATE_LIMIT"
    assert body["retry_after_sec"] == 60
    assert "details" not in body


def test_upstream_failure_keeps_quota_charged(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that failed upstream call is not refunded."""
    upstream.error = classify_upstream_error(500, '{"error": "overloaded"}')

    response = client.post("/chat", json=MESSAGES)

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "OPENAI_ERROR"
    assert body["details"] == '{"error": "overloaded"}'
    assert client.get("/quota").json()["used_today"] == 1


def test_upstream_transport_failure(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that unreachable upstream is reported as 502."""
    upstream.error = transport_error(ConnectionError("refused"))

    response = client.post("/chat", json=MESSAGES)

    assert response.status_code == 502
    assert response.json()["code"] == "OPENAI_ERROR"


def test_unexpected_failure_is_server_error(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that unexpected failure does not leak internal detail."""
    upstream.error = RuntimeError("secret internal detail")

    response = client.post("/chat", json=MESSAGES)

    assert response.status_code == 500
    assert response.json() == {"ok": False, "code": "SERVER", "message": "Server error."}


def test_registered_user_without_record(
    client: TestClient, upstream: StubUpstreamClient, reset_configuration: AppConfig
) -> None:
    """Test that valid session of unknown account is rejected with AUTH."""
    reset_configuration.init_from_dict(
        config_dict
        | {
            "authentication": {
                "module": "jwt-cookie",
                "jwt_cookie_config": {"secret": "test-secret-value-1234"},
            }
        }
    )
    token = jwt.encode(
        {"alg": "HS256"}, {"user_id": "ghost"}, "test-secret-value-1234"
    ).decode("utf-8")
    headers = {"Authorization": f"Bearer {token}"}

    response = client.post("/chat", json=MESSAGES, headers=headers)

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH"
    assert not upstream.calls


def test_registered_user_plan_limit(
    client: TestClient, upstream: StubUpstreamClient, reset_configuration: AppConfig
) -> None:
    """Test that registered user is charged against the plan limit."""
    reset_configuration.init_from_dict(
        config_dict
        | {
            "quota": {"plans": {"FREE": 2}, "default_plan": "FREE"},
            "authentication": {
                "module": "jwt-cookie",
                "jwt_cookie_config": {"secret": "test-secret-value-1234"},
            },
        }
    )
    reset_configuration.user_store.persist(UserRecord(id="user-1", plan="FREE"))
    token = jwt.encode(
        {"alg": "HS256"}, {"user_id": "user-1"}, "test-secret-value-1234"
    ).decode("utf-8")
    headers = {"Authorization": f"Bearer {token}"}

    assert client.post("/chat", json=MESSAGES, headers=headers).status_code == 200
    assert client.post("/chat", json=MESSAGES, headers=headers).status_code == 200
    response = client.post("/chat", json=MESSAGES, headers=headers)

    assert response.status_code == 429
    assert response.json()["code"] == "APP_LIMIT"
    quota = client.get("/quota", headers=headers).json()
    assert quota["user_id"] == "user-1"
    assert quota["plan"] == "FREE"
    assert quota["used_today"] == 2
    assert quota["remaining"] == 0
