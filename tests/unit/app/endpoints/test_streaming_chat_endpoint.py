"""Unit tests for the /chat/stream REST API endpoint."""

import asyncio
import json
from typing import Any

import pytest
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from app.endpoints.streaming_chat import (
    RelayState,
    RelayStreamingResponse,
    StreamRelay,
    format_stream_event,
    stream_done_event,
    stream_error_event,
    stream_status_event,
    stream_token_event,
)
from app.main import app
from client import UpstreamClientHolder
from configuration import AppConfig
from tests.unit.helpers import StubUpstreamClient, StubUpstreamStream, sse_chunk
from upstream.upstream_error import classify_upstream_error

MESSAGES = {"messages": [{"role": "user", "content": "Hello"}]}

EXPECTED_EVENTS = (
    "event: status\ndata: connected\n\n"
    'event: token\ndata: {"t": "He"}\n\n'
    'event: token\ndata: {"t": "llo"}\n\n'
    "event: done\ndata: 1\n\n"
)


@pytest.fixture(name="upstream")
def upstream_fixture(
    mocker: MockerFixture, reset_configuration: AppConfig
) -> StubUpstreamClient:
    """Stub upstream client streaming 'Hello' in two deltas."""
    _ = reset_configuration
    stream = StubUpstreamStream(
        [sse_chunk("He"), sse_chunk("llo"), b"data: [DONE]\n\n"]
    )
    stub = StubUpstreamClient(stream=stream)
    mocker.patch.object(UpstreamClientHolder, "get_client", return_value=stub)
    return stub


@pytest.fixture(name="client")
def client_fixture() -> TestClient:
    """Test client for the app."""
    return TestClient(app)


def test_format_stream_event() -> None:
    """Test the SSE frame format."""
    assert format_stream_event("token", "x") == "event: token\ndata: x\n\n"


def test_stream_events() -> None:
    """Test the individual events."""
    assert stream_status_event() == "event: status\ndata: connected\n\n"
    assert stream_done_event() == "event: done\ndata: 1\n\n"
    assert stream_token_event("Hé\n") == 'event: token\ndata: {"t": "Hé\\n"}\n\n'
    assert stream_error_event() == 'event: error\ndata: {"message": "Stream error."}\n\n'


def test_stream_success(client: TestClient, upstream: StubUpstreamClient) -> None:
    """Test that deltas are relayed as token events in order."""
    response = client.post("/chat/stream", json=MESSAGES)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache, no-transform"
    assert response.text == EXPECTED_EVENTS
    assert upstream.calls == [(MESSAGES["messages"], True)]
    assert upstream.stream is not None
    assert upstream.stream.closed


def test_stream_split_chunks(client: TestClient, upstream: StubUpstreamClient) -> None:
    """Test that chunk boundaries inside lines do not change the output."""
    raw = sse_chunk("He") + sse_chunk("llo") + b"data: [DONE]\n\n"
    upstream.stream = StubUpstreamStream([raw[i : i + 7] for i in range(0, len(raw), 7)])

    response = client.post("/chat/stream", json=MESSAGES)

    assert response.text == EXPECTED_EVENTS


def test_stream_ignores_data_after_terminal_marker(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that nothing after the terminal marker is relayed."""
    upstream.stream = StubUpstreamStream(
        [sse_chunk("He"), sse_chunk("llo"), b"data: [DONE]\n\n", sse_chunk("late")]
    )

    response = client.post("/chat/stream", json=MESSAGES)

    assert response.text == EXPECTED_EVENTS


def test_stream_truncated_upstream(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that stream ending without terminal marker still ends with done."""
    upstream.stream = StubUpstreamStream([sse_chunk("He"), sse_chunk("llo")])

    response = client.post("/chat/stream", json=MESSAGES)

    assert response.text == EXPECTED_EVENTS


def test_stream_failure_mid_stream(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that failure after headers were sent is reported as error event."""
    stream = StubUpstreamStream([sse_chunk("He")], failure=ConnectionError("reset"))
    upstream.stream = stream

    response = client.post("/chat/stream", json=MESSAGES)

    assert response.status_code == 200
    assert response.text == (
        "event: status\ndata: connected\n\n"
        'event: token\ndata: {"t": "He"}\n\n'
        'event: error\ndata: {"message": "Stream error."}\n\n'
    )
    assert stream.closed
    # quota is not refunded after failed stream
    assert client.get("/quota").json()["used_today"] == 1


def test_stream_upstream_error_before_streaming(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that upstream error before streaming is a JSON error response."""
    upstream.error = classify_upstream_error(429, "")

    response = client.post("/chat/stream", json=MESSAGES)

    assert response.status_code == 429
    assert response.headers["content-type"] == "application/json"
    assert response.json()["code"] == "RATE_LIMIT"


def test_stream_invalid_body(client: TestClient, upstream: StubUpstreamClient) -> None:
    """Test that malformed body is rejected before streaming."""
    response = client.post("/chat/stream", json={"messages": "hi"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION"
    assert not upstream.calls


def test_stream_shares_quota_with_chat(
    client: TestClient, upstream: StubUpstreamClient
) -> None:
    """Test that streaming and non-streaming calls consume the same quota."""
    upstream.body = {"choices": [{"message": {"content": "ok"}}]}
    for _ in range(5):
        assert client.post("/chat", json=MESSAGES).status_code == 200
    for _ in range(5):
        upstream.stream = StubUpstreamStream([b"data: [DONE]\n"])
        assert client.post("/chat/stream", json=MESSAGES).status_code == 200

    response = client.post("/chat/stream", json=MESSAGES)

    assert response.status_code == 429
    assert response.json()["code"] == "APP_LIMIT"
    assert len(upstream.calls) == 10


@pytest.mark.asyncio
async def test_relay_closes_stream_on_cancel() -> None:
    """Test that caller disconnect closes the upstream stream."""
    stream = StubUpstreamStream([sse_chunk("He"), sse_chunk("llo")])
    relay = StreamRelay(stream, "session")
    events = relay.events()

    assert await anext(events) == stream_status_event()
    with pytest.raises(asyncio.CancelledError):
        await events.athrow(asyncio.CancelledError())

    assert stream.closed
    assert relay.state == RelayState.FAILED


@pytest.mark.asyncio
async def test_relay_states() -> None:
    """Test that successful relay ends in DONE state."""
    stream = StubUpstreamStream([b"data: [DONE]\n"])
    relay = StreamRelay(stream, "session")

    events = [event async for event in relay.events()]

    assert events == [stream_status_event(), stream_done_event()]
    assert relay.state == RelayState.DONE
    assert stream.closed


def make_receive() -> Any:
    """Build ASGI receive callable delivering the chat request body once."""
    messages = [
        {
            "type": "http.request",
            "body": json.dumps(MESSAGES).encode("utf-8"),
            "more_body": False,
        }
    ]

    async def receive() -> dict[str, Any]:
        if messages:
            return messages.pop()
        # caller never sends anything else
        await asyncio.Event().wait()
        return {"type": "http.disconnect"}

    return receive


async def send_to_gone_caller(message: dict[str, Any]) -> None:
    """ASGI send callable of a caller that went away before the response."""
    if message["type"] == "http.response.start":
        raise OSError("connection reset by peer")


@pytest.mark.asyncio
async def test_response_closes_stream_when_body_is_never_sent() -> None:
    """Test that stream is closed even when relay events never start."""
    stream = StubUpstreamStream([sse_chunk("He"), b"data: [DONE]\n"])
    response = RelayStreamingResponse(
        StreamRelay(stream, "session"),
        media_type="text/event-stream",
    )
    scope = {"type": "http", "asgi": {"version": "3.0", "spec_version": "2.4"}}

    with pytest.raises(Exception):
        await response(scope, make_receive(), send_to_gone_caller)

    assert stream.closed


@pytest.mark.asyncio
async def test_stream_closed_when_caller_gone_before_response(
    upstream: StubUpstreamClient,
) -> None:
    """Test that app releases upstream stream when sending headers fails."""
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/chat/stream",
        "raw_path": b"/chat/stream",
        "root_path": "",
        "query_string": b"",
        "headers": [
            (b"host", b"testserver"),
            (b"content-type", b"application/json"),
        ],
        "client": ("10.0.0.1", 50000),
        "server": ("testserver", 80),
    }

    with pytest.raises(Exception):
        await app(scope, make_receive(), send_to_gone_caller)

    assert upstream.calls == [(MESSAGES["messages"], True)]
    assert upstream.stream is not None
    assert upstream.stream.closed
