"""Handler for REST API call to relay a chat request as event stream."""

import asyncio
import json
import logging
from enum import Enum
from typing import Annotated, Any, AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

import constants
import metrics
from authentication import resolve_identity
from client import UpstreamClientHolder
from configuration import configuration
from models.identity import Identity
from models.requests import ChatRequest
from models.responses import ErrorResponse
from streaming.reframer import StreamReframer
from upstream.client import UpstreamStream
from utils.endpoints import admit_request, check_configuration_loaded
from utils.relay_errors import RelayError, ServerError
from utils.suid import get_suid

logger = logging.getLogger("app.endpoints.handlers")
router = APIRouter(tags=["streaming_chat"])


streaming_chat_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "Streaming response with Server-Sent Events",
        "content": {
            "text/event-stream": {
                "schema": {
                    "type": "string",
                    "example": (
                        "event: status\ndata: connected\n\n"
                        'event: token\ndata: {"t": "He"}\n\n'
                        'event: token\ndata: {"t": "llo"}\n\n'
                        "event: done\ndata: 1\n\n"
                    ),
                }
            }
        },
    },
    400: {"description": "Malformed request body", "model": ErrorResponse},
    401: {"description": "Account not found", "model": ErrorResponse},
    429: {
        "description": "Daily quota or upstream rate limit reached",
        "model": ErrorResponse,
    },
    500: {"description": "Server error", "model": ErrorResponse},
    502: {"description": "Upstream model error", "model": ErrorResponse},
}


class RelayState(str, Enum):
    """Lifecycle of one stream relay."""

    ADMITTING = "admitting"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


def format_stream_event(event: str, data: str) -> str:
    """
    Format one Server-Sent Events (SSE) frame.

    Parameters:
        event (str): Name of the event.
        data (str): Payload, must not contain newlines.

    Returns:
        str: The formatted SSE frame.
    """
    return f"event: {event}\ndata: {data}\n\n"


def stream_status_event() -> str:
    """Build the event sent before any upstream data is read."""
    return format_stream_event(
        constants.STREAM_EVENT_STATUS, constants.STREAM_STATUS_CONNECTED
    )


def stream_token_event(delta: str) -> str:
    """Build the event carrying one content delta."""
    return format_stream_event(
        constants.STREAM_EVENT_TOKEN, json.dumps({"t": delta}, ensure_ascii=False)
    )


def stream_done_event() -> str:
    """Build the end-of-stream event."""
    return format_stream_event(
        constants.STREAM_EVENT_DONE, constants.STREAM_DONE_PAYLOAD
    )


def stream_error_event(message: str = constants.STREAM_ERROR_MESSAGE) -> str:
    """Build the event reporting mid-stream failure."""
    return format_stream_event(
        constants.STREAM_EVENT_ERROR, json.dumps({"message": message}, ensure_ascii=False)
    )


class StreamRelay:
    """One in-flight relay of upstream event stream to the caller.

    The relay owns the upstream stream and closes it when the caller-facing
    response ends: on success, on upstream failure and on caller disconnect.
    """

    def __init__(self, stream: UpstreamStream, session_id: str) -> None:
        """Initialize relay for an already opened upstream stream."""
        self.session_id = session_id
        self.stream = stream
        self.reframer = StreamReframer()
        self.state = RelayState.STREAMING

    async def events(self) -> AsyncIterator[str]:
        """Generate SSE frames for the caller."""
        try:
            yield stream_status_event()
            async for delta in self.reframer.deltas(self.stream.iter_chunks()):
                metrics.llm_stream_tokens_total.inc()
                yield stream_token_event(delta)
            self.state = RelayState.DONE
            yield stream_done_event()
        except asyncio.CancelledError:
            self.state = RelayState.FAILED
            logger.info("Relay %s cancelled, caller disconnected", self.session_id)
            raise
        except Exception as e:  # pylint: disable=broad-exception-caught
            # headers are already sent, failure can be reported only as event
            self.state = RelayState.FAILED
            logger.error("Relay %s failed while streaming: %s", self.session_id, e)
            metrics.llm_calls_failures_total.labels(constants.ERROR_CODE_SERVER).inc()
            yield stream_error_event()
        finally:
            self.stream.close()
            logger.debug(
                "Relay %s finished in state %s, truncated=%s",
                self.session_id,
                self.state.value,
                self.reframer.truncated,
            )


class RelayStreamingResponse(StreamingResponse):
    """Streaming response that owns the upstream stream of its relay.

    The relay generator closes the stream only once it has been started. When
    the caller is gone before the body is sent, the generator never runs, so
    the response closes the stream itself.
    """

    def __init__(self, relay: StreamRelay, **kwargs: Any) -> None:
        """Initialize response streaming the relay events."""
        super().__init__(relay.events(), **kwargs)
        self.relay = relay

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Send the response, then release the upstream connection."""
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.relay.stream.close()


@router.post("/chat/stream", responses=streaming_chat_responses)
async def streaming_chat_endpoint_handler(
    chat_request: ChatRequest,
    identity: Annotated[Identity, Depends(resolve_identity)],
) -> StreamingResponse:
    """
    Handle request to the /chat/stream endpoint.

    Charges one request to the daily quota of the caller, opens streaming
    upstream call and relays content deltas as Server-Sent Events. Failures
    before streaming starts are reported as JSON error responses, failures
    after that as `error` event.

    Returns:
        StreamingResponse: An HTTP streaming response yielding SSE frames
        `status`, `token`, `done` and `error`.
    """
    session_id = get_suid()
    state = RelayState.ADMITTING
    logger.debug("Relay %s in state %s", session_id, state.value)

    check_configuration_loaded(configuration)
    await admit_request(identity, constants.ACTION_CHAT_STREAM)

    state = RelayState.REQUESTING
    logger.debug("Relay %s in state %s", session_id, state.value)
    try:
        client = UpstreamClientHolder().get_client()
        result = await client.complete(chat_request.messages, streaming=True)
    except RelayError:
        raise
    except Exception as e:
        logger.exception("Unexpected failure while calling upstream: %s", e)
        raise ServerError() from e

    if result.stream is None:
        logger.error("Upstream returned no stream for relay %s", session_id)
        raise ServerError()

    relay = StreamRelay(result.stream, session_id)
    return RelayStreamingResponse(
        relay,
        media_type=constants.MEDIA_TYPE_EVENT_STREAM,
        headers={"Cache-Control": "no-cache, no-transform"},
    )
