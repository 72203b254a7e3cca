"""Handler for REST API call to relay a chat request to upstream model."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

import constants
from authentication import resolve_identity
from client import UpstreamClientHolder
from configuration import configuration
from models.identity import Identity
from models.requests import ChatRequest
from models.responses import ChatResponse, ErrorResponse
from upstream.client import message_content
from utils.endpoints import admit_request, check_configuration_loaded
from utils.relay_errors import RelayError, ServerError

logger = logging.getLogger("app.endpoints.handlers")
router = APIRouter(tags=["chat"])


chat_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "Content generated by the model",
        "model": ChatResponse,
    },
    400: {
        "description": "Malformed request body",
        "model": ErrorResponse,
    },
    401: {
        "description": "Account not found",
        "model": ErrorResponse,
    },
    429: {
        "description": "Daily quota or upstream rate limit reached",
        "model": ErrorResponse,
    },
    500: {
        "description": "Server error",
        "model": ErrorResponse,
    },
    502: {
        "description": "Upstream model error",
        "model": ErrorResponse,
    },
}


@router.post("/chat", responses=chat_responses)
async def chat_endpoint_handler(
    chat_request: ChatRequest,
    identity: Annotated[Identity, Depends(resolve_identity)],
) -> ChatResponse:
    """
    Handle request to the /chat endpoint.

    Charges one request to the daily quota of the caller and relays the
    conversation to the upstream model. The quota is not refunded when the
    upstream call fails.

    Returns:
        ChatResponse: Content of the first choice generated by the model.

    Raises:
        RelayError: Rendered as JSON error response with machine-readable code.
    """
    check_configuration_loaded(configuration)

    await admit_request(identity, constants.ACTION_CHAT)

    try:
        client = UpstreamClientHolder().get_client()
        result = await client.complete(chat_request.messages, streaming=False)
    except RelayError:
        raise
    except Exception as e:
        logger.exception("Unexpected failure while calling upstream: %s", e)
        raise ServerError() from e

    return ChatResponse(content=message_content(result.body))
