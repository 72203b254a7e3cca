"""Handlers for health REST API endpoints.

These endpoints are used to check if service is live and prepared to accept
requests.
"""

import logging
from typing import Any

from fastapi import APIRouter, Response, status

from client import UpstreamClientHolder
from configuration import configuration
from models.responses import LivenessResponse, ReadinessResponse

logger = logging.getLogger("app.endpoints.handlers")
router = APIRouter(tags=["health"])


def check_readiness() -> tuple[bool, str]:
    """Check that configuration is loaded and collaborators are initialized.

    Returns:
        tuple[bool, str]: (is_ready, reason)
    """
    if not configuration.is_loaded():
        return False, "Configuration not loaded"

    if not UpstreamClientHolder().is_loaded():
        return False, "Upstream client is not initialized"

    try:
        if not configuration.user_store.connected():
            return False, "User store is not connected"
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("User store check failed: %s", e)
        return False, f"User store check failed: {e}"

    return True, "Service is ready"


get_readiness_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "Service is ready",
        "model": ReadinessResponse,
    },
    503: {
        "description": "Service is not ready",
        "model": ReadinessResponse,
    },
}


@router.get("/readiness", responses=get_readiness_responses)
async def readiness_probe_get_method(response: Response) -> ReadinessResponse:
    """
    Handle the readiness probe endpoint, returning service readiness.

    Returns 200 when ready, 503 with the reason otherwise.
    """
    logger.info("Response to /readiness endpoint")

    ready, reason = check_readiness()
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(ready=ready, reason=reason)


get_liveness_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "Service is alive",
        "model": LivenessResponse,
    },
    # HTTP_503_SERVICE_UNAVAILABLE will never be returned when unreachable
}


@router.get("/liveness", responses=get_liveness_responses)
async def liveness_probe_get_method() -> LivenessResponse:
    """
    Return the liveness status of the service.

    Returns:
        LivenessResponse: Indicates that the service is alive and whether
        the upstream API key is available.
    """
    logger.info("Response to /liveness endpoint")

    key_configured = (
        configuration.is_loaded()
        and configuration.upstream_configuration.api_key_configured
    )
    return LivenessResponse(alive=True, upstream_key_configured=key_configured)
