"""Handler for REST API call to provide daily quota status of the caller."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from authentication import resolve_identity
from configuration import configuration
from models.identity import Identity, RegisteredUser
from models.responses import ErrorResponse, QuotaStatusResponse
from user_store.user_store_error import UserRecordNotFoundError
from utils.endpoints import check_configuration_loaded
from utils.relay_errors import AuthError

logger = logging.getLogger("app.endpoints.handlers")
router = APIRouter(tags=["quota"])


quota_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "Daily quota status",
        "model": QuotaStatusResponse,
    },
    401: {
        "description": "Account not found",
        "model": ErrorResponse,
    },
}


@router.get("/quota", responses=quota_responses)
async def quota_endpoint_handler(
    identity: Annotated[Identity, Depends(resolve_identity)],
) -> QuotaStatusResponse:
    """
    Handle request to the /quota endpoint.

    Nothing is consumed, the caller just gets its limit and today's usage.
    """
    check_configuration_loaded(configuration)

    try:
        quota_status = await configuration.admission_controller.status(identity)
    except UserRecordNotFoundError as e:
        raise AuthError() from e

    user_id = plan = None
    if isinstance(identity, RegisteredUser):
        user_id = identity.id
        plan = identity.plan_tier

    return QuotaStatusResponse(
        user_id=user_id,
        plan=plan,
        requests_per_day=quota_status.limit,
        used_today=quota_status.used,
        remaining=quota_status.remaining,
    )
