"""Utility functions for endpoint handlers."""

import constants
from configuration import AppConfig, configuration
from models.identity import Identity
from quota.admission import Allow, Deny
from user_store.user_store_error import UserRecordNotFoundError
from utils.relay_errors import AppLimitError, AuthError, ServerError

from log import get_logger

logger = get_logger(__name__)


def check_configuration_loaded(config: AppConfig) -> None:
    """Check that configuration is loaded and raise exception when it is not."""
    if not config.is_loaded():
        logger.error("Configuration is not loaded")
        raise ServerError()


async def admit_request(
    identity: Identity, action: str = constants.ACTION_CHAT
) -> Allow:
    """Charge one request to the identity or reject the request.

    Raises:
        AuthError: registered user has no record in the user store.
        AppLimitError: daily quota of the identity is exhausted.
    """
    try:
        decision = await configuration.admission_controller.admit(identity, action)
    except UserRecordNotFoundError as e:
        logger.warning("Account %s not found", e.user_id)
        raise AuthError() from e

    if isinstance(decision, Deny):
        raise AppLimitError(decision.message, decision.retry_after_sec)
    return decision
