"""This package contains identity resolution code and modules."""

import logging

from fastapi import Request

import constants
from authentication import jwt_cookie, noop
from authentication.interface import IdentityResolver
from authentication.utils import anonymous_origin
from configuration import configuration
from models.identity import Identity

logger = logging.getLogger(__name__)


def get_identity_resolver() -> IdentityResolver:
    """Select the configured identity resolver."""
    module = configuration.authentication_configuration.module

    logger.debug("Initializing identity resolver: module='%s'", module)

    match module:
        case constants.AUTH_MOD_NOOP:
            return noop.NoopIdentityResolver()
        case constants.AUTH_MOD_JWT_COOKIE:
            return jwt_cookie.JwtCookieIdentityResolver(
                configuration.authentication_configuration.jwt_cookie_configuration,
                configuration.quota_configuration,
                configuration.user_store,
            )
        case _:
            err_msg = f"Unsupported authentication module '{module}'"
            logger.error(err_msg)
            raise ValueError(err_msg)


async def resolve_identity(request: Request) -> Identity:
    """Resolve caller identity, anonymous origin when no registered user."""
    registered_user = await get_identity_resolver()(request)
    if registered_user is not None:
        return registered_user
    return anonymous_origin(
        request, configuration.service_configuration.trust_forwarded_for
    )
