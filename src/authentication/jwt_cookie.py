"""Resolve registered identity from session JWT passed in a cookie."""

import logging
from typing import Optional

from authlib.jose import jwt
from authlib.jose.errors import ExpiredTokenError, JoseError
from fastapi import Request

from authentication.interface import IdentityResolver
from authentication.utils import extract_session_token
from models.config import JwtCookieConfiguration, QuotaConfiguration
from models.identity import RegisteredUser
from user_store.user_store import UserStore

logger = logging.getLogger(__name__)


class JwtCookieIdentityResolver(
    IdentityResolver
):  # pylint: disable=too-few-public-methods
    """Identity resolver for session JWT signed with shared secret."""

    def __init__(
        self,
        config: JwtCookieConfiguration,
        quota_config: QuotaConfiguration,
        user_store: UserStore,
    ) -> None:
        """Initialize resolver with JWT settings and user store."""
        self.config = config
        self.quota_config = quota_config
        self.user_store = user_store

    async def __call__(self, request: Request) -> Optional[RegisteredUser]:
        """Verify the session JWT and look up the user record.

        Missing, malformed, badly signed or expired tokens make the caller
        anonymous. A valid token whose user record does not exist still
        yields a registered identity, the quota ledger reports it then.
        """
        token = extract_session_token(request, self.config.cookie_name)
        if token is None:
            return None

        try:
            claims = jwt.decode(token, self.config.secret.get_secret_value())
            if claims.header.get("alg") != self.config.algorithm:
                logger.info("Session token signed by unexpected algorithm")
                return None
            claims.validate()
        except ExpiredTokenError:
            logger.info("Session token has expired")
            return None
        except JoseError as e:
            logger.info("Invalid session token: %s", e)
            return None

        user_id = claims.get(self.config.user_id_claim)
        if not user_id:
            logger.info("Session token missing claim: %s", self.config.user_id_claim)
            return None
        user_id = str(user_id)

        record = self.user_store.find(user_id)
        plan = record.plan if record is not None else self.quota_config.default_plan
        logger.debug("Resolved registered user %s with plan %s", user_id, plan)
        return RegisteredUser(id=user_id, plan_tier=plan)
