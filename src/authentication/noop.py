"""Identity resolver that treats every caller as anonymous."""

import logging
from typing import Optional

from fastapi import Request

from authentication.interface import IdentityResolver
from models.identity import RegisteredUser

logger = logging.getLogger(__name__)


class NoopIdentityResolver(IdentityResolver):  # pylint: disable=too-few-public-methods
    """No-op resolver, credentials are ignored."""

    async def __call__(self, request: Request) -> Optional[RegisteredUser]:
        """Return no registered identity.

        Args:
            request: The FastAPI request object.

        Returns:
            Always None, the caller is treated as anonymous origin.
        """
        logger.debug("No-op identity resolver is being used, caller is anonymous")
        return None
