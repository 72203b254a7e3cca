"""Abstract base class for all identity resolver implementations.

Contract: subclasses must implement `__call__(request: Request)` returning
`RegisteredUser` for a caller with valid credentials, or `None` when the
request carries no credentials or the credentials are not valid. Resolvers
never raise for absent or invalid credentials, such callers are anonymous.
"""

from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Request

from models.identity import RegisteredUser


class IdentityResolver(ABC):  # pylint: disable=too-few-public-methods
    """Base class for all identity resolver implementations."""

    @abstractmethod
    async def __call__(self, request: Request) -> Optional[RegisteredUser]:
        """Resolve registered identity of the caller, if any."""
