"""Caller identities used as quota keys."""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class RegisteredUser(BaseModel):
    """Authenticated caller backed by a record in the user store."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["user"] = "user"
    id: str
    plan_tier: str

    @property
    def quota_key(self) -> str:
        """Return key used by the quota ledger."""
        return self.id


class AnonymousOrigin(BaseModel):
    """Unauthenticated caller identified by its network origin."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["anonymous"] = "anonymous"
    origin_key: str

    @property
    def quota_key(self) -> str:
        """Return key used by the quota ledger."""
        return self.origin_key


Identity = Union[RegisteredUser, AnonymousOrigin]
