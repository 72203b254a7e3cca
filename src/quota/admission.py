"""Admission of relay requests against daily quota."""

from typing import Literal, Union

from pydantic import BaseModel, NonNegativeInt

import constants
import metrics
from log import get_logger
from models.config import QuotaConfiguration
from models.identity import AnonymousOrigin, Identity, RegisteredUser
from quota.quota_ledger import Denied, QuotaLedger

logger = get_logger(__name__)


class Allow(BaseModel):
    """Request is admitted, quota has already been charged."""

    count: NonNegativeInt


class Deny(BaseModel):
    """Request is rejected because daily quota is exhausted."""

    code: Literal["APP_LIMIT"] = constants.ERROR_CODE_APP_LIMIT
    message: str
    retry_after_sec: int = constants.APP_LIMIT_RETRY_AFTER


AdmissionDecision = Union[Allow, Deny]


class QuotaStatus(BaseModel):
    """Daily quota status of one identity."""

    limit: NonNegativeInt
    used: NonNegativeInt

    @property
    def remaining(self) -> int:
        """Return number of requests still available today."""
        return max(self.limit - self.used, 0)


class AdmissionController:
    """Decide whether a relay request may proceed.

    Registered users are charged in the user-store backed ledger with the
    limit of their plan tier. Anonymous origins are charged in the in-memory
    ledger with the anonymous limit. Both relay actions share the same policy.
    """

    def __init__(
        self,
        quota_config: QuotaConfiguration,
        user_ledger: QuotaLedger,
        anonymous_ledger: QuotaLedger,
    ) -> None:
        """Initialize admission controller."""
        self.quota_config = quota_config
        self.user_ledger = user_ledger
        self.anonymous_ledger = anonymous_ledger

    def daily_limit(self, identity: Identity) -> int:
        """Resolve daily request limit for given identity."""
        if isinstance(identity, RegisteredUser):
            return self.quota_config.requests_per_day(identity.plan_tier)
        return self.quota_config.anonymous_requests_per_day

    def _ledger(self, identity: Identity) -> QuotaLedger:
        if isinstance(identity, RegisteredUser):
            return self.user_ledger
        return self.anonymous_ledger

    async def admit(
        self, identity: Identity, action: str = constants.ACTION_CHAT
    ) -> AdmissionDecision:
        """Consume one request from the daily quota of the identity.

        Raises:
            UserRecordNotFoundError: registered user has no record.
        """
        daily_limit = self.daily_limit(identity)
        decision = await self._ledger(identity).try_consume(
            identity.quota_key, daily_limit
        )

        if isinstance(decision, Denied):
            logger.info(
                "Quota exhausted for %s %s (%s): %d/%d",
                identity.kind,
                identity.quota_key,
                action,
                decision.count,
                daily_limit,
            )
            metrics.quota_denials_total.labels(identity.kind).inc()
            message = (
                constants.ANONYMOUS_LIMIT_MESSAGE
                if isinstance(identity, AnonymousOrigin)
                else constants.PLAN_LIMIT_MESSAGE
            )
            return Deny(message=message, retry_after_sec=decision.retry_after_sec)

        return Allow(count=decision.count)

    async def status(self, identity: Identity) -> QuotaStatus:
        """Return daily quota status without consuming anything.

        Raises:
            UserRecordNotFoundError: registered user has no record.
        """
        used = await self._ledger(identity).used(identity.quota_key)
        return QuotaStatus(limit=self.daily_limit(identity), used=used)
