"""Quota ledger stored inside user records."""

import asyncio
from collections import defaultdict

from log import get_logger
from models.user_record import DailyUsage
from quota.quota_ledger import Admitted, DayKeyProvider, QuotaDecision, QuotaLedger, day_key
from user_store.user_store import UserStore
from user_store.user_store_error import UserRecordNotFoundError

logger = get_logger(__name__)


class UserQuotaLedger(QuotaLedger):
    """Quota ledger for registered users.

    The counter is embedded in the user record, so each consumption is a
    read-modify-write of the whole record. Load, mutation and persist run
    inside one critical section per user. The lock is process-local: with
    several workers sharing one user store, concurrent requests of the same
    user in different processes can be admitted past the limit.
    """

    def __init__(self, user_store: UserStore, today: DayKeyProvider = day_key) -> None:
        """Initialize ledger backed by the given user store."""
        super().__init__(today)
        self.user_store = user_store
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def try_consume(self, key: str, daily_limit: int) -> QuotaDecision:
        """Consume one request of the user with given ID.

        Raises:
            UserRecordNotFoundError: when the user record does not exist.
        """
        async with self._locks[key]:
            record = self.user_store.find(key)
            if record is None:
                logger.warning("User record %s not found", key)
                raise UserRecordNotFoundError(key)

            today = self.today()
            daily_usage = record.usage.setdefault(today, DailyUsage())
            decision = self.decide(daily_usage.requests, daily_limit)
            if isinstance(decision, Admitted):
                daily_usage.requests = decision.count
                self.user_store.persist(record)
            logger.debug(
                "Quota for user %s on %s: %d/%d", key, today, decision.count, daily_limit
            )
            return decision

    async def used(self, key: str) -> int:
        """Return number of requests consumed today by the user.

        Raises:
            UserRecordNotFoundError: when the user record does not exist.
        """
        record = self.user_store.find(key)
        if record is None:
            raise UserRecordNotFoundError(key)
        return record.requests_on(self.today())
