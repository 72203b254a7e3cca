"""Process-local quota ledger used for anonymous callers."""

import asyncio
from collections import defaultdict

from log import get_logger
from quota.quota_ledger import Admitted, DayKeyProvider, QuotaDecision, QuotaLedger, day_key

logger = get_logger(__name__)


class InMemoryQuotaLedger(QuotaLedger):
    """Quota ledger that keeps counters in process memory.

    Counters are keyed by (key, day). Check-and-increment is serialized by a
    lock per key, so concurrent requests from the same origin can not be
    admitted past the limit. Entries from previous days are not pruned.
    """

    def __init__(self, today: DayKeyProvider = day_key) -> None:
        """Initialize the in-memory ledger."""
        super().__init__(today)
        self._counters: dict[tuple[str, str], int] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def try_consume(self, key: str, daily_limit: int) -> QuotaDecision:
        """Consume one request for given key if daily limit is not reached."""
        async with self._locks[key]:
            counter_key = (key, self.today())
            count = self._counters.setdefault(counter_key, 0)
            decision = self.decide(count, daily_limit)
            if isinstance(decision, Admitted):
                self._counters[counter_key] = decision.count
            logger.debug(
                "Quota for %s on %s: %d/%d", key, counter_key[1], decision.count, daily_limit
            )
            return decision

    async def used(self, key: str) -> int:
        """Return number of requests consumed today for given key."""
        return self._counters.get((key, self.today()), 0)

    def __str__(self) -> str:
        """Return textual representation of ledger instance."""
        return f"{type(self).__name__}: {len(self._counters)} counters"
