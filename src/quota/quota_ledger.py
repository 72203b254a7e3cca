"""Abstract class that is the parent for all quota ledger implementations."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Union

from pydantic import BaseModel, NonNegativeInt

import constants


DayKeyProvider = Callable[[], str]


def day_key(now: datetime | None = None) -> str:
    """Return key of the calendar day in process-local time (YYYY-MM-DD)."""
    if now is None:
        now = datetime.now()
    return now.strftime("%Y-%m-%d")


class Admitted(BaseModel):
    """Request was admitted and counted."""

    count: NonNegativeInt


class Denied(BaseModel):
    """Request was denied, daily quota is exhausted."""

    count: NonNegativeInt
    retry_after_sec: int = constants.APP_LIMIT_RETRY_AFTER


QuotaDecision = Union[Admitted, Denied]


class QuotaLedger(ABC):
    """Per-key daily request counters.

    Implementations must perform check-and-increment atomically for given key.
    """

    def __init__(self, today: DayKeyProvider = day_key) -> None:
        """Initialize ledger with the provider of current day key."""
        self.today = today

    @abstractmethod
    async def try_consume(self, key: str, daily_limit: int) -> QuotaDecision:
        """Consume one request for given key if daily limit is not reached."""

    @abstractmethod
    async def used(self, key: str) -> int:
        """Return number of requests consumed today for given key."""

    @staticmethod
    def decide(count: int, daily_limit: int) -> QuotaDecision:
        """Decide whether one more request fits into the daily limit."""
        if count >= daily_limit:
            # fixed value, not the real time remaining until local midnight
            return Denied(count=count, retry_after_sec=constants.APP_LIMIT_RETRY_AFTER)
        return Admitted(count=count + 1)
