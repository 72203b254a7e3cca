"""Model for user records kept in the user store."""

from datetime import datetime, UTC

from pydantic import BaseModel, Field, NonNegativeInt

import constants


class DailyUsage(BaseModel):
    """Usage counters for one calendar day."""

    requests: NonNegativeInt = 0


class UserRecord(BaseModel):
    """Model representing a registered user.

    Attributes:
        id: User identification.
        username: Human readable user name.
        plan: Plan tier used to resolve daily limits.
        created_at: Timestamp of record creation.
        usage: Daily usage keyed by day key (YYYY-MM-DD).
    """

    id: str
    username: str = ""
    plan: str = constants.DEFAULT_PLAN
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    usage: dict[str, DailyUsage] = Field(default_factory=dict)

    def requests_on(self, day_key: str) -> int:
        """Return number of requests made on the given day."""
        daily_usage = self.usage.get(day_key)
        return daily_usage.requests if daily_usage is not None else 0
