"""Abstract class that is the parent for all user store implementations.

User store keeps user records together with their daily usage counters.
Records are always stored and loaded as a whole.
"""

from abc import abstractmethod
from typing import Optional

from models.user_record import UserRecord
from utils.connection_decorator import Connectable


class UserStore(Connectable):
    """Abstract user store interface."""

    @abstractmethod
    def find(self, user_id: str) -> Optional[UserRecord]:
        """Load user record with given ID.

        Args:
            user_id: User identification.

        Returns:
            The user record, or None if not found.
        """

    @abstractmethod
    def persist(self, record: UserRecord) -> None:
        """Store the whole user record, replacing previous version.

        Args:
            record: User record to be stored.
        """

    @abstractmethod
    def initialize_store(self) -> None:
        """Initialize storage, create tables etc."""
