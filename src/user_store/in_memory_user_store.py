"""User store that keeps records in process memory."""

from typing import Optional

from log import get_logger
from models.user_record import UserRecord
from user_store.user_store import UserStore
from utils.connection_decorator import connection

logger = get_logger("user_store.in_memory_user_store")


class InMemoryUserStore(UserStore):
    """In-memory user store implementation.

    Callers always work with copies of stored records, so a mutation becomes
    visible only after the record is persisted.
    """

    def __init__(self) -> None:
        """Create a new instance of in-memory user store."""
        self.records: dict[str, UserRecord] = {}

    def connect(self) -> None:
        """Initialize connection to storage."""
        logger.info("Connecting to storage")

    def connected(self) -> bool:
        """Check if connection to storage is alive."""
        return True

    def initialize_store(self) -> None:
        """Initialize storage."""

    @connection
    def find(self, user_id: str) -> Optional[UserRecord]:
        """Load user record with given ID."""
        record = self.records.get(user_id)
        if record is None:
            return None
        return record.model_copy(deep=True)

    @connection
    def persist(self, record: UserRecord) -> None:
        """Store the whole user record."""
        self.records[record.id] = record.model_copy(deep=True)
