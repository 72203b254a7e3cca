"""User store that uses SQLite to keep user records."""

from datetime import datetime
from typing import Optional

import sqlite3

from log import get_logger
from models.config import SQLiteDatabaseConfiguration
from models.user_record import UserRecord
from user_store.user_store import UserStore
from user_store.user_store_error import UserStoreError
from user_store.usage_codec import decode_usage, encode_usage
from utils.connection_decorator import connection

logger = get_logger("user_store.sqlite_user_store")


class SQLiteUserStore(UserStore):
    """User store that uses SQLite to keep user records.

    The records are stored in following table:

    ```
         Column      |            Type             | Nullable |
    -----------------+-----------------------------+----------+
     id              | text                        | not null |
     username        | text                        | not null |
     plan            | text                        | not null |
     created_at      | text                        | not null |
     usage           | text                        | not null |
    Indexes:
        "users_pkey" PRIMARY KEY, btree (id)
    ```

    The `usage` column contains JSON object with daily usage keyed by day.
    """

    CREATE_USERS_TABLE = """
        CREATE TABLE IF NOT EXISTS users (
            id              text NOT NULL,
            username        text NOT NULL,
            plan            text NOT NULL,
            created_at      text NOT NULL,
            usage           text NOT NULL,
            PRIMARY KEY(id)
        );
        """

    SELECT_USER_STATEMENT = """
        SELECT id, username, plan, created_at, usage
          FROM users
         WHERE id=?
        """

    UPSERT_USER_STATEMENT = """
        INSERT INTO users(id, username, plan, created_at, usage)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT (id)
        DO UPDATE SET username = excluded.username,
                      plan = excluded.plan,
                      usage = excluded.usage
        """

    def __init__(self, config: SQLiteDatabaseConfiguration) -> None:
        """Create a new instance of SQLite user store."""
        self.sqlite_config = config

        # initialize connection to DB
        self.connect()

    # pylint: disable=W0201
    def connect(self) -> None:
        """Initialize connection to database."""
        logger.info("Connecting to storage")
        # make sure the connection will have known state
        # even if SQLite is not alive
        self.connection = None
        config = self.sqlite_config
        try:
            # requests can be served from different threads
            self.connection = sqlite3.connect(
                database=config.db_path, check_same_thread=False
            )
            self.initialize_store()
        except sqlite3.Error as e:
            if self.connection is not None:
                self.connection.close()
            logger.exception("Error initializing SQLite user store:\n%s", e)
            raise
        self.connection.autocommit = True

    def connected(self) -> bool:
        """Check if connection to storage is alive."""
        if self.connection is None:
            logger.warning("Not connected, need to reconnect later")
            return False
        cursor = None
        try:
            cursor = self.connection.cursor()
            cursor.execute("SELECT 1")
            return True
        except sqlite3.Error as e:
            logger.error("Disconnected from storage: %s", e)
            return False
        finally:
            if cursor is not None:
                try:
                    cursor.close()
                except Exception:  # pylint: disable=broad-exception-caught
                    logger.warning("Unable to close cursor")

    def initialize_store(self) -> None:
        """Initialize storage, create table for user records."""
        if self.connection is None:
            logger.error("User store is disconnected")
            raise UserStoreError("initialize_store: user store is disconnected")

        cursor = self.connection.cursor()

        logger.info("Initializing table for user records")
        cursor.execute(SQLiteUserStore.CREATE_USERS_TABLE)

        cursor.close()
        self.connection.commit()

    @connection
    def find(self, user_id: str) -> Optional[UserRecord]:
        """Load user record with given ID."""
        if self.connection is None:
            logger.error("User store is disconnected")
            raise UserStoreError("find: user store is disconnected")

        cursor = self.connection.cursor()
        cursor.execute(self.SELECT_USER_STATEMENT, (user_id,))
        row = cursor.fetchone()
        cursor.close()

        if row is None:
            return None

        return UserRecord(
            id=row[0],
            username=row[1],
            plan=row[2],
            created_at=datetime.fromisoformat(row[3]),
            usage=decode_usage(row[4]),
        )

    @connection
    def persist(self, record: UserRecord) -> None:
        """Store the whole user record."""
        if self.connection is None:
            logger.error("User store is disconnected")
            raise UserStoreError("persist: user store is disconnected")

        cursor = self.connection.cursor()
        cursor.execute(
            self.UPSERT_USER_STATEMENT,
            (
                record.id,
                record.username,
                record.plan,
                record.created_at.isoformat(),
                encode_usage(record.usage),
            ),
        )
        cursor.close()
        self.connection.commit()
