"""User store that uses PostgreSQL to keep user records."""

from typing import Optional

import psycopg2

from log import get_logger
from models.config import PostgreSQLDatabaseConfiguration
from models.user_record import UserRecord
from user_store.user_store import UserStore
from user_store.user_store_error import UserStoreError
from user_store.usage_codec import decode_usage, encode_usage
from utils.connection_decorator import connection

logger = get_logger("user_store.postgres_user_store")


class PostgresUserStore(UserStore):
    """User store that uses PostgreSQL to keep user records.

    The records are stored in following table:

    ```
         Column      |            Type             | Nullable |
    -----------------+-----------------------------+----------+
     id              | text                        | not null |
     username        | text                        | not null |
     plan            | text                        | not null |
     created_at      | timestamp with time zone    | not null |
     usage           | jsonb                       | not null |
    Indexes:
        "users_pkey" PRIMARY KEY, btree (id)
    ```
    """

    CREATE_USERS_TABLE = """
        CREATE TABLE IF NOT EXISTS users (
            id              text NOT NULL,
            username        text NOT NULL,
            plan            text NOT NULL,
            created_at      timestamp with time zone NOT NULL,
            usage           jsonb NOT NULL,
            PRIMARY KEY(id)
        );
        """

    SELECT_USER_STATEMENT = """
        SELECT id, username, plan, created_at, usage
          FROM users
         WHERE id=%s
        """

    UPSERT_USER_STATEMENT = """
        INSERT INTO users(id, username, plan, created_at, usage)
        VALUES (%s, %s, %s, %s, %s)
        ON CONFLICT (id)
        DO UPDATE SET username = EXCLUDED.username,
                      plan = EXCLUDED.plan,
                      usage = EXCLUDED.usage
        """

    def __init__(self, config: PostgreSQLDatabaseConfiguration) -> None:
        """Create a new instance of PostgreSQL user store."""
        self.postgres_config = config

        # initialize connection to DB
        self.connect()

    # pylint: disable=W0201
    def connect(self) -> None:
        """Initialize connection to database."""
        logger.info("Connecting to storage")
        # make sure the connection will have known state
        # even if PostgreSQL is not alive
        self.connection = None
        config = self.postgres_config
        try:
            self.connection = psycopg2.connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password.get_secret_value(),
                dbname=config.db,
                sslmode=config.ssl_mode,
                sslrootcert=(
                    str(config.ca_cert_path) if config.ca_cert_path else None
                ),
                gssencmode=config.gss_encmode,
            )
            self.initialize_store()
        except Exception as e:
            if self.connection is not None:
                self.connection.close()
            logger.exception("Error initializing Postgres user store:\n%s", e)
            raise
        self.connection.autocommit = True

    def connected(self) -> bool:
        """Check if connection to storage is alive."""
        if self.connection is None:
            logger.warning("Not connected, need to reconnect later")
            return False
        try:
            with self.connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            return True
        except (psycopg2.OperationalError, psycopg2.InterfaceError) as e:
            logger.error("Disconnected from storage: %s", e)
            return False

    def initialize_store(self) -> None:
        """Initialize storage, create table for user records."""
        if self.connection is None:
            logger.error("User store is disconnected")
            raise UserStoreError("initialize_store: user store is disconnected")

        cursor = self.connection.cursor()

        logger.info("Initializing table for user records")
        cursor.execute(PostgresUserStore.CREATE_USERS_TABLE)

        cursor.close()
        self.connection.commit()

    @connection
    def find(self, user_id: str) -> Optional[UserRecord]:
        """Load user record with given ID."""
        if self.connection is None:
            logger.error("User store is disconnected")
            raise UserStoreError("find: user store is disconnected")

        with self.connection.cursor() as cursor:
            cursor.execute(self.SELECT_USER_STATEMENT, (user_id,))
            row = cursor.fetchone()

        if row is None:
            return None

        return UserRecord(
            id=row[0],
            username=row[1],
            plan=row[2],
            created_at=row[3],
            usage=decode_usage(row[4]),
        )

    @connection
    def persist(self, record: UserRecord) -> None:
        """Store the whole user record."""
        if self.connection is None:
            logger.error("User store is disconnected")
            raise UserStoreError("persist: user store is disconnected")

        with self.connection.cursor() as cursor:
            cursor.execute(
                self.UPSERT_USER_STATEMENT,
                (
                    record.id,
                    record.username,
                    record.plan,
                    record.created_at,
                    encode_usage(record.usage),
                ),
            )
