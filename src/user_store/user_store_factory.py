"""User store factory class."""

import constants
from log import get_logger
from models.config import UserStoreConfiguration
from user_store.in_memory_user_store import InMemoryUserStore
from user_store.postgres_user_store import PostgresUserStore
from user_store.sqlite_user_store import SQLiteUserStore
from user_store.user_store import UserStore

logger = get_logger("user_store.user_store_factory")


# pylint: disable=R0903
class UserStoreFactory:
    """User store factory class."""

    @staticmethod
    def user_store(config: UserStoreConfiguration) -> UserStore:
        """Create an instance of user store based on loaded configuration.

        Returns:
            An instance of `UserStore` (either `SQLiteUserStore`,
            `PostgresUserStore` or `InMemoryUserStore`).
        """
        logger.info("Creating user store instance of type %s", config.type)
        match config.type:
            case constants.USER_STORE_TYPE_MEMORY:
                return InMemoryUserStore()
            case constants.USER_STORE_TYPE_SQLITE:
                if config.sqlite is not None:
                    return SQLiteUserStore(config.sqlite)
                raise ValueError("Expecting configuration for SQLite user store")
            case constants.USER_STORE_TYPE_POSTGRES:
                if config.postgres is not None:
                    return PostgresUserStore(config.postgres)
                raise ValueError("Expecting configuration for PostgreSQL user store")
            case _:
                raise ValueError(
                    f"Invalid user store type: {config.type}. "
                    f"Use '{constants.USER_STORE_TYPE_POSTGRES}', "
                    f"'{constants.USER_STORE_TYPE_SQLITE}' or "
                    f"'{constants.USER_STORE_TYPE_MEMORY}' options."
                )
