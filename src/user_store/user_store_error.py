"""Exceptions raised by user store implementations."""


class UserStoreError(Exception):
    """Error raised when user store is not accessible."""


class UserRecordNotFoundError(UserStoreError):
    """Error raised when user record does not exist in the store."""

    def __init__(self, user_id: str) -> None:
        """Initialize the exception with ID of missing user."""
        super().__init__(f"User record {user_id} not found")
        self.user_id = user_id
