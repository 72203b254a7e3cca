"""Errors reported to callers of the relay endpoints."""

from typing import Optional

from fastapi import status

import constants
from models.responses import ErrorResponse


class RelayError(Exception):
    """Error that is rendered as JSON error response.

    Attributes:
        code: Machine-readable error code.
        status_code: HTTP status code.
        message: Message safe to be shown to the caller.
        retry_after_sec: Optional retry hint in seconds.
        details: Optional truncated diagnostic detail.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        code: str,
        status_code: int,
        message: str,
        retry_after_sec: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.message = message
        self.retry_after_sec = retry_after_sec
        self.details = details

    def to_response(self) -> ErrorResponse:
        """Convert the error into response model."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            retry_after_sec=self.retry_after_sec,
            details=self.details,
        )

    def __str__(self) -> str:
        """Return textual representation of the error."""
        return f"{self.code} ({self.status_code}): {self.message}"


class ValidationFailedError(RelayError):
    """Malformed request body."""

    def __init__(self, message: str = "messages must be array") -> None:
        """Initialize the error."""
        super().__init__(
            constants.ERROR_CODE_VALIDATION, status.HTTP_400_BAD_REQUEST, message
        )


class AuthError(RelayError):
    """Identity is required but missing or its record was not found."""

    def __init__(self, message: str = "Account not found. Please sign in.") -> None:
        """Initialize the error."""
        super().__init__(
            constants.ERROR_CODE_AUTH, status.HTTP_401_UNAUTHORIZED, message
        )


class AppLimitError(RelayError):
    """Local daily quota is exhausted."""

    def __init__(
        self, message: str, retry_after_sec: int = constants.APP_LIMIT_RETRY_AFTER
    ) -> None:
        """Initialize the error."""
        super().__init__(
            constants.ERROR_CODE_APP_LIMIT,
            status.HTTP_429_TOO_MANY_REQUESTS,
            message,
            retry_after_sec=retry_after_sec,
        )


class ServerError(RelayError):
    """Unexpected internal failure, no detail is leaked to the caller."""

    def __init__(self, message: str = "Server error.") -> None:
        """Initialize the error."""
        super().__init__(
            constants.ERROR_CODE_SERVER,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            message,
        )
