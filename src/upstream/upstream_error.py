"""Classification of upstream failures into caller-facing errors."""

import re
from typing import Optional

from fastapi import status

import constants
from utils.relay_errors import RelayError

_RATE_LIMIT_RE = re.compile(constants.UPSTREAM_RATE_LIMIT_PATTERN, re.IGNORECASE)


class UpstreamError(RelayError):
    """Failure reported by upstream API or while talking to it."""


def truncate_details(details: Optional[str]) -> Optional[str]:
    """Truncate diagnostic detail so it can be relayed to the caller."""
    if details is None:
        return None
    return details[: constants.MAX_ERROR_DETAILS_LENGTH]


def classify_upstream_error(status_code: int, details: str) -> UpstreamError:
    """Classify non-success upstream response.

    Rate-limit shaped errors (HTTP 429 or matching text in the error body)
    are reported as RATE_LIMIT with 60 seconds retry hint. Everything else is
    OPENAI_ERROR: upstream 5xx status is kept, other statuses become 502.
    """
    if (
        status_code == status.HTTP_429_TOO_MANY_REQUESTS
        or _RATE_LIMIT_RE.search(details or "") is not None
    ):
        return UpstreamError(
            constants.ERROR_CODE_RATE_LIMIT,
            status.HTTP_429_TOO_MANY_REQUESTS,
            constants.UPSTREAM_RATE_LIMIT_MESSAGE,
            retry_after_sec=constants.RATE_LIMIT_RETRY_AFTER,
        )

    status_code = status_code if 500 <= status_code <= 599 else status.HTTP_502_BAD_GATEWAY
    return UpstreamError(
        constants.ERROR_CODE_OPENAI_ERROR,
        status_code,
        constants.UPSTREAM_ERROR_MESSAGE,
        details=truncate_details(details),
    )


def transport_error(exc: BaseException) -> UpstreamError:
    """Classify failure to reach upstream (connection error, timeout)."""
    details = str(exc) or type(exc).__name__
    return UpstreamError(
        constants.ERROR_CODE_OPENAI_ERROR,
        status.HTTP_502_BAD_GATEWAY,
        constants.UPSTREAM_ERROR_MESSAGE,
        details=truncate_details(details),
    )
