"""Authentication utility functions."""

from typing import Optional

from fastapi import Request

import constants
from models.identity import AnonymousOrigin


def extract_session_token(request: Request, cookie_name: str) -> Optional[str]:
    """Extract the session token from cookie or bearer authorization header.

    Args:
        request: The FastAPI request object.
        cookie_name: Name of the cookie with session token.

    Returns:
        The extracted token if present, else None.
    """
    token = request.cookies.get(cookie_name)
    if token:
        return token

    authorization_header = request.headers.get("Authorization")
    if not authorization_header:
        return None

    scheme_and_token = authorization_header.strip().split()
    if len(scheme_and_token) != 2 or scheme_and_token[0].lower() != "bearer":
        return None

    return scheme_and_token[1]


def anonymous_origin(request: Request, trust_forwarded_for: bool) -> AnonymousOrigin:
    """Derive anonymous identity from the client network origin.

    The first entry of X-Forwarded-For is used when forwarded headers are
    trusted, then the socket peer address, then a fixed placeholder.
    """
    origin = ""
    if trust_forwarded_for:
        forwarded_for = request.headers.get("X-Forwarded-For", "")
        origin = forwarded_for.split(",")[0].strip()
    if not origin and request.client is not None:
        origin = (request.client.host or "").strip()
    return AnonymousOrigin(origin_key=origin or constants.ANONYMOUS_ORIGIN_UNKNOWN)
