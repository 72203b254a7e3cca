"""Session ID utility functions."""

import uuid


def get_suid() -> str:
    """
    Generate a unique relay session ID (SUID) using UUID4.

    Every in-flight stream relay gets its own session ID, it is used to
    correlate log messages of one relay.

    Returns:
        str: A UUID4 string suitable for use as a session identifier.
    """
    return str(uuid.uuid4())
