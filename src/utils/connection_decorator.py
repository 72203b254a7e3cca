"""Decorator that makes sure the object is 'connected' according to it's connected predicate."""

from abc import ABC, abstractmethod
from typing import Any, Callable


class Connectable(ABC):
    """Interface to be satisfied by all classes used by `connection` decorator."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to storage."""

    @abstractmethod
    def connected(self) -> bool:
        """Check if connection to storage is alive."""


def connection(f: Callable) -> Callable:
    """Decorate a method so it reconnects to storage before the method runs.

    Example:
    ```python
    @connection
    def find(self, user_id: str) -> Optional[UserRecord]:
        ...
    ```
    """

    def wrapper(connectable: Connectable, *args: Any, **kwargs: Any) -> Any:
        if not connectable.connected():
            connectable.connect()
        return f(connectable, *args, **kwargs)

    return wrapper
