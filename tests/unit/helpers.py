"""Helper functions shared by unit tests."""

from typing import Any, AsyncIterator

from fastapi import Request

from upstream.client import UpstreamResult, UpstreamStream

DAY = "2025-01-15"
NEXT_DAY = "2025-01-16"


def fixed_day() -> str:
    """Clock used by ledgers in tests."""
    return DAY


async def async_chunks(*chunks: bytes) -> AsyncIterator[bytes]:
    """Yield given chunks as upstream stream would do."""
    for chunk in chunks:
        yield chunk


def sse_chunk(content: str) -> bytes:
    """Build one upstream event stream line with given content delta."""
    return (
        'data: {"choices": [{"delta": {"content": "' + content + '"}}]}\n\n'
    ).encode("utf-8")


def make_request(
    headers: dict[str, str] | None = None,
    client: tuple[str, int] | None = ("10.0.0.1", 50000),
) -> Request:
    """Build a request with given headers and peer address."""
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/chat",
        "query_string": b"",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
        "client": client,
    }
    return Request(scope)


class StubUpstreamStream(UpstreamStream):
    """Upstream stream replaying given chunks."""

    def __init__(self, chunks: list[bytes], failure: Exception | None = None) -> None:
        """Initialize stream with chunks and optional failure after them."""
        # pylint: disable=super-init-not-called
        self.chunks = chunks
        self.failure = failure
        self.closed = False

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        """Replay chunks, then fail if requested."""
        for chunk in self.chunks:
            yield chunk
        if self.failure is not None:
            raise self.failure

    def close(self) -> None:
        """Remember that the stream was closed."""
        self.closed = True


class StubUpstreamClient:
    """Upstream client answering with prepared responses."""

    def __init__(
        self,
        body: Any = None,
        stream: StubUpstreamStream | None = None,
        error: Exception | None = None,
    ) -> None:
        """Initialize stub with prepared body, stream or error."""
        self.body = body
        self.stream = stream
        self.error = error
        self.calls: list[tuple[list, bool]] = []

    async def complete(self, messages: list, streaming: bool) -> UpstreamResult:
        """Record the call and return prepared result."""
        self.calls.append((messages, streaming))
        if self.error is not None:
            raise self.error
        if streaming:
            return UpstreamResult(status_code=200, stream=self.stream)
        return UpstreamResult(status_code=200, body=self.body)
