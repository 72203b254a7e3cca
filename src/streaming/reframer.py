"""Incremental parser of upstream event stream framing.

Upstream sends chat completion chunks as an event stream:

```
data: {"choices": [{"delta": {"content": "He"}}]}

data: {"choices": [{"delta": {"content": "llo"}}]}

data: [DONE]
```

Network chunks can split the stream anywhere, including the middle of a
multi-byte UTF-8 code point, the middle of a line or the middle of a JSON
token. The reframer buffers the incomplete tail and produces content deltas
only from complete lines, so its output does not depend on chunk boundaries.
"""

import codecs
import json
import re
from typing import Any, AsyncIterable, AsyncIterator, Optional

import constants
import metrics
from log import get_logger

logger = get_logger(__name__)

_DATA_PREFIX_RE = re.compile(r"^" + re.escape(constants.STREAM_DATA_PREFIX) + r"\s*")


def delta_content(event: Any) -> Optional[str]:
    """Return non-empty content delta of the first choice, if any."""
    try:
        content = event["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(content, str) and content:
        return content
    return None


class StreamReframer:
    """Turn upstream byte chunks into content deltas.

    Attributes:
        terminal: Terminal marker was seen, no more deltas will be produced.
        truncated: Upstream ended without terminal marker.
    """

    def __init__(self) -> None:
        """Initialize empty reframer."""
        # strict decoder, invalid UTF-8 is a stream failure
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        self.terminal = False
        self.truncated = False

    def feed(self, chunk: bytes) -> list[str]:
        """Consume one chunk of bytes and return deltas from completed lines.

        Raises:
            UnicodeDecodeError: the stream is not valid UTF-8.
        """
        if self.terminal:
            return []

        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")

        deltas = []
        for line in lines:
            delta = self._parse_line(line)
            if self.terminal:
                break
            if delta is not None:
                deltas.append(delta)
        return deltas

    def finish(self) -> None:
        """Mark end of upstream data.

        Partial last line without newline is discarded.
        """
        self._decoder.decode(b"", final=True)
        if not self.terminal:
            self.truncated = True
            logger.warning("Upstream stream ended without terminal marker")
            metrics.llm_stream_truncated_total.inc()

    def _parse_line(self, line: str) -> Optional[str]:
        line = line.strip()
        if not line.startswith(constants.STREAM_DATA_PREFIX):
            return None

        payload = _DATA_PREFIX_RE.sub("", line, count=1)
        if payload == constants.STREAM_TERMINAL_TOKEN:
            self.terminal = True
            return None

        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Skipping non-JSON stream line: %s", payload)
            return None
        return delta_content(event)

    async def deltas(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
        """Lazily produce deltas from upstream chunks.

        Stops at terminal marker even when more bytes follow. The sequence is
        not restartable.
        """
        async for chunk in chunks:
            for delta in self.feed(chunk):
                yield delta
            if self.terminal:
                return
        self.finish()
