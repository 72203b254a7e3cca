"""HTTP client for the upstream chat completion endpoint."""

import asyncio
import json
from typing import Any, AsyncIterator, Optional

import aiohttp
from pydantic import BaseModel, ConfigDict

import constants
import metrics
from log import get_logger
from models.config import UpstreamConfiguration
from upstream.upstream_error import (
    UpstreamError,
    classify_upstream_error,
    transport_error,
)
from utils.relay_errors import ServerError
from utils.types import ChatMessage

logger = get_logger(__name__)


class UpstreamStream:
    """Live upstream event stream.

    Owned by exactly one relay. The underlying connection has to be closed
    by calling `close()` when the relay finishes, whatever the outcome.
    """

    def __init__(self, response: aiohttp.ClientResponse) -> None:
        """Wrap upstream response with streamed body."""
        self.response = response

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        """Iterate over raw body chunks as they arrive."""
        async for chunk in self.response.content.iter_any():
            yield chunk

    def close(self) -> None:
        """Close upstream connection, pending reads are abandoned."""
        if not self.response.closed:
            logger.debug("Closing upstream stream")
        self.response.close()


class UpstreamResult(BaseModel):
    """Successful upstream call.

    Attributes:
        status_code: HTTP status returned by upstream.
        body: Parsed JSON body for non-streaming calls.
        stream: Live stream handle for streaming calls.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status_code: int
    body: Any = None
    stream: Optional[UpstreamStream] = None


def message_content(body: Any) -> str:
    """Return content of the first choice, empty string when it is missing."""
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


class UpstreamClient:
    """Client for OpenAI-compatible chat completion API."""

    def __init__(
        self, config: UpstreamConfiguration, session: aiohttp.ClientSession
    ) -> None:
        """Initialize client with configuration and shared HTTP session."""
        self.config = config
        self.session = session
        # no total timeout, long streams must not be cut
        self.timeout = aiohttp.ClientTimeout(
            total=None,
            connect=config.connect_timeout,
            sock_read=config.read_timeout,
        )

    def _failure(self, error: UpstreamError) -> UpstreamError:
        logger.error("Upstream call failed: %s", error)
        metrics.llm_calls_failures_total.labels(error.code).inc()
        return error

    async def complete(
        self, messages: list[ChatMessage], streaming: bool
    ) -> UpstreamResult:
        """Send conversation to upstream completion endpoint.

        Args:
            messages: Conversation, relayed unchanged.
            streaming: Whether upstream should answer with event stream.

        Returns:
            Parsed body for non-streaming call or live stream handle.

        Raises:
            UpstreamError: Upstream answered with error or is not reachable.
            ServerError: API key is missing or upstream body is not valid JSON.
        """
        api_key = self.config.resolved_api_key()
        if api_key is None:
            logger.error(
                "Upstream API key is not configured (env %s)", self.config.api_key_env
            )
            metrics.llm_calls_failures_total.labels(constants.ERROR_CODE_SERVER).inc()
            raise ServerError()

        payload = {
            "model": self.config.model,
            "messages": messages,
            "stream": streaming,
            "max_tokens": self.config.max_tokens,
        }
        headers = {"Authorization": f"Bearer {api_key}"}

        metrics.llm_calls_total.labels(self.config.model, str(streaming).lower()).inc()
        logger.debug(
            "Calling upstream model %s, streaming=%s, %d messages",
            self.config.model,
            streaming,
            len(messages),
        )

        try:
            response = await self.session.post(
                str(self.config.url),
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._failure(transport_error(e)) from e

        if response.status >= 400:
            try:
                details = await response.text()
            except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError):
                logger.warning("Unable to read upstream error body")
                details = ""
            finally:
                response.release()
            raise self._failure(classify_upstream_error(response.status, details))

        if streaming:
            return UpstreamResult(
                status_code=response.status, stream=UpstreamStream(response)
            )

        try:
            body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._failure(transport_error(e)) from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Upstream returned invalid JSON: %s", e)
            metrics.llm_calls_failures_total.labels(constants.ERROR_CODE_SERVER).inc()
            raise ServerError() from e
        finally:
            response.release()

        return UpstreamResult(status_code=response.status, body=body)
