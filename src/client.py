"""Upstream client retrieval."""

import logging

from typing import Optional

import aiohttp

from models.config import UpstreamConfiguration
from upstream.client import UpstreamClient
from utils.types import Singleton


logger = logging.getLogger(__name__)


class UpstreamClientHolder(metaclass=Singleton):
    """Container for an initialised UpstreamClient and its HTTP session."""

    _client: Optional[UpstreamClient] = None
    _session: Optional[aiohttp.ClientSession] = None

    async def load(self, upstream_config: UpstreamConfiguration) -> None:
        """Create HTTP session and upstream client according to configuration."""
        if not upstream_config.api_key_configured:
            logger.warning(
                "Upstream API key is not configured, chat requests will fail"
            )
        logger.info("Using upstream completion endpoint %s", upstream_config.url)
        self._session = aiohttp.ClientSession()
        self._client = UpstreamClient(upstream_config, self._session)

    def get_client(self) -> UpstreamClient:
        """Return an initialised UpstreamClient."""
        if not self._client:
            raise RuntimeError(
                "UpstreamClient has not been initialised. Ensure 'load(..)' has been called."
            )
        return self._client

    def is_loaded(self) -> bool:
        """Check whether the client has been initialised."""
        return self._client is not None

    async def close(self) -> None:
        """Close HTTP session, all upstream connections are released."""
        if self._session is not None:
            logger.info("Closing upstream HTTP session")
            await self._session.close()
        self._session = None
        self._client = None
