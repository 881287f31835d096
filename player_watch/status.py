"""
Status-service client.

Один GET к статус-сервису на цикл, без ретраев: повтор делает следующий цикл.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp
from pydantic import ValidationError

from .models import ServerStatus

logger = logging.getLogger(__name__)


USER_AGENT = "player-watch/0.1"


class FetchError(Exception):
    """Status could not be retrieved or parsed."""


class StatusFetcher:
    """Query a status service for one server address."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    def url_for(self, address: str) -> str:
        return f"{self.base_url}/{address}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": USER_AGENT},
            )
        return self._session

    async def fetch(self, address: str) -> ServerStatus:
        """
        Fetch and parse the status of ``address``.

        Raises FetchError on transport failure, non-2xx status or a body
        that does not match ServerStatus.
        """
        if not address:
            raise ValueError("address must not be empty")

        url = self.url_for(address)
        session = self._get_session()
        logger.debug("Querying %s", url)
        try:
            async with session.get(url) as response:
                response.raise_for_status()
                payload = await response.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise FetchError(f"timed out querying {url}") from exc
        except aiohttp.ClientError as exc:
            raise FetchError(f"request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"invalid JSON from {url}: {exc}") from exc

        try:
            return ServerStatus.model_validate(payload)
        except ValidationError as exc:
            raise FetchError(f"unexpected status payload from {url}: {exc}") from exc

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None


__all__ = ["FetchError", "StatusFetcher"]
