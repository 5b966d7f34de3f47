"""Async HTTP client — shared connection pool and rate limiting."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlsplit

import aiohttp

from hawkeye.errors import FetchFailure
from hawkeye.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class AsyncHttpClient:
    """Shared async HTTP client with connection pooling.

    Every failure mode (connection error, timeout, non-200 status, bad JSON)
    surfaces as FetchFailure so callers handle one error kind.

    Usage:
        async with AsyncHttpClient() as http:
            data = await http.get_json("https://api.torn.com/user/?selections=basic")
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_connections: int = 20,
        max_per_host: int = 10,
        user_agent: str = "HawkEye/0.2",
        rate_limiter: RateLimiter | None = None,
    ):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self.max_connections = max_connections
        self.max_per_host = max_per_host
        self._rate = rate_limiter
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_connections,
                limit_per_host=self.max_per_host,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
        return self._session

    async def _rate_wait(self, url: str) -> None:
        if self._rate:
            async with self._rate.host(urlsplit(url).hostname or ""):
                pass

    async def fetch_text(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        """GET and return the body as text. Raises FetchFailure."""
        await self._rate_wait(url)
        session = await self._ensure_session()
        try:
            async with session.get(url, params=params, headers=headers) as resp:
                if resp.status != 200:
                    raise FetchFailure(url, f"HTTP {resp.status}")
                return await resp.text()
        except aiohttp.ClientError as e:
            logger.debug("fetch_text failed for %s: %s", url, e)
            raise FetchFailure(url, str(e) or type(e).__name__) from e
        except TimeoutError as e:
            raise FetchFailure(url, "timeout") from e

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """GET and decode a JSON body. Raises FetchFailure."""
        text = await self.fetch_text(url, params=params, headers={"Accept": "application/json"})
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FetchFailure(url, f"invalid JSON: {e}") from e

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
