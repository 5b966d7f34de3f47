"""Rate limiter — compound global + per-host token bucket using aiolimiter."""

from __future__ import annotations

from aiolimiter import AsyncLimiter


class RateLimiter:
    """Compound async rate limiter: global + per-host buckets, per minute.

    The global bucket keeps the API key under Torn's per-key quota; the
    per-host bucket keeps page fetches against www.torn.com polite.

    Usage:
        async with limiter.host("api.torn.com"):
            await do_request()
    """

    def __init__(
        self,
        per_minute: float = 100.0,
        per_host_per_minute: float = 60.0,
    ):
        self._global = AsyncLimiter(per_minute, 60.0)
        self.per_minute = per_minute
        self._per_host_rate = per_host_per_minute
        self._hosts: dict[str, AsyncLimiter] = {}

    def _get_host_limiter(self, host: str) -> AsyncLimiter:
        limiter = self._hosts.get(host)
        if limiter is None:
            limiter = AsyncLimiter(self._per_host_rate, 60.0)
            self._hosts[host] = limiter
        return limiter

    async def acquire(self, host: str | None = None) -> None:
        """Acquire a token from global (and optionally per-host) bucket."""
        if host:
            await self._get_host_limiter(host).acquire()
        await self._global.acquire()

    def host(self, hostname: str) -> _HostRateContext:
        """Return an async context manager that acquires both global + per-host."""
        return _HostRateContext(self, hostname)


class _HostRateContext:
    """Async context manager for compound global + per-host rate limiting."""

    __slots__ = ("_limiter", "_host")

    def __init__(self, limiter: RateLimiter, host: str):
        self._limiter = limiter
        self._host = host

    async def __aenter__(self) -> _HostRateContext:
        await self._limiter.acquire(self._host)
        return self

    async def __aexit__(self, *_) -> None:
        pass
