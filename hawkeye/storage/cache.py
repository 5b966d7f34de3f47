"""Per-target signal cache with per-kind freshness windows."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from hawkeye.storage.kv import SIGNAL_KEY_PREFIX, KeyValueStore
from hawkeye.utils.decay import as_utc, utc_now

logger = logging.getLogger(__name__)

PROFILE = "profile"
MARKET = "market"

# Default TTL per signal kind (hours)
DEFAULT_TTL: dict[str, float] = {
    PROFILE: 5 / 60,
    MARKET: 4.0,
}


def _key(kind: str, target_id: str) -> str:
    return f"{SIGNAL_KEY_PREFIX}_{kind}_{target_id}"


class SignalCache:
    """Signal cache entries ``{fetched_at, payload}`` keyed by kind + target.

    Entries are independent: a stale market entry never affects a fresh
    profile entry for the same target, and neither depends on the history TTL.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl: dict[str, float] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.ttl = {**DEFAULT_TTL, **(ttl or {})}
        self._clock = clock

    async def get_cached(
        self,
        kind: str,
        target_id: str,
        max_age_hours: float | None = None,
    ) -> dict[str, Any] | None:
        """Return the cached payload if fresh enough, else None."""
        entry = await self.store.get(_key(kind, target_id))
        if not isinstance(entry, dict) or "fetched_at" not in entry:
            return None

        if max_age_hours is None:
            max_age_hours = self.ttl.get(kind, 0.0)
        try:
            fetched_at = as_utc(datetime.fromisoformat(entry["fetched_at"]))
        except (TypeError, ValueError):
            return None

        if self._clock() - fetched_at >= timedelta(hours=max_age_hours):
            logger.debug("Cache STALE: %s:%s", kind, target_id)
            return None

        logger.debug("Cache HIT: %s:%s", kind, target_id)
        return entry.get("payload")

    async def put(self, kind: str, target_id: str, payload: dict[str, Any]) -> None:
        await self.store.set(
            _key(kind, target_id),
            {"fetched_at": self._clock().isoformat(), "payload": payload},
        )
        logger.debug("Cache PUT: %s:%s", kind, target_id)

    async def invalidate(self, kind: str, target_id: str) -> None:
        await self.store.delete(_key(kind, target_id))
        logger.debug("Cache INVALIDATE: %s:%s", kind, target_id)

    async def clear(self, target_id: str | None = None) -> int:
        """Drop cached signals for one target, or all of them. Returns the count."""
        keys = await self.store.keys(f"{SIGNAL_KEY_PREFIX}_")
        if target_id is not None:
            wanted = {_key(kind, target_id) for kind in self.ttl}
            for kind in self.ttl:
                await self.invalidate(kind, target_id)
            return len(wanted.intersection(keys))


        for key in keys:
            await self.store.delete(key)
        logger.info("Cleared %d cached signals", len(keys))
        return len(keys)
