"""Watchlist — targets the user flagged for attention."""

from __future__ import annotations

import logging

from hawkeye.storage.kv import WATCHLIST_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class Watchlist:
    """Persisted set of target ids. Every change writes the whole set."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._ids: set[str] = set()

    async def load(self) -> None:
        raw = await self.store.get(WATCHLIST_KEY, [])
        if isinstance(raw, list):
            self._ids = {str(x) for x in raw}
        else:
            logger.warning("Stored watchlist is not a list, starting empty")
            self._ids = set()

    async def toggle(self, target_id: str) -> bool:
        """Flip membership and persist. Returns True if now watched."""
        target_id = str(target_id)
        if target_id in self._ids:
            self._ids.discard(target_id)
            watched = False
        else:
            self._ids.add(target_id)
            watched = True
        await self.store.set(WATCHLIST_KEY, sorted(self._ids))
        return watched

    @property
    def ids(self) -> list[str]:
        return sorted(self._ids)

    def __contains__(self, target_id: object) -> bool:
        return str(target_id) in self._ids

    def __len__(self) -> int:
        return len(self._ids)
