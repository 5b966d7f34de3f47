"""Session context — preferences, credential and the store they live in."""

from __future__ import annotations

import logging

from hawkeye.config import Preferences, Settings
from hawkeye.storage.kv import CREDENTIAL_KEY, PREFS_KEY, KeyValueStore, SqliteKeyValueStore

logger = logging.getLogger(__name__)


class Session:
    """Explicit replacement for ambient mutable state.

    Created with ``open`` (or from an existing store and ``load``), passed to
    every engine operation, and written back through ``save_preferences`` and
    ``set_credential``.
    """

    def __init__(self, settings: Settings, store: KeyValueStore) -> None:
        self.settings = settings
        self.store = store
        self.prefs = Preferences()
        self.credential = ""

    @classmethod
    async def open(cls, settings: Settings | None = None) -> Session:
        settings = settings or Settings.load()
        store = await SqliteKeyValueStore.open(
            settings.storage.db_path, wal_mode=settings.storage.wal_mode,
        )
        session = cls(settings, store)
        await session.load()
        return session

    async def load(self) -> None:
        self.prefs = Preferences.from_stored(await self.store.get(PREFS_KEY))
        credential = await self.store.get(CREDENTIAL_KEY, "")
        self.credential = credential if isinstance(credential, str) else ""

    async def save_preferences(self, prefs: Preferences | None = None) -> Preferences:
        if prefs is not None:
            self.prefs = prefs
        await self.store.set(PREFS_KEY, self.prefs.model_dump())
        return self.prefs

    async def update_preferences(self, **changes: object) -> Preferences:
        """Validate and persist a partial update. Raises ValueError on bad input."""
        merged = {**self.prefs.model_dump(), **changes}
        return await self.save_preferences(Preferences(**merged))

    async def set_credential(self, key: str) -> bool:
        """Store a new API key. Returns True if it differs from the current one."""
        key = key.strip()
        if not key or key == self.credential:
            return False
        self.credential = key
        await self.store.set(CREDENTIAL_KEY, key)
        logger.info("API key updated")
        return True

    async def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            await close()
