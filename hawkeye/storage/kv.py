"""Persisted key-value store — JSON documents keyed by string."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import aiosqlite

from hawkeye.storage.db import close_db, open_db

logger = logging.getLogger(__name__)

# Keys of the documents the engine persists
PREFS_KEY = "hawkeye_mugprefs_v2"
CREDENTIAL_KEY = "hawkeye_torn_key"
LEDGER_KEY = "hawkeye_mug_attacks_cache_v2"
LEDGER_LAST_FETCH_KEY = "hawkeye_mug_attacks_last_v2"
WATCHLIST_KEY = "hawkeye_mug_watch_v1"
SIGNAL_KEY_PREFIX = "hawkeye_signal"


@runtime_checkable
class KeyValueStore(Protocol):
    """Async get/set/delete over JSON-serializable values, plus prefix listing."""

    async def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def keys(self, prefix: str = "") -> list[str]: ...


class SqliteKeyValueStore:
    """Key-value store backed by the ``kv`` table.

    Each ``set`` writes and commits the whole value, so readers never
    observe a partially updated document.
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self.db = db

    @classmethod
    async def open(cls, path: Path | str, wal_mode: bool = True) -> SqliteKeyValueStore:
        db = await open_db(path, wal_mode=wal_mode)
        return cls(db)

    async def close(self) -> None:
        await close_db(self.db)

    async def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value, or ``default`` if absent or corrupt."""
        async with self.db.execute("SELECT value FROM kv WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt stored value for %s", key)
            return default

    async def set(self, key: str, value: Any) -> None:
        await self.db.execute(
            """INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))
               ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value,
                   updated_at = excluded.updated_at""",
            (key, json.dumps(value, default=str)),
        )
        await self.db.commit()

    async def delete(self, key: str) -> None:
        await self.db.execute("DELETE FROM kv WHERE key = ?", (key,))
        await self.db.commit()

    async def keys(self, prefix: str = "") -> list[str]:
        """Stored keys starting with ``prefix``, sorted."""
        pattern = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        async with self.db.execute(
            "SELECT key FROM kv WHERE key LIKE ? ESCAPE '\\' ORDER BY key", (f"{pattern}%",),
        ) as cursor:
            return [row[0] for row in await cursor.fetchall()]
