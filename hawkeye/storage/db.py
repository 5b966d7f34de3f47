"""SQLite database engine — WAL mode, single key-value table."""

from __future__ import annotations

from pathlib import Path

import aiosqlite

SCHEMA_VERSION = 1

PRAGMAS = [
    "PRAGMA synchronous = NORMAL",
    "PRAGMA temp_store = MEMORY",
    "PRAGMA busy_timeout = 5000",
]

SCHEMA = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


async def open_db(db_path: str | Path, wal_mode: bool = True) -> aiosqlite.Connection:
    """Open database with performance pragmas and ensure the schema exists."""
    if str(db_path) == ":memory:":
        target = ":memory:"
    else:
        path = Path(db_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        target = str(path)
    db = await aiosqlite.connect(target)
    db.row_factory = aiosqlite.Row

    if wal_mode:
        await db.execute("PRAGMA journal_mode = WAL")
    for pragma in PRAGMAS:
        await db.execute(pragma)

    await db.executescript(SCHEMA)

    # Set schema version if empty
    cursor = await db.execute("SELECT COUNT(*) FROM schema_version")
    row = await cursor.fetchone()
    if row[0] == 0:
        await db.execute(
            "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
        )
    await db.commit()
    return db


async def close_db(db: aiosqlite.Connection) -> None:
    """Cleanly close database."""
    await db.commit()
    await db.close()
