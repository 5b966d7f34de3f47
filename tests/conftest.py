"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from hawkeye.config import Preferences
from hawkeye.models.features import MarketListings, ProfileSnapshot
from hawkeye.storage.kv import SqliteKeyValueStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    """Fixed clock pinned to NOW (12:00 TCT)."""
    return lambda: NOW


@pytest.fixture
async def kv():
    """In-memory key-value store."""
    store = await SqliteKeyValueStore.open(":memory:", wal_mode=False)
    yield store
    await store.close()


@pytest.fixture
def prefs():
    return Preferences()


@pytest.fixture
def make_event():
    """Build a raw attack-log event as the Torn API returns it."""

    def _make(
        defender="7",
        money=1_000_000,
        when=NOW - timedelta(hours=2),
        result="Mugged",
        attacker="1",
    ):
        return {
            "attacker_id": attacker,
            "defender_id": defender,
            "result": result,
            "money": money,
            "timestamp_started": int(when.timestamp()) - 30,
            "timestamp_ended": int(when.timestamp()),
        }

    return _make


@pytest.fixture
def history_source():
    src = AsyncMock()
    src.fetch_history = AsyncMock(return_value={})
    src.fetch_owner_id = AsyncMock(return_value="1")
    return src


@pytest.fixture
def profile_source():
    src = AsyncMock()
    src.fetch_profile = AsyncMock(return_value=ProfileSnapshot(
        activity_text="Online just now",
        status_text="Okay",
        level_text="Level 42",
        is_donator=True,
    ))
    return src


@pytest.fixture
def market_source():
    src = AsyncMock()
    src.fetch_listings = AsyncMock(return_value=MarketListings(
        has_listing=True, prices=[5_000, 20_000],
    ))
    return src
