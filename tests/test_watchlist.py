"""Tests for the persisted watchlist."""

from __future__ import annotations

from hawkeye.storage.kv import WATCHLIST_KEY
from hawkeye.watchlist import Watchlist


class TestWatchlist:
    async def test_toggle(self, kv):
        wl = Watchlist(kv)
        await wl.load()
        assert await wl.toggle("7") is True
        assert "7" in wl
        assert 7 in wl
        assert await wl.toggle("7") is False
        assert "7" not in wl

    async def test_persisted_sorted(self, kv):
        wl = Watchlist(kv)
        await wl.toggle("9")
        await wl.toggle("10")
        assert await kv.get(WATCHLIST_KEY) == ["10", "9"]

        reloaded = Watchlist(kv)
        await reloaded.load()
        assert reloaded.ids == ["10", "9"]
        assert len(reloaded) == 2

    async def test_corrupt_stored_value(self, kv):
        await kv.set(WATCHLIST_KEY, {"not": "a list"})
        wl = Watchlist(kv)
        await wl.load()
        assert len(wl) == 0
