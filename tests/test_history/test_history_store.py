"""Tests for the TTL-refreshed mug ledger."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from hawkeye.config import Preferences
from hawkeye.errors import FetchFailure, MissingCredential
from hawkeye.history.store import HistoryStore
from hawkeye.storage.kv import LEDGER_KEY, LEDGER_LAST_FETCH_KEY


@pytest.fixture
def history(kv, history_source, clock):
    return HistoryStore(kv, history_source, clock=clock)


class TestLoad:
    async def test_empty_store(self, history):
        await history.load()
        assert history.ledger == []
        assert history.last_fetch is None
        assert not history.is_fresh(6)

    async def test_corrupt_ledger_ignored(self, kv, history, now):
        await kv.set(LEDGER_KEY, [{"bogus": 1}])
        await kv.set(LEDGER_LAST_FETCH_KEY, now.isoformat())
        await history.load()
        assert history.ledger == []
        assert not history.is_fresh(6)

    async def test_round_trip_through_store(self, kv, history_source, clock, make_event, prefs):
        history_source.fetch_history.return_value = {"1": make_event(defender="7")}
        first = HistoryStore(kv, history_source, clock=clock)
        await first.refresh(prefs, "key")

        second = HistoryStore(kv, history_source, clock=clock)
        await second.load()
        assert second.ledger == first.ledger
        assert second.is_fresh(prefs.cache_ttl_hours)


class TestRefresh:
    async def test_fetches_when_stale(self, history, history_source, make_event, prefs):
        history_source.fetch_history.return_value = {"1": make_event(), "2": make_event()}
        records = await history.refresh(prefs, "key")
        assert len(records) == 2
        history_source.fetch_history.assert_awaited_once_with(prefs.lookback_days, "key")

    async def test_fresh_cache_skips_fetch(self, history, history_source, prefs):
        await history.refresh(prefs, "key")
        await history.refresh(prefs, "key")
        assert history_source.fetch_history.await_count == 1

    async def test_force_refetches(self, history, history_source, prefs):
        await history.refresh(prefs, "key")
        await history.refresh(prefs, "key", force=True)
        assert history_source.fetch_history.await_count == 2

    async def test_ttl_expiry_refetches(self, kv, history_source, now, prefs):
        current = [now]
        history = HistoryStore(kv, history_source, clock=lambda: current[0])
        await history.refresh(prefs, "key")
        current[0] = now + timedelta(hours=prefs.cache_ttl_hours, seconds=1)
        await history.refresh(prefs, "key")
        assert history_source.fetch_history.await_count == 2

    async def test_zero_ttl_always_fetches(self, history, history_source):
        prefs = Preferences(cache_ttl_hours=0)
        await history.refresh(prefs, "key")
        await history.refresh(prefs, "key")
        assert history_source.fetch_history.await_count == 2

    async def test_replaces_rather_than_merges(self, history, history_source, make_event, prefs):
        history_source.fetch_history.return_value = {"1": make_event(defender="1")}
        await history.refresh(prefs, "key")
        history_source.fetch_history.return_value = {"2": make_event(defender="2")}
        await history.refresh(prefs, "key", force=True)
        assert [r.target_id for r in history.ledger] == ["2"]

    async def test_missing_credential(self, history, history_source, prefs):
        with pytest.raises(MissingCredential):
            await history.refresh(prefs, "")
        history_source.fetch_history.assert_not_awaited()

    async def test_failure_keeps_last_good_ledger(self, history, history_source, make_event, prefs):
        history_source.fetch_history.return_value = {"1": make_event()}
        await history.refresh(prefs, "key")
        before, fetched_at = history.ledger, history.last_fetch

        history_source.fetch_history.side_effect = FetchFailure("user/", "HTTP 502")
        with pytest.raises(FetchFailure):
            await history.refresh(prefs, "key", force=True)
        assert history.ledger == before
        assert history.last_fetch == fetched_at

    async def test_concurrent_refreshes_share_one_fetch(self, history, history_source, make_event, prefs):
        gate = asyncio.Event()

        async def slow_fetch(lookback_days, credential):
            await gate.wait()
            return {"1": make_event()}

        history_source.fetch_history.side_effect = slow_fetch
        first = asyncio.create_task(history.refresh(prefs, "key"))
        second = asyncio.create_task(history.refresh(prefs, "key"))
        await asyncio.sleep(0)
        gate.set()
        a, b = await asyncio.gather(first, second)

        assert history_source.fetch_history.await_count == 1
        assert a == b
        assert len(a) == 1

    async def test_mugs_against_owner_dropped(self, history, history_source, make_event, prefs):
        history_source.fetch_history.return_value = {
            "1": make_event(attacker="1", defender="7"),
            "2": make_event(attacker="99", defender="1", money=500_000),
        }
        records = await history.refresh(prefs, "key")
        assert [r.target_id for r in records] == ["7"]
        history_source.fetch_owner_id.assert_awaited_once_with("key")

    async def test_configured_requester_skips_owner_lookup(
        self, kv, history_source, clock, make_event, prefs,
    ):
        history_source.fetch_history.return_value = {
            "1": make_event(attacker="1", defender="7"),
            "2": make_event(attacker="99", defender="8"),
        }
        history = HistoryStore(kv, history_source, requester_id="99", clock=clock)
        records = await history.refresh(prefs, "key")
        assert [r.target_id for r in records] == ["8"]
        history_source.fetch_owner_id.assert_not_awaited()

    async def test_owner_resolved_once_per_key(self, history, history_source, prefs):
        await history.refresh(prefs, "key")
        await history.refresh(prefs, "key", force=True)
        assert history_source.fetch_owner_id.await_count == 1
        await history.refresh(prefs, "new-key", force=True)
        assert history_source.fetch_owner_id.await_count == 2

    async def test_owner_lookup_failure_keeps_ledger(self, history, history_source, make_event, prefs):
        history_source.fetch_history.return_value = {"1": make_event()}
        await history.refresh(prefs, "key")
        before = history.ledger

        history_source.fetch_owner_id.side_effect = FetchFailure("user/basic", "HTTP 502")
        with pytest.raises(FetchFailure):
            await history.refresh(prefs, "other-key", force=True)
        assert history.ledger == before
        assert history_source.fetch_history.await_count == 1

    async def test_invalidate_forces_next_fetch(self, history, history_source, prefs):
        await history.refresh(prefs, "key")
        await history.invalidate()
        assert not history.is_fresh(prefs.cache_ttl_hours)
        await history.refresh(prefs, "key")
        assert history_source.fetch_history.await_count == 2
