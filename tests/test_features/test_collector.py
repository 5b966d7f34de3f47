"""Tests for FeatureCollector — signal caching, neutral fallbacks, joining."""

from __future__ import annotations

from datetime import timedelta

import pytest

from hawkeye.config import Preferences
from hawkeye.errors import FetchFailure
from hawkeye.features.collector import FeatureCollector
from hawkeye.history.builder import build_models
from hawkeye.models.features import MarketSignals, ProfileSignals
from hawkeye.models.history import ActionRecord, HistoryModels
from hawkeye.storage.cache import SignalCache
from hawkeye.watchlist import Watchlist


@pytest.fixture
def watchlist(kv):
    return Watchlist(kv)


@pytest.fixture
def collector(kv, clock, profile_source, market_source, watchlist):
    return FeatureCollector(SignalCache(kv, clock=clock), profile_source, market_source, watchlist)


class TestCollect:
    async def test_joins_all_signals(self, collector, watchlist, now, prefs):
        await watchlist.toggle("7")
        ledger = [ActionRecord(timestamp=now - timedelta(hours=1), target_id="7", money=50_000)]
        models = build_models(ledger, prefs.half_life_days, now)

        f = await collector.collect("7", models, prefs, now)

        assert f.minutes_since_active == 0
        assert f.is_online
        assert f.level == 42
        assert f.is_donator
        assert f.has_market_listing
        assert f.market_listing_value == 25_000
        assert f.personal_mean_usd == pytest.approx(50_000)
        assert f.personal_sample_count == 1
        assert f.global_hour_mean_usd == 0.0  # mug was at 11:00, now is 12:00
        assert f.current_hour == 12
        assert f.is_watched
        assert not f.chain_window_active

    async def test_chain_mode(self, collector, now):
        f = await collector.collect("7", HistoryModels(), Preferences(chain_mode=True), now)
        assert f.chain_window_active

    async def test_unknown_target_has_no_personal(self, collector, now, prefs):
        f = await collector.collect("404", HistoryModels(), prefs, now)
        assert f.personal_mean_usd == 0.0
        assert f.personal_sample_count == 0
        assert not f.is_watched


class TestSignals:
    async def test_disabled_market_no_fetch(self, collector, market_source):
        prefs = Preferences(enable_market_signal=False)
        assert await collector.market_signals("7", prefs) == MarketSignals()
        market_source.fetch_listings.assert_not_awaited()

    async def test_disabled_status_no_fetch(self, collector, profile_source):
        prefs = Preferences(enable_status_signal=False)
        assert await collector.profile_signals("7", prefs) == ProfileSignals()
        profile_source.fetch_profile.assert_not_awaited()

    async def test_missing_source_is_neutral(self, kv, clock, watchlist, prefs):
        collector = FeatureCollector(SignalCache(kv, clock=clock), None, None, watchlist)
        assert await collector.profile_signals("7", prefs) == ProfileSignals()
        assert await collector.market_signals("7", prefs) == MarketSignals()

    async def test_cache_hit_skips_fetch(self, collector, profile_source, market_source, prefs):
        first = await collector.profile_signals("7", prefs)
        second = await collector.profile_signals("7", prefs)
        assert first == second
        assert profile_source.fetch_profile.await_count == 1

        await collector.market_signals("7", prefs)
        await collector.market_signals("7", prefs)
        assert market_source.fetch_listings.await_count == 1

    async def test_cache_is_per_target(self, collector, profile_source, prefs):
        await collector.profile_signals("7", prefs)
        await collector.profile_signals("8", prefs)
        assert profile_source.fetch_profile.await_count == 2

    async def test_failure_is_neutral_and_not_cached(self, collector, profile_source, prefs):
        profile_source.fetch_profile.side_effect = FetchFailure("profile", "timeout")
        assert await collector.profile_signals("7", prefs) == ProfileSignals()
        assert await collector.profile_signals("7", prefs) == ProfileSignals()
        assert profile_source.fetch_profile.await_count == 2

    async def test_market_failure_is_neutral(self, collector, market_source, prefs):
        market_source.fetch_listings.side_effect = FetchFailure("bazaar", "HTTP 500")
        assert await collector.market_signals("7", prefs) == MarketSignals()
