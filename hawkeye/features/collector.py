"""Feature collector — joins live signals, history models and the watchlist."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

from hawkeye.features.market import market_signals
from hawkeye.features.parsing import normalize_profile
from hawkeye.models.features import FeatureRecord, MarketSignals, ProfileSignals
from hawkeye.storage.cache import MARKET, PROFILE, SignalCache
from hawkeye.utils.decay import canonical_hour, utc_now

if TYPE_CHECKING:
    from hawkeye.collectors.base import MarketSource, ProfileSource
    from hawkeye.config import Preferences
    from hawkeye.models.history import HistoryModels
    from hawkeye.watchlist import Watchlist

logger = logging.getLogger(__name__)

SignalT = TypeVar("SignalT", bound=BaseModel)


class FeatureCollector:
    """Build a FeatureRecord for one target.

    Each external signal is cached per target with its own TTL. A disabled
    signal returns its neutral default without I/O; a failing one returns
    the neutral default and is not cached, so the next pass retries.
    """

    def __init__(
        self,
        cache: SignalCache,
        profile_source: ProfileSource | None,
        market_source: MarketSource | None,
        watchlist: Watchlist,
    ) -> None:
        self.cache = cache
        self.profile_source = profile_source
        self.market_source = market_source
        self.watchlist = watchlist

    async def _cached(self, kind: str, target_id: str, model: type[SignalT]) -> SignalT | None:
        payload = await self.cache.get_cached(kind, target_id)
        if payload is None:
            return None
        try:
            return model.model_validate(payload)
        except ValidationError:
            logger.debug("Cached %s for %s unreadable, refetching", kind, target_id)
            return None

    async def profile_signals(self, target_id: str, prefs: Preferences) -> ProfileSignals:
        if not prefs.enable_status_signal or self.profile_source is None:
            return ProfileSignals()

        cached = await self._cached(PROFILE, target_id, ProfileSignals)
        if cached is not None:
            return cached

        try:
            snapshot = await self.profile_source.fetch_profile(target_id)
        except Exception as e:
            logger.warning("Profile signal unavailable for %s: %s", target_id, e)
            return ProfileSignals()

        signals = normalize_profile(snapshot)
        await self.cache.put(PROFILE, target_id, signals.model_dump())
        return signals

    async def market_signals(self, target_id: str, prefs: Preferences) -> MarketSignals:
        if not prefs.enable_market_signal or self.market_source is None:
            return MarketSignals()

        cached = await self._cached(MARKET, target_id, MarketSignals)
        if cached is not None:
            return cached

        try:
            listings = await self.market_source.fetch_listings(target_id)
        except Exception as e:
            logger.warning("Bazaar signal unavailable for %s: %s", target_id, e)
            return MarketSignals()

        signals = market_signals(listings)
        await self.cache.put(MARKET, target_id, signals.model_dump())
        return signals

    async def collect(
        self,
        target_id: str,
        models: HistoryModels,
        prefs: Preferences,
        now: datetime | None = None,
    ) -> FeatureRecord:
        now = now or utc_now()
        hour = canonical_hour(now)
        profile = await self.profile_signals(target_id, prefs)
        market = await self.market_signals(target_id, prefs)

        personal = models.personal(target_id)
        if personal is not None:
            personal_mean = personal.aggregate.expected_money
            personal_count = personal.aggregate.count
        else:
            personal_mean, personal_count = 0.0, 0

        return FeatureRecord(
            minutes_since_active=profile.minutes_since_active,
            is_online=profile.is_online,
            is_hospitalized=profile.is_hospitalized,
            is_traveling=profile.is_traveling,
            level=profile.level,
            is_donator=profile.is_donator,
            has_market_listing=market.has_market_listing,
            market_listing_value=market.market_listing_value,
            personal_mean_usd=personal_mean,
            personal_sample_count=personal_count,
            global_hour_mean_usd=models.global_expected(hour),
            current_hour=hour,
            chain_window_active=prefs.chain_mode,
            is_watched=target_id in self.watchlist,
        )
