"""Assessment engine — refresh, model, collect, score, classify."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from hawkeye.collectors.bazaar import BazaarPageSource
from hawkeye.collectors.torn_api import TornApiClient
from hawkeye.config import Settings
from hawkeye.core.session import Session
from hawkeye.errors import FetchFailure, MissingCredential
from hawkeye.features.collector import FeatureCollector
from hawkeye.history.builder import build_models
from hawkeye.history.store import HistoryStore
from hawkeye.models.assessment import Assessment
from hawkeye.models.history import ActionRecord, HistoryModels
from hawkeye.scoring.scorer import DEFAULT_WEIGHTS, ScoreWeights, classify, score_breakdown
from hawkeye.scoring.scorer import score as score_features
from hawkeye.storage.cache import MARKET, PROFILE, SignalCache
from hawkeye.utils.decay import utc_now
from hawkeye.utils.http import AsyncHttpClient
from hawkeye.utils.rate_limiter import RateLimiter
from hawkeye.watchlist import Watchlist

logger = logging.getLogger(__name__)


class MugEngine:
    """Request/response front door for the presentation layer.

    Usage::

        async with await MugEngine.open() as engine:
            assessment = await engine.assess("1234567")
            roster = await engine.assess_many(["1", "2", "3"])
    """

    def __init__(
        self,
        session: Session,
        history: HistoryStore,
        collector: FeatureCollector,
        watchlist: Watchlist,
        weights: ScoreWeights = DEFAULT_WEIGHTS,
        clock: Callable[[], datetime] = utc_now,
        http: AsyncHttpClient | None = None,
    ) -> None:
        self.session = session
        self.history = history
        self.collector = collector
        self.watchlist = watchlist
        self.weights = weights
        self._clock = clock
        self._http = http

    @classmethod
    async def open(cls, settings: Settings | None = None) -> MugEngine:
        """Wire the default Torn collaborators and load persisted state."""
        settings = settings or Settings.load()
        session = await Session.open(settings)

        rate = RateLimiter(
            per_minute=settings.rate_limit.requests_per_minute,
            per_host_per_minute=settings.rate_limit.per_host_per_minute,
        )
        http = AsyncHttpClient(
            timeout=settings.http.timeout,
            max_connections=settings.http.max_connections,
            max_per_host=settings.http.max_connections_per_host,
            user_agent=settings.http.user_agent,
            rate_limiter=rate,
        )
        api = TornApiClient(
            http, base_url=settings.api.base_url, credential=lambda: session.credential,
        )
        bazaar = BazaarPageSource(http, bazaar_url=settings.api.bazaar_url)

        watchlist = Watchlist(session.store)
        await watchlist.load()
        history = HistoryStore(session.store, api, requester_id=settings.api.player_id)
        await history.load()
        cache = SignalCache(
            session.store,
            ttl={
                PROFILE: settings.signals.profile_ttl_hours,
                MARKET: settings.signals.market_ttl_hours,
            },
        )
        collector = FeatureCollector(cache, api, bazaar, watchlist)
        return cls(session, history, collector, watchlist, http=http)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.close()
        await self.session.close()

    async def __aenter__(self) -> MugEngine:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    # --- History ---

    async def refresh_history(self, force: bool = False) -> list[ActionRecord]:
        """User-triggered refresh. Errors propagate to the caller."""
        return await self.history.refresh(
            self.session.prefs, self.session.credential, force=force,
        )

    async def build_models(self) -> HistoryModels:
        """Refresh if stale, then rebuild models from whatever ledger we hold.

        A missing key or failed fetch here only costs freshness: the last good
        ledger (possibly empty) is used and a warning is logged.
        """
        try:
            await self.refresh_history()
        except (MissingCredential, FetchFailure) as e:
            logger.warning("Using cached history (%d records): %s", len(self.history.ledger), e)
        return build_models(
            self.history.ledger, self.session.prefs.half_life_days, self._clock(),
        )

    # --- Assessment ---

    async def assess(
        self, target_id: str, models: HistoryModels | None = None,
    ) -> Assessment | None:
        """Collect, score and classify one target. None when disabled."""
        prefs = self.session.prefs
        if not prefs.enabled:
            return None
        if models is None:
            models = await self.build_models()

        features = await self.collector.collect(str(target_id), models, prefs, self._clock())
        weights = self.weights
        if weights.min_personal_samples != prefs.min_samples_for_personal_model:
            weights = weights.model_copy(
                update={"min_personal_samples": prefs.min_samples_for_personal_model},
            )
        value = score_features(features, weights)
        return Assessment(
            target_id=str(target_id),
            score=value,
            category=classify(value, prefs.juicy_threshold, prefs.maybe_threshold),
            features=features,
            breakdown=score_breakdown(features, weights),
        )

    async def assess_many(self, target_ids: Iterable[str]) -> dict[str, Assessment]:
        """Assess a roster concurrently. Failing targets are logged and omitted."""
        if not self.session.prefs.enabled:
            return {}
        ids = list(dict.fromkeys(str(t) for t in target_ids))
        models = await self.build_models()
        sem = asyncio.Semaphore(max(1, self.session.settings.roster_concurrency))

        async def _one(tid: str) -> Assessment | None:
            async with sem:
                return await self.assess(tid, models)

        results = await asyncio.gather(*(_one(t) for t in ids), return_exceptions=True)
        out: dict[str, Assessment] = {}
        for tid, r in zip(ids, results, strict=True):
            if isinstance(r, BaseException):
                logger.error("Assessment failed for %s: %s", tid, r)
                continue
            if r is not None:
                out[tid] = r
        return out

    # --- User actions ---

    async def toggle_watch(self, target_id: str) -> bool:
        return await self.watchlist.toggle(str(target_id))

    async def set_credential(self, key: str) -> bool:
        """Store a new key; a changed key forces the next refresh to fetch."""
        changed = await self.session.set_credential(key)
        if changed:
            await self.history.invalidate()
        return changed

    async def clear_signals(self, target_id: str | None = None) -> int:
        """Drop cached profile/market signals so the next assess refetches them."""
        return await self.collector.cache.clear(None if target_id is None else str(target_id))
