"""History store — the requester's mug ledger, refreshed on a TTL."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from pydantic import ValidationError

from hawkeye.errors import FetchFailure, MissingCredential
from hawkeye.history.ingest import extract_actions
from hawkeye.models.history import ActionRecord
from hawkeye.storage.kv import LEDGER_KEY, LEDGER_LAST_FETCH_KEY, KeyValueStore
from hawkeye.utils.decay import as_utc, utc_now

if TYPE_CHECKING:
    from hawkeye.collectors.base import HistorySource
    from hawkeye.config import Preferences

logger = logging.getLogger(__name__)


class HistoryStore:
    """Bounded, time-windowed ledger of successful mugs.

    The ledger is replaced wholesale on every successful fetch and persisted
    together with the fetch instant. A failed fetch leaves both untouched so
    the last good ledger stays usable. At most one refresh is in flight;
    overlapping callers await the same task.
    """

    def __init__(
        self,
        store: KeyValueStore,
        source: HistorySource,
        requester_id: str = "",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.source = source
        self.requester_id = requester_id
        self._clock = clock
        self._ledger: list[ActionRecord] | None = None
        self._last_fetch: datetime | None = None
        self._inflight: asyncio.Task[list[ActionRecord]] | None = None
        # (credential, owner id) resolved from the source when requester_id is unset
        self._owner: tuple[str, str] | None = None

    # --- Load / persist ---

    async def load(self) -> None:
        """Restore ledger and last-fetch instant from the store."""
        raw_ledger = await self.store.get(LEDGER_KEY)
        if isinstance(raw_ledger, list):
            try:
                self._ledger = [ActionRecord.model_validate(r) for r in raw_ledger]
            except ValidationError:
                logger.warning("Stored ledger is corrupt, ignoring it")
                self._ledger = None

        raw_ts = await self.store.get(LEDGER_LAST_FETCH_KEY)
        self._last_fetch = None
        if isinstance(raw_ts, str) and raw_ts:
            try:
                self._last_fetch = as_utc(datetime.fromisoformat(raw_ts))
            except ValueError:
                logger.warning("Stored last-fetch instant is corrupt, ignoring it")

        logger.debug(
            "History loaded: %d records, last fetch %s",
            len(self._ledger or []), self._last_fetch,
        )

    async def _persist(self) -> None:
        await self.store.set(
            LEDGER_KEY, [r.model_dump(mode="json") for r in self._ledger or []],
        )
        await self.store.set(
            LEDGER_LAST_FETCH_KEY,
            self._last_fetch.isoformat() if self._last_fetch else "",
        )

    # --- Accessors ---

    @property
    def ledger(self) -> list[ActionRecord]:
        return list(self._ledger or [])

    @property
    def last_fetch(self) -> datetime | None:
        return self._last_fetch

    def is_fresh(self, ttl_hours: float) -> bool:
        if self._ledger is None or self._last_fetch is None:
            return False
        return self._clock() - self._last_fetch < timedelta(hours=ttl_hours)

    async def invalidate(self) -> None:
        """Forget the fetch instant so the next refresh goes to the network."""
        self._last_fetch = None
        await self.store.set(LEDGER_LAST_FETCH_KEY, "")

    # --- Refresh ---

    async def refresh(
        self,
        prefs: Preferences,
        credential: str,
        *,
        force: bool = False,
    ) -> list[ActionRecord]:
        """Return the ledger, fetching a new window when stale or forced.

        Raises MissingCredential when a fetch is needed but no key is set,
        FetchFailure when the fetch itself fails.
        """
        if not force and self.is_fresh(prefs.cache_ttl_hours):
            logger.debug("History cache fresh (%d records)", len(self._ledger or []))
            return self.ledger

        if self._inflight is not None and not self._inflight.done():
            logger.debug("Joining in-flight history refresh")
            return list(await asyncio.shield(self._inflight))

        if not credential:
            raise MissingCredential()

        task = asyncio.create_task(self._fetch(prefs.lookback_days, credential))
        self._inflight = task
        task.add_done_callback(self._clear_inflight)
        return list(await asyncio.shield(task))

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _requester(self, credential: str) -> str:
        if self.requester_id:
            return self.requester_id
        if self._owner is None or self._owner[0] != credential:
            self._owner = (credential, await self.source.fetch_owner_id(credential))
            logger.debug("Resolved key owner %s", self._owner[1])
        return self._owner[1]

    async def _fetch(self, lookback_days: int, credential: str) -> list[ActionRecord]:
        try:
            requester = await self._requester(credential)
            raw = await self.source.fetch_history(lookback_days, credential)
        except FetchFailure:
            logger.warning("History refresh failed, keeping %d cached records",
                           len(self._ledger or []))
            raise

        records = extract_actions(raw, requester)
        self._ledger = records
        self._last_fetch = self._clock()
        await self._persist()
        logger.info("History refreshed: %d mugs over %d days", len(records), lookback_days)
        return records
