"""Torn API client — attack history and public profile lookups."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from hawkeye.errors import FetchFailure, MissingCredential
from hawkeye.models.features import ProfileSnapshot

if TYPE_CHECKING:
    from hawkeye.utils.http import AsyncHttpClient

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400


class TornApiClient:
    """HistorySource and ProfileSource backed by ``api.torn.com`` (v1).

    The profile lookup needs a key too; it is read lazily through
    ``credential`` so a key set mid-session is picked up.
    """

    def __init__(
        self,
        http: AsyncHttpClient,
        base_url: str = "https://api.torn.com",
        credential: Callable[[], str] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http
        self.base_url = base_url.rstrip("/")
        self._credential = credential or (lambda: "")
        self._clock = clock

    async def _call(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{path}"
        data = await self._http.get_json(url, params=params)
        if not isinstance(data, dict):
            raise FetchFailure(url, "unexpected response shape")
        if "error" in data:
            err = data["error"] or {}
            raise FetchFailure(
                url, f"API error {err.get('code', '?')}: {err.get('error', 'unknown')}",
            )
        return data

    async def fetch_history(
        self, lookback_days: int, credential: str,
    ) -> dict[str, dict[str, Any]]:
        """Attacks in ``[now - lookback_days, now]``, keyed by attack id."""
        to = int(self._clock())
        frm = to - lookback_days * SECONDS_PER_DAY
        data = await self._call(
            "user/",
            {"selections": "attacks", "from": frm, "to": to, "key": credential},
        )
        attacks = data.get("attacks") or {}
        if not isinstance(attacks, dict):
            raise FetchFailure("user/attacks", "attacks is not a mapping")
        logger.debug("Fetched %d attack events (%d days)", len(attacks), lookback_days)
        return attacks

    async def fetch_owner_id(self, credential: str) -> str:
        """Player id of the key owner."""
        data = await self._call("user/", {"selections": "basic", "key": credential})
        owner = data.get("player_id")
        if not owner:
            raise FetchFailure("user/basic", "no player_id in response")
        return str(owner)

    async def fetch_profile(self, target_id: str) -> ProfileSnapshot:
        key = self._credential()
        if not key:
            raise MissingCredential()
        data = await self._call(
            f"user/{target_id}", {"selections": "profile", "key": key},
        )
        last_action = data.get("last_action") or {}
        status = data.get("status") or {}
        return ProfileSnapshot(
            activity_text=" ".join(
                str(p) for p in (last_action.get("status"), last_action.get("relative")) if p
            ),
            status_text=" ".join(
                str(p) for p in (status.get("state"), status.get("description")) if p
            ),
            level_text=str(data.get("level", "")),
            is_donator=bool(data.get("donator")),
        )
