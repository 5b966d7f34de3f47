"""Collaborator protocols — the only way the engine reaches external data.

The engine depends on these interfaces, never on concrete implementations;
tests substitute AsyncMock objects and alternative front-ends (a browser
bridge, a bot) can supply their own.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from hawkeye.models.features import MarketListings, ProfileSnapshot


@runtime_checkable
class HistorySource(Protocol):
    """Raw attack log covering the trailing ``lookback_days``.

    The log holds attacks in both directions; ``fetch_owner_id`` names the
    key owner so only their outgoing mugs are kept.
    """

    async def fetch_history(
        self, lookback_days: int, credential: str,
    ) -> dict[str, dict[str, Any]]: ...

    async def fetch_owner_id(self, credential: str) -> str: ...


@runtime_checkable
class ProfileSource(Protocol):
    async def fetch_profile(self, target_id: str) -> ProfileSnapshot: ...


@runtime_checkable
class MarketSource(Protocol):
    async def fetch_listings(self, target_id: str) -> MarketListings: ...
