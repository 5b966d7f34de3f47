"""Signal payloads from collaborators and the flat feature record fed to scoring."""

from __future__ import annotations

from pydantic import BaseModel, Field

MINUTES_CAP = 360


class ProfileSnapshot(BaseModel):
    """Raw public-profile text as returned by a profile source."""

    activity_text: str = ""
    status_text: str = ""
    level_text: str = ""
    is_donator: bool = False


class ProfileSignals(BaseModel):
    """Normalized profile signals. Defaults are the neutral values."""

    minutes_since_active: int = MINUTES_CAP
    is_online: bool = False
    is_hospitalized: bool = False
    is_traveling: bool = False
    level: int = 0
    is_donator: bool = False


class MarketListings(BaseModel):
    """Raw bazaar listing prices as returned by a market source."""

    has_listing: bool = False
    prices: list[int] = Field(default_factory=list)


class MarketSignals(BaseModel):
    has_market_listing: bool = False
    market_listing_value: int = 0


class FeatureRecord(BaseModel):
    """Per-target snapshot consumed by the scorer. Never persisted."""

    minutes_since_active: int = MINUTES_CAP
    is_online: bool = False
    is_hospitalized: bool = False
    is_traveling: bool = False
    level: int = 0
    is_donator: bool = False
    has_market_listing: bool = False
    market_listing_value: float = 0.0
    personal_mean_usd: float = 0.0
    personal_sample_count: int = 0
    global_hour_mean_usd: float = 0.0
    current_hour: int = Field(default=0, ge=0, le=23)
    chain_window_active: bool = False
    is_watched: bool = False
