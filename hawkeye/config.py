"""Configuration — Pydantic Settings + YAML loading, and persisted user preferences."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "default.yaml"
DEFAULT_DATA_DIR = Path.home() / ".hawkeye"


class HttpSettings(BaseSettings):
    timeout: float = 15.0
    max_connections: int = 20
    max_connections_per_host: int = 10
    user_agent: str = "HawkEye/0.2"


class RateLimitSettings(BaseSettings):
    # Torn allows 100 API calls per minute per key
    requests_per_minute: float = 100.0
    per_host_per_minute: float = 60.0


class StorageSettings(BaseSettings):
    db_path: str = str(DEFAULT_DATA_DIR / "hawkeye.db")
    wal_mode: bool = True


class ApiSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HAWKEYE_")

    base_url: str = "https://api.torn.com"
    bazaar_url: str = "https://www.torn.com/bazaar.php"
    # Your own player id; when set, only attacks you initiated are ingested
    player_id: str = ""


class SignalSettings(BaseSettings):
    profile_ttl_hours: float = 5 / 60
    market_ttl_hours: float = 4.0


class Settings(BaseSettings):
    """Root settings — merges defaults, YAML config, and env vars."""

    http: HttpSettings = Field(default_factory=HttpSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    signals: SignalSettings = Field(default_factory=SignalSettings)
    roster_concurrency: int = 5
    log_level: str = "INFO"

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> Settings:
        """Load settings from YAML file, falling back to defaults."""
        data: dict[str, Any] = {}

        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f)
                if isinstance(raw, dict):
                    data = raw

        return cls(**data)


class Preferences(BaseModel):
    """User-facing preferences, persisted in the key-value store.

    Stored documents are merged over these defaults, so keys added in later
    versions pick up their default and unknown keys are ignored.
    """

    enabled: bool = True
    show_on_profiles: bool = True
    show_on_factions: bool = True
    half_life_days: int = 21
    juicy_threshold: int = Field(default=70, ge=0, le=100)
    maybe_threshold: int = Field(default=40, ge=0, le=100)
    min_samples_for_personal_model: int = Field(default=2, ge=1)
    lookback_days: int = Field(default=60, ge=1)
    cache_ttl_hours: float = Field(default=6.0, ge=0.0)
    enable_market_signal: bool = True
    enable_status_signal: bool = True
    chain_mode: bool = False

    @field_validator("half_life_days", mode="before")
    @classmethod
    def _clamp_half_life(cls, v: Any) -> int:
        try:
            days = int(v)
        except (TypeError, ValueError):
            raise ValueError(f"half_life_days must be a number, got {v!r}") from None
        return min(max(days, 3), 60)

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> Preferences:
        if self.maybe_threshold > self.juicy_threshold:
            raise ValueError("maybe_threshold must not exceed juicy_threshold")
        return self

    @classmethod
    def from_stored(cls, raw: Any) -> Preferences:
        """Build from a persisted document, ignoring anything unusable."""
        if not isinstance(raw, dict):
            return cls()
        known = {k: v for k, v in raw.items() if k in cls.model_fields}
        try:
            return cls(**known)
        except (TypeError, ValueError):
            return cls()
