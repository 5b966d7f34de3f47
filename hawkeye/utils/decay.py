"""Time helpers — exponential half-life decay and the canonical game clock."""

from __future__ import annotations

from datetime import UTC, datetime

MS_PER_DAY = 86_400_000


def decay_weight(age_ms: float, half_life_days: float) -> float:
    """Recency weight in (0, 1] for an event ``age_ms`` milliseconds old.

    weight = 0.5 ** (age / half_life). Negative ages (clock skew, future
    timestamps) are treated as age 0.
    """
    age_ms = max(age_ms, 0.0)
    return 0.5 ** (age_ms / (half_life_days * MS_PER_DAY))


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(ts: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def age_ms(ts: datetime, now: datetime | None = None) -> float:
    now = now or utc_now()
    return (as_utc(now) - as_utc(ts)).total_seconds() * 1000.0


def canonical_hour(ts: datetime | None = None) -> int:
    """Torn City Time hour (0-23). TCT is UTC regardless of viewer locale."""
    return as_utc(ts or utc_now()).hour
