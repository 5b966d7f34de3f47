"""History models — mug records and the hour-of-day aggregates built from them."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

HOURS_PER_DAY = 24


class ActionRecord(BaseModel):
    """One successful mug performed by the requester."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    target_id: str
    money: int = Field(gt=0)


class HourBucket(BaseModel):
    """Decay-weighted money totals for one canonical hour (or a whole target)."""

    weighted_sum: float = 0.0
    weight_total: float = Field(default=0.0, ge=0.0)
    count: int = 0

    def add(self, money: float, weight: float) -> None:
        self.weighted_sum += money * weight
        self.weight_total += weight
        self.count += 1

    @property
    def expected_money(self) -> float:
        """Weighted mean money, 0 when the bucket holds no information."""
        return expected_money(self)


def expected_money(bucket: HourBucket | None) -> float:
    if bucket is None or bucket.weight_total == 0:
        return 0.0
    return bucket.weighted_sum / bucket.weight_total


def _empty_day() -> list[HourBucket]:
    return [HourBucket() for _ in range(HOURS_PER_DAY)]


class TargetModel(BaseModel):
    """Personal history against a single target."""

    aggregate: HourBucket = Field(default_factory=HourBucket)
    by_hour: list[HourBucket] = Field(default_factory=_empty_day)


class HistoryModels(BaseModel):
    """Global hour-of-day prior plus per-target models.

    Derived from a ledger snapshot; rebuilt rather than updated.
    """

    global_hours: list[HourBucket] = Field(default_factory=_empty_day)
    per_target: dict[str, TargetModel] = Field(default_factory=dict)
    record_count: int = 0

    def global_expected(self, hour: int) -> float:
        return expected_money(self.global_hours[hour % HOURS_PER_DAY])

    def personal(self, target_id: str) -> TargetModel | None:
        return self.per_target.get(target_id)

    def personal_expected(self, target_id: str, hour: int | None = None) -> float:
        model = self.per_target.get(target_id)
        if model is None:
            return 0.0
        if hour is None:
            return expected_money(model.aggregate)
        return expected_money(model.by_hour[hour % HOURS_PER_DAY])
