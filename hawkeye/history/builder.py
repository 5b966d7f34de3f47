"""Model builder — decay-weighted hour-of-day aggregates over the ledger."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from hawkeye.models.history import ActionRecord, HistoryModels, TargetModel
from hawkeye.utils.decay import age_ms, canonical_hour, decay_weight, utc_now


def build_models(
    ledger: Iterable[ActionRecord],
    half_life_days: float,
    now: datetime | None = None,
) -> HistoryModels:
    """Aggregate a ledger snapshot into the global and per-target models.

    Single pass. Each record contributes ``money * w`` and ``w`` to its
    canonical-hour bucket, where ``w`` decays with the record's age at
    ``now``. Deterministic for a fixed ledger and ``now``.
    """
    now = now or utc_now()
    models = HistoryModels()
    for record in ledger:
        w = decay_weight(age_ms(record.timestamp, now), half_life_days)
        h = canonical_hour(record.timestamp)

        models.global_hours[h].add(record.money, w)

        target = models.per_target.get(record.target_id)
        if target is None:
            target = models.per_target[record.target_id] = TargetModel()
        target.aggregate.add(record.money, w)
        target.by_hour[h].add(record.money, w)

        models.record_count += 1
    return models
