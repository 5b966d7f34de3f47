"""Data models — records, aggregates, features and assessments."""

from hawkeye.models.assessment import Assessment, Category
from hawkeye.models.features import (
    FeatureRecord,
    MarketListings,
    MarketSignals,
    ProfileSignals,
    ProfileSnapshot,
)
from hawkeye.models.history import (
    ActionRecord,
    HistoryModels,
    HourBucket,
    TargetModel,
    expected_money,
)

__all__ = [
    "ActionRecord",
    "Assessment",
    "Category",
    "FeatureRecord",
    "HistoryModels",
    "HourBucket",
    "MarketListings",
    "MarketSignals",
    "ProfileSignals",
    "ProfileSnapshot",
    "TargetModel",
    "expected_money",
]
