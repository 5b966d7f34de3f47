"""Assessment models — score bands and the result handed to presentation."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field

from hawkeye.models.features import FeatureRecord


class Category(IntEnum):
    """Likelihood bands, ordered from least to most promising."""

    DRY = 0
    MAYBE = 1
    JUICY = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def color(self) -> str:
        return {
            Category.DRY: "red",
            Category.MAYBE: "yellow",
            Category.JUICY: "green",
        }[self]


class Assessment(BaseModel):
    """Score, band and supporting evidence for one target."""

    target_id: str
    score: int
    category: Category
    features: FeatureRecord
    breakdown: dict[str, float] = Field(default_factory=dict)

    def top_contributions(self, n: int = 3) -> list[tuple[str, float]]:
        """Largest absolute non-intercept terms, for tooltips."""
        terms = [(k, v) for k, v in self.breakdown.items() if k not in ("intercept", "z") and v]
        terms.sort(key=lambda kv: abs(kv[1]), reverse=True)
        return terms[:n]
