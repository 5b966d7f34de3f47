"""Mug likelihood scoring — fixed linear model squashed through a logistic."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict

from hawkeye.models.assessment import Category
from hawkeye.models.features import MINUTES_CAP, FeatureRecord


class ScoreWeights(BaseModel):
    """Hand-tuned model weights.

    Empirical constants, kept configurable but not derived from data.
    The log-scaled money terms are divided by their ``*_scale`` so a typical
    value lands near 1 before weighting.
    """

    model_config = ConfigDict(frozen=True)

    intercept: float = -1.8
    online: float = 0.6
    hospitalized: float = -1.2
    traveling: float = -0.9
    recency: float = 0.8
    has_listing: float = 0.5
    listing_value: float = 0.7
    listing_value_scale: float = 14.0
    level: float = 0.3
    level_cap: int = 100
    donator: float = 0.15
    personal_strong: float = 1.0
    personal_weak: float = 0.3
    personal_scale: float = 13.0
    min_personal_samples: int = 2
    global_hour: float = 0.6
    global_hour_scale: float = 13.0
    chain_window: float = 0.25
    watched: float = 0.2
    hour_bias_amplitude: float = 0.15


DEFAULT_WEIGHTS = ScoreWeights()


def _log1p(x: float) -> float:
    return math.log1p(max(0.0, x))


def sigmoid(z: float) -> float:
    if z < 0:
        ez = math.exp(z)
        return ez / (1.0 + ez)
    return 1.0 / (1.0 + math.exp(-z))


def hour_bias(hour: int, amplitude: float = DEFAULT_WEIGHTS.hour_bias_amplitude) -> float:
    """Faint diurnal preference: lowest at 00 TCT, highest at 12 TCT."""
    rad = 2.0 * math.pi * hour / 24.0
    return amplitude * math.sin(rad - math.pi / 2.0)


def score_breakdown(
    f: FeatureRecord, weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> dict[str, float]:
    """Each term's contribution to the logit, plus ``z`` itself."""
    w = weights
    minutes = min(f.minutes_since_active, MINUTES_CAP)
    personal_weight = (
        w.personal_strong if f.personal_sample_count >= w.min_personal_samples
        else w.personal_weak
    )
    terms = {
        "intercept": w.intercept,
        "online": w.online if f.is_online else 0.0,
        "hospitalized": w.hospitalized if f.is_hospitalized else 0.0,
        "traveling": w.traveling if f.is_traveling else 0.0,
        "recency": max(0, MINUTES_CAP - minutes) / MINUTES_CAP * w.recency,
        "has_listing": w.has_listing if f.has_market_listing else 0.0,
        "listing_value": (
            _log1p(f.market_listing_value) / w.listing_value_scale * w.listing_value
        ),
        "level": min(f.level, w.level_cap) / w.level_cap * w.level,
        "donator": w.donator if f.is_donator else 0.0,
        "personal": _log1p(f.personal_mean_usd) / w.personal_scale * personal_weight,
        "global_hour": _log1p(f.global_hour_mean_usd) / w.global_hour_scale * w.global_hour,
        "chain_window": w.chain_window if f.chain_window_active else 0.0,
        "watched": w.watched if f.is_watched else 0.0,
        "hour_bias": hour_bias(f.current_hour, w.hour_bias_amplitude),
    }
    terms["z"] = sum(terms.values())
    return terms


def score(f: FeatureRecord, weights: ScoreWeights = DEFAULT_WEIGHTS) -> int:
    """Likelihood score in [0, 100]. Pure and deterministic."""
    z = score_breakdown(f, weights)["z"]
    # half-up, not banker's rounding
    return math.floor(sigmoid(z) * 100 + 0.5)


def classify(score_value: int, juicy_threshold: int = 70, maybe_threshold: int = 40) -> Category:
    """Band a score: JUICY at/above juicy, MAYBE at/above maybe, else DRY."""
    if score_value >= juicy_threshold:
        return Category.JUICY
    if score_value >= maybe_threshold:
        return Category.MAYBE
    return Category.DRY
