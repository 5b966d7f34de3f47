"""Tests for decay weighting and the canonical clock."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from hawkeye.utils.decay import MS_PER_DAY, age_ms, as_utc, canonical_hour, decay_weight


class TestDecayWeight:
    def test_fresh_event_full_weight(self):
        assert decay_weight(0, 21) == 1.0

    def test_one_half_life(self):
        assert decay_weight(21 * MS_PER_DAY, 21) == pytest.approx(0.5)

    def test_two_half_lives(self):
        assert decay_weight(42 * MS_PER_DAY, 21) == pytest.approx(0.25)

    def test_negative_age_treated_as_zero(self):
        assert decay_weight(-5 * MS_PER_DAY, 21) == 1.0

    def test_monotone_in_age(self):
        weights = [decay_weight(d * MS_PER_DAY, 10) for d in range(0, 60, 5)]
        assert weights == sorted(weights, reverse=True)
        assert all(0 < w <= 1 for w in weights)

    def test_longer_half_life_decays_slower(self):
        age = 14 * MS_PER_DAY
        assert decay_weight(age, 30) > decay_weight(age, 7)


class TestClock:
    def test_canonical_hour_is_utc(self):
        # 23:30 at UTC-5 is 04:30 TCT the next day
        ts = datetime(2026, 1, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert canonical_hour(ts) == 4

    def test_naive_treated_as_utc(self):
        assert canonical_hour(datetime(2026, 1, 1, 10, 15)) == 10

    def test_as_utc_converts(self):
        ts = datetime(2026, 1, 1, 3, 0, tzinfo=timezone(timedelta(hours=3)))
        assert as_utc(ts) == datetime(2026, 1, 1, 0, 0, tzinfo=UTC)

    def test_age_ms(self):
        now = datetime(2026, 1, 2, tzinfo=UTC)
        assert age_ms(datetime(2026, 1, 1, tzinfo=UTC), now) == MS_PER_DAY
