"""
Tests for split adjustment of historical prices.

What we test
------------
1. No market data or no split → multiplier 1.0.
2. A 2-for-1 split after the score date halves a score-date price.
3. Only splits strictly after the historical date count.
4. Reverse splits (coefficient < 1) are ignored; forward splits multiply.
"""

from __future__ import annotations

from datetime import date

import pytest

from grq_validation.performance.splits import adjust_price, split_multiplier

SCORE = date(2025, 2, 14)


class TestSplitMultiplier:
    def test_no_points_is_identity(self):
        assert split_multiplier([], SCORE) == 1.0

    def test_no_splits_is_identity(self, make_point):
        points = [make_point(date(2025, 2, 18), 15.0), make_point(date(2025, 3, 3), 16.0)]
        assert split_multiplier(points, SCORE) == 1.0

    def test_split_after_date_counts(self, make_point):
        points = [make_point(date(2025, 3, 3), 15.0, split=2.0)]
        assert split_multiplier(points, SCORE) == 2.0

    def test_split_on_date_itself_excluded(self, make_point):
        points = [make_point(SCORE, 15.0, split=2.0)]
        assert split_multiplier(points, SCORE) == 1.0

    def test_split_before_date_excluded(self, make_point):
        points = [make_point(date(2025, 1, 10), 30.0, split=2.0)]
        assert split_multiplier(points, SCORE) == 1.0

    def test_multiple_splits_multiply(self, make_point):
        points = [
            make_point(date(2025, 3, 3), 15.0, split=2.0),
            make_point(date(2025, 4, 1), 5.0, split=3.0),
        ]
        assert split_multiplier(points, SCORE) == 6.0

    def test_reverse_split_ignored(self, make_point):
        points = [
            make_point(date(2025, 3, 3), 15.0, split=0.5),
            make_point(date(2025, 4, 1), 5.0, split=2.0),
        ]
        assert split_multiplier(points, SCORE) == 2.0


class TestAdjustPrice:
    def test_two_for_one_halves_price(self, make_point):
        points = [make_point(date(2025, 3, 3), 15.0, split=2.0)]
        assert adjust_price(29.90, points, SCORE) == pytest.approx(14.95)

    def test_unchanged_without_split(self, make_point):
        points = [make_point(date(2025, 3, 3), 15.0)]
        assert adjust_price(29.90, points, SCORE) == pytest.approx(29.90)
