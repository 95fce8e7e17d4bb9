"""
Tests for the zero-intercept trend line.

What we test
------------
1. A perfect line through the origin → exact slope, R² = 1.
2. Fewer than three samples, or every sample on day 0 → None.
3. Flat series (SS_tot = 0) → R² reported as 0, not a division error.
4. fit_trend_line builds samples from the return series up to the last bar.
5. predicted_at floors at -100%; predicted_90_day reads the line at the
   configured horizon.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from grq_validation.models.results import BuyPriceResolution, TrendLine
from grq_validation.performance.trend import fit_trend_line, fit_zero_intercept

SCORE = date(2025, 2, 14)


class TestFitZeroIntercept:
    def test_perfect_line(self):
        trend = fit_zero_intercept([(1.0, 0.5), (2.0, 1.0), (4.0, 2.0)])
        assert trend is not None
        assert trend.slope == pytest.approx(0.5)
        assert trend.r_squared == pytest.approx(1.0)
        assert trend.intercept == 0.0

    def test_too_few_samples(self):
        assert fit_zero_intercept([(1.0, 1.0), (2.0, 2.0)]) is None

    def test_all_on_day_zero(self):
        assert fit_zero_intercept([(0.0, 1.0), (0.0, 2.0), (0.0, 3.0)]) is None

    def test_flat_series_r_squared_zero(self):
        trend = fit_zero_intercept([(1.0, 2.0), (2.0, 2.0), (3.0, 2.0)])
        assert trend is not None
        assert trend.slope == pytest.approx(12.0 / 14.0)
        assert trend.r_squared == 0.0

    def test_slope_is_regression_through_origin(self):
        samples = [(1.0, 1.0), (2.0, 3.0), (3.0, 2.0)]
        trend = fit_zero_intercept(samples)
        # Σxy / Σx² = (1 + 6 + 6) / 14
        assert trend.slope == pytest.approx(13.0 / 14.0)

    def test_samples_kept(self):
        samples = [(1.0, 1.0), (2.0, 2.0), (3.0, 3.0)]
        assert fit_zero_intercept(samples).points == tuple(samples)


class TestTrendLinePrediction:
    def test_predicted_90_day(self):
        assert TrendLine(slope=0.2, r_squared=0.9).predicted_90_day == pytest.approx(18.0)

    def test_predicted_at_configured_horizon(self):
        trend = TrendLine(slope=0.2, r_squared=0.9, horizon_days=60)
        assert trend.predicted_90_day == pytest.approx(12.0)

    def test_floor_at_total_loss(self):
        assert TrendLine(slope=-5.0, r_squared=0.9).predicted_at(90) == -100.0


class TestFitTrendLine:
    def test_from_market_series(self, make_point):
        points = [
            make_point(SCORE, 10.0),
            make_point(SCORE + timedelta(days=5), 10.5),
            make_point(SCORE + timedelta(days=10), 11.0),
        ]
        trend = fit_trend_line(points, [], BuyPriceResolution(10.0, SCORE), SCORE)
        assert trend is not None
        assert trend.slope == pytest.approx(1.0)
        assert trend.r_squared == pytest.approx(1.0)
        assert len(trend.points) == 3

    def test_no_buy_price(self, make_point):
        points = [make_point(SCORE + timedelta(days=d), 10.0) for d in range(5)]
        assert fit_trend_line(points, [], None, SCORE) is None

    def test_insufficient_points(self, make_point):
        points = [make_point(SCORE, 10.0), make_point(SCORE + timedelta(days=3), 10.5)]
        assert fit_trend_line(points, [], BuyPriceResolution(10.0, SCORE), SCORE) is None

    def test_horizon_carried_onto_line(self, make_point):
        points = [make_point(SCORE + timedelta(days=d), 10.0 + 0.1 * d) for d in (0, 5, 10)]
        trend = fit_trend_line(
            points, [], BuyPriceResolution(10.0, SCORE), SCORE, horizon_days=60,
        )
        assert trend.horizon_days == 60
        assert trend.predicted_90_day == pytest.approx(60.0)
