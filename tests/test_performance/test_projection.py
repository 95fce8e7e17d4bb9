"""
Tests for the hybrid 90-day projector.

What we test
------------
1. Bucket selection is half-open: 29 → early, 30 → mid, 60 → late.
2. Early / mid: dampened trend when R² clears the threshold (strict >),
   otherwise the target-based nudge; no target → fixed fallback.
3. Late: realistic trajectory in its three regimes, mean reversion without
   a target, and no division error at or past the horizon (a shortfall
   with no days left counts as unrealistic).
4. Every output is clamped to [-100, 200] with confidence in [0, 1].
5. projection_path: weekly offsets ending on day 90, shaped by method.
"""

from __future__ import annotations

from datetime import date

import pytest

from grq_validation.config import ProjectionConfig
from grq_validation.models.results import HybridProjection, ProjectionMethod, TrendLine
from grq_validation.performance.projection import (
    EarlyStageStrategy,
    HybridProjector,
    LateStageStrategy,
    MidStageStrategy,
)

SCORE = date(2025, 2, 14)


@pytest.fixture
def projector() -> HybridProjector:
    return HybridProjector()


def _trend(slope: float, r2: float) -> TrendLine:
    return TrendLine(slope=slope, r_squared=r2)


# ── Bucket selection ──────────────────────────────────────────────────────────

class TestStrategySelection:
    @pytest.mark.parametrize("days, expected", [
        (0, EarlyStageStrategy),
        (29, EarlyStageStrategy),
        (30, MidStageStrategy),
        (59, MidStageStrategy),
        (60, LateStageStrategy),
        (120, LateStageStrategy),
    ])
    def test_half_open_buckets(self, projector, days, expected):
        assert isinstance(projector.strategy_for(days), expected)


# ── Early bucket ──────────────────────────────────────────────────────────────

class TestEarlyStage:
    def test_dampened_trend(self, projector):
        proj = projector.project(3.0, 10, 20.0, _trend(1.0, 0.9))
        assert proj.method is ProjectionMethod.DAMPENED_TREND
        assert proj.projected_return_pct == pytest.approx(27.0)
        assert proj.confidence == pytest.approx(0.63)
        assert proj.dampened_slope == pytest.approx(0.3)

    def test_confidence_capped(self, projector):
        proj = projector.project(3.0, 10, 20.0, _trend(0.1, 1.0))
        assert proj.confidence == pytest.approx(0.7)
        proj = HybridProjector(ProjectionConfig(early_confidence_weight=1.0)).project(
            3.0, 10, 20.0, _trend(0.1, 1.0),
        )
        assert proj.confidence == pytest.approx(0.8)

    def test_r_squared_at_threshold_falls_back(self, projector):
        proj = projector.project(5.0, 10, 20.0, _trend(1.0, 0.1))
        assert proj.method is ProjectionMethod.TARGET_BASED

    def test_target_based_positive(self, projector):
        proj = projector.project(5.0, 10, 20.0, None)
        assert proj.method is ProjectionMethod.TARGET_BASED
        assert proj.projected_return_pct == pytest.approx(6.5)
        assert proj.confidence == pytest.approx(0.3)

    def test_target_based_negative(self, projector):
        proj = projector.project(-4.0, 10, 20.0, None)
        assert proj.projected_return_pct == pytest.approx(-2.0)

    def test_target_based_capped_at_target(self, projector):
        proj = projector.project(30.0, 10, 20.0, None)
        assert proj.projected_return_pct == pytest.approx(20.0)

    def test_no_target_fallback(self, projector):
        proj = projector.project(5.0, 10, None, None)
        assert proj.projected_return_pct == pytest.approx(-5.0)


# ── Mid bucket ────────────────────────────────────────────────────────────────

class TestMidStage:
    def test_dampened_trend(self, projector):
        proj = projector.project(15.0, 30, 20.0, _trend(1.0, 0.5))
        assert proj.method is ProjectionMethod.DAMPENED_TREND
        assert proj.projected_return_pct == pytest.approx(45.0)
        assert proj.confidence == pytest.approx(0.4)

    def test_lower_r_squared_threshold(self, projector):
        proj = projector.project(15.0, 45, 20.0, _trend(0.2, 0.06))
        assert proj.method is ProjectionMethod.DAMPENED_TREND

    def test_target_based(self, projector):
        proj = projector.project(10.0, 45, 20.0, _trend(0.2, 0.01))
        assert proj.method is ProjectionMethod.TARGET_BASED
        assert proj.projected_return_pct == pytest.approx(11.5)
        assert proj.confidence == pytest.approx(0.5)

    def test_target_based_negative(self, projector):
        proj = projector.project(-10.0, 45, 20.0, None)
        assert proj.projected_return_pct == pytest.approx(-6.0)


# ── Late bucket ───────────────────────────────────────────────────────────────

class TestLateStage:
    def test_conservative_below_target(self, projector):
        proj = projector.project(10.0, 60, 20.0, None)
        assert proj.method is ProjectionMethod.REALISTIC_TRAJECTORY
        assert proj.projected_return_pct == pytest.approx(15.0)
        assert proj.confidence == pytest.approx(0.6)

    def test_conservative_capped_at_fraction_of_target(self, projector):
        proj = projector.project(15.0, 60, 20.0, None)
        # trajectory 22.5, capped at 0.8 × 20
        assert proj.projected_return_pct == pytest.approx(16.0)

    def test_unrealistic_required_rate(self, projector):
        proj = projector.project(10.0, 80, 50.0, None)
        # required 4%/day; trajectory 11.25 < 0.6 × 50; floor 1.2 × 10
        assert proj.projected_return_pct == pytest.approx(12.0)
        assert proj.confidence == pytest.approx(0.7)

    def test_already_above_target(self, projector):
        proj = projector.project(25.0, 70, 20.0, None)
        assert proj.projected_return_pct == pytest.approx(25.0 / 70 * 90)
        assert proj.confidence == pytest.approx(0.7)

    def test_mean_reversion_without_target(self, projector):
        proj = projector.project(10.0, 70, None, None)
        assert proj.method is ProjectionMethod.MEAN_REVERSION
        assert proj.projected_return_pct == pytest.approx(6.0)
        assert proj.confidence == pytest.approx(0.3)

    def test_at_horizon_shortfall_is_unrealistic(self, projector):
        proj = projector.project(10.0, 90, 20.0, None)
        # no days left to close the gap: floor 1.2 × 10 beats trajectory 10
        assert proj.projected_return_pct == pytest.approx(12.0)
        assert proj.confidence == pytest.approx(0.7)

    def test_at_horizon_above_target(self, projector):
        proj = projector.project(25.0, 90, 20.0, None)
        assert proj.projected_return_pct == pytest.approx(25.0)
        assert proj.confidence == pytest.approx(0.7)

    def test_past_horizon(self, projector):
        proj = projector.project(10.0, 95, 20.0, None)
        assert proj is not None
        assert -100.0 <= proj.projected_return_pct <= 200.0


# ── Bounds ────────────────────────────────────────────────────────────────────

class TestBounds:
    def test_clamped_high(self, projector):
        assert projector.project(5.0, 10, 20.0, _trend(10.0, 1.0)).projected_return_pct == 200.0

    def test_clamped_low(self, projector):
        assert projector.project(-5.0, 10, 20.0, _trend(-10.0, 1.0)).projected_return_pct == -100.0

    def test_outputs_always_in_bounds(self, projector):
        for days in (0, 5, 29, 30, 45, 59, 60, 75, 89, 90):
            for current in (-99.0, -20.0, 0.0, 12.0, 150.0, 400.0):
                for target in (None, -10.0, 0.0, 20.0, 300.0):
                    for trend in (None, _trend(-3.0, 0.9), _trend(4.0, 0.5), _trend(0.5, -2.0)):
                        proj = projector.project(current, days, target, trend)
                        assert -100.0 <= proj.projected_return_pct <= 200.0
                        assert 0.0 <= proj.confidence <= 1.0

    def test_unknown_performance(self, projector):
        assert projector.project(None, 10, 20.0, None) is None


# ── Projection path ───────────────────────────────────────────────────────────

class TestProjectionPath:
    def test_weekly_offsets_end_on_horizon(self, projector):
        proj = projector.project(5.0, 10, 20.0, None)
        path = projector.projection_path(proj, SCORE)
        assert [p.day for p in path] == [0, 7, 14, 21, 28, 35, 42, 49, 56, 63, 70, 77, 84, 90]
        assert path[-1].date == date(2025, 5, 15)

    def test_dampened_trend_follows_line(self, projector):
        proj = projector.project(3.0, 10, 20.0, _trend(1.0, 0.9))
        path = projector.projection_path(proj, SCORE)
        assert path[1].projected_return_pct == pytest.approx(0.3 * 7)
        assert path[-1].projected_return_pct == pytest.approx(proj.projected_return_pct)

    def test_ramp_reaches_projection(self, projector):
        proj = projector.project(5.0, 10, 20.0, None)
        path = projector.projection_path(proj, SCORE)
        assert path[0].projected_return_pct == 0.0
        assert path[-1].projected_return_pct == pytest.approx(proj.projected_return_pct)

    def test_trajectory_uses_realized_rate_until_today(self, projector):
        proj = HybridProjection(
            projected_return_pct=15.0,
            method=ProjectionMethod.REALISTIC_TRAJECTORY,
            confidence=0.6,
            days_elapsed=70,
            current_performance=14.0,
            target_pct=20.0,
        )
        path = projector.projection_path(proj, SCORE)
        by_day = {p.day: p.projected_return_pct for p in path}
        assert by_day[35] == pytest.approx(7.0)
        assert by_day[90] == pytest.approx(15.0)
