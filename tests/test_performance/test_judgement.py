"""
Tests for outcome classification.

What we test
------------
1. Final outcomes at 90 days against 80% of target.
2. Interim outcomes from a projection only when its confidence > 0.2.
3. Early Days before day 30 (or the configured early-stage end) without a
   usable projection; realized tiers after.
4. Missing target → 20% default; missing performance → Pending.
5. Display labels.
"""

from __future__ import annotations

import pytest

from grq_validation.config import JudgementConfig
from grq_validation.models.results import (
    HybridProjection,
    Judgement,
    JudgementBasis,
    Outcome,
    ProjectionMethod,
)
from grq_validation.performance.judgement import classify


def _projection(value: float, confidence: float = 0.6, days: int = 45) -> HybridProjection:
    return HybridProjection(
        projected_return_pct=value,
        method=ProjectionMethod.TARGET_BASED,
        confidence=confidence,
        days_elapsed=days,
        current_performance=value / 2,
        target_pct=20.0,
    )


class TestFinalJudgement:
    @pytest.mark.parametrize("performance, expected", [
        (25.0, Outcome.HIT_TARGET),
        (15.0, Outcome.PARTIAL_SUCCESS),
        (-5.0, Outcome.MISSED_TARGET),
        (16.0, Outcome.HIT_TARGET),
        (0.0, Outcome.MISSED_TARGET),
    ])
    def test_outcomes(self, performance, expected):
        j = classify(90, performance, 20.0)
        assert j.outcome is expected
        assert j.basis is JudgementBasis.REALIZED

    def test_projection_ignored_once_final(self):
        j = classify(95, 2.0, 20.0, _projection(30.0, confidence=0.9))
        assert j.outcome is Outcome.PARTIAL_SUCCESS

    def test_default_target(self):
        assert classify(90, 17.0, None).outcome is Outcome.HIT_TARGET
        assert classify(90, 15.0, None).outcome is Outcome.PARTIAL_SUCCESS

    def test_custom_threshold_ratio(self):
        j = classify(90, 17.0, 20.0, config=JudgementConfig(hit_threshold_ratio=1.0))
        assert j.outcome is Outcome.PARTIAL_SUCCESS


class TestInterimJudgement:
    @pytest.mark.parametrize("projected, expected", [
        (18.0, Outcome.ON_TRACK),
        (5.0, Outcome.BELOW_TARGET),
        (-3.0, Outcome.DECLINING),
    ])
    def test_projected_tiers(self, projected, expected):
        j = classify(45, 4.0, 20.0, _projection(projected))
        assert j.outcome is expected
        assert j.basis is JudgementBasis.PROJECTED
        assert j.value == pytest.approx(projected)

    def test_low_confidence_projection_ignored_early(self):
        j = classify(10, 3.0, 20.0, _projection(18.0, confidence=0.2))
        assert j.outcome is Outcome.EARLY_DAYS
        assert j.value == pytest.approx(3.0)

    def test_realized_tiers_without_projection(self):
        assert classify(45, 10.0, 20.0).outcome is Outcome.BELOW_TARGET
        assert classify(45, 17.0, 20.0).outcome is Outcome.ON_TRACK
        assert classify(45, -1.0, 20.0).outcome is Outcome.DECLINING

    def test_pending_without_performance(self):
        assert classify(45, None, 20.0).outcome is Outcome.PENDING

    def test_early_days_boundary_follows_config(self):
        assert classify(40, 3.0, 20.0).outcome is Outcome.BELOW_TARGET
        j = classify(40, 3.0, 20.0, early_days_end=45)
        assert j.outcome is Outcome.EARLY_DAYS


class TestJudgementLabel:
    def test_final_label_is_bare(self):
        assert classify(90, 25.0, 20.0).label == "Hit Target"

    def test_interim_label_shows_value(self):
        assert Judgement(Outcome.ON_TRACK, 21.26, JudgementBasis.PROJECTED).label == "On Track (21.3%)"

    def test_early_days_signed(self):
        assert Judgement(Outcome.EARLY_DAYS, 3.2).label == "Early Days (+3.2%)"
        assert Judgement(Outcome.EARLY_DAYS, -1.5).label == "Early Days (-1.5%)"

    def test_pending_label(self):
        assert Judgement(Outcome.PENDING).label == "Pending"
