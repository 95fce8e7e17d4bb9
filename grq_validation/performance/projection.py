"""
Hybrid 90-day projection.

Before the validation window closes, the eventual return is estimated by a
strategy chosen on elapsed days.  Early trend samples are noisy, so early
projections dampen the fitted slope heavily; late in the window the realized
trajectory and the distance still left to the target dominate.

Buckets (half-open, on elapsed days)
------------------------------------
EarlyStageStrategy   [0, 30)
    R² > 0.1      → dampened_trend: slope × 0.3 × 90,
                    confidence = min(R² × 0.7, 0.8)
    otherwise     → target_based: current + 10% of the gap to target if
                    positive, else current × 0.5; capped at the target;
                    confidence 0.3

MidStageStrategy     [30, 60)
    R² > 0.05     → dampened_trend: slope × 0.5 × 90,
                    confidence = min(R² × 0.8, 0.9)
    otherwise     → target_based with 15% of the gap / current × 0.6;
                    confidence 0.5

LateStageStrategy    [60, ∞)
    realistic_trajectory, with trajectory = current / days × 90 and
    required = (target − current) / (90 − days):
      required > 2%/day    → max(min(trajectory, target × 0.6), current × 1.2), 0.7
      current > target     → trajectory, 0.7
      otherwise            → min(trajectory, target × 0.8), 0.6
    no target              → mean_reversion: current × (1 − 0.4), 0.3

Every projection is clamped to [-100, 200] and every confidence to [0, 1].
All constants come from ``ProjectionConfig``; they are policy and must stay
fixed for past judgements to remain reproducible.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta

from grq_validation.config import ProjectionConfig
from grq_validation.models.results import (
    HybridProjection,
    ProjectionMethod,
    ProjectionPoint,
    TrendLine,
)
from grq_validation.utils.time_utils import DEFAULT_HORIZON_DAYS, weekly_offsets

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionInputs:
    """Everything a strategy may look at.

    Attributes:
        current_performance: Realized total return (%) to date.
        days_elapsed:        Days from score date to the latest market date.
        target_pct:          Target return (%), or ``None`` if unknown.
        trend_line:          Fitted trend, or ``None`` if too few samples.
    """

    current_performance: float
    days_elapsed: int
    target_pct: float | None
    trend_line: TrendLine | None


@dataclass(frozen=True)
class Estimate:
    """Unclamped strategy output."""

    value: float
    method: ProjectionMethod
    confidence: float
    dampened_slope: float | None = None


class _DampenedTrendStrategy:
    """Shared logic of the early and mid buckets.

    Uses the trend line when its fit clears ``r_squared_min``; otherwise nudges
    the current return a fraction of the way toward the target (or back
    toward zero when under water).
    """

    name = "dampened_trend"

    def __init__(
        self,
        r_squared_min: float,
        dampening: float,
        confidence_weight: float,
        confidence_cap: float,
        gap_fraction: float,
        loss_retention: float,
        fallback_confidence: float,
        no_target_value: float,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ) -> None:
        self.r_squared_min = r_squared_min
        self.dampening = dampening
        self.confidence_weight = confidence_weight
        self.confidence_cap = confidence_cap
        self.gap_fraction = gap_fraction
        self.loss_retention = loss_retention
        self.fallback_confidence = fallback_confidence
        self.no_target_value = no_target_value
        self.horizon_days = horizon_days

    def project(self, inputs: ProjectionInputs) -> Estimate:
        trend = inputs.trend_line
        if trend is not None and trend.r_squared > self.r_squared_min:
            dampened_slope = trend.slope * self.dampening
            return Estimate(
                value=max(dampened_slope * self.horizon_days, -100.0),
                method=ProjectionMethod.DAMPENED_TREND,
                confidence=min(trend.r_squared * self.confidence_weight, self.confidence_cap),
                dampened_slope=dampened_slope,
            )
        return self._target_based(inputs)

    def _target_based(self, inputs: ProjectionInputs) -> Estimate:
        current = inputs.current_performance
        target = inputs.target_pct
        if target is None:
            value = self.no_target_value
        else:
            if current > 0:
                value = current + (target - current) * self.gap_fraction
            else:
                value = current * self.loss_retention
            value = max(min(value, target), -100.0)
        return Estimate(
            value=value,
            method=ProjectionMethod.TARGET_BASED,
            confidence=self.fallback_confidence,
        )


class EarlyStageStrategy(_DampenedTrendStrategy):
    """First bucket: trend trusted only weakly, heavy dampening."""

    name = "early_stage"

    def __init__(self, policy: ProjectionConfig, horizon_days: int = DEFAULT_HORIZON_DAYS) -> None:
        super().__init__(
            r_squared_min=policy.early_r_squared_min,
            dampening=policy.early_dampening,
            confidence_weight=policy.early_confidence_weight,
            confidence_cap=policy.early_confidence_cap,
            gap_fraction=policy.early_gap_fraction,
            loss_retention=policy.early_loss_retention,
            fallback_confidence=policy.early_fallback_confidence,
            no_target_value=policy.no_target_fallback_pct,
            horizon_days=horizon_days,
        )


class MidStageStrategy(_DampenedTrendStrategy):
    """Second bucket: lower fit threshold, lighter dampening."""

    name = "mid_stage"

    def __init__(self, policy: ProjectionConfig, horizon_days: int = DEFAULT_HORIZON_DAYS) -> None:
        super().__init__(
            r_squared_min=policy.mid_r_squared_min,
            dampening=policy.mid_dampening,
            confidence_weight=policy.mid_confidence_weight,
            confidence_cap=policy.mid_confidence_cap,
            gap_fraction=policy.mid_gap_fraction,
            loss_retention=policy.mid_loss_retention,
            fallback_confidence=policy.mid_fallback_confidence,
            no_target_value=policy.no_target_fallback_pct,
            horizon_days=horizon_days,
        )


class LateStageStrategy:
    """Final bucket: realized trajectory checked against what the target still needs."""

    name = "late_stage"

    def __init__(self, policy: ProjectionConfig, horizon_days: int = DEFAULT_HORIZON_DAYS) -> None:
        self.policy = policy
        self.horizon_days = horizon_days

    def project(self, inputs: ProjectionInputs) -> Estimate:
        p = self.policy
        current = inputs.current_performance
        target = inputs.target_pct

        if target is None:
            return Estimate(
                value=current * (1 - p.mean_reversion_rate),
                method=ProjectionMethod.MEAN_REVERSION,
                confidence=p.mean_reversion_confidence,
            )

        days = inputs.days_elapsed
        trajectory = current / days * self.horizon_days if days > 0 else current
        remaining_days = self.horizon_days - days
        gap = target - current
        if remaining_days > 0:
            required_daily_rate = gap / remaining_days
        else:
            # No days left: any shortfall is unreachable.
            required_daily_rate = math.inf if gap > 0 else 0.0

        if required_daily_rate > p.unrealistic_daily_rate_pct:
            value = max(
                min(trajectory, target * p.missed_target_cap_ratio),
                current * p.missed_target_floor_growth,
            )
            confidence = p.missed_target_confidence
        elif current > target:
            value = trajectory
            confidence = p.above_target_confidence
        else:
            value = min(trajectory, target * p.conservative_target_ratio)
            confidence = p.conservative_confidence

        return Estimate(
            value=value,
            method=ProjectionMethod.REALISTIC_TRAJECTORY,
            confidence=confidence,
        )


ProjectionStrategy = EarlyStageStrategy | MidStageStrategy | LateStageStrategy


class HybridProjector:
    """Select a bucket strategy on elapsed days and bound its output.

    Example::

        projector = HybridProjector()
        proj = projector.project(
            current_performance=4.2, days_elapsed=21, target_pct=23.75, trend_line=trend,
        )
        proj.method, proj.projected_return_pct, proj.confidence
    """

    def __init__(
        self,
        policy: ProjectionConfig | None = None,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ) -> None:
        self.policy = policy or ProjectionConfig()
        self.horizon_days = horizon_days
        self._early = EarlyStageStrategy(self.policy, horizon_days)
        self._mid = MidStageStrategy(self.policy, horizon_days)
        self._late = LateStageStrategy(self.policy, horizon_days)

    def strategy_for(self, days_elapsed: int) -> ProjectionStrategy:
        if days_elapsed < self.policy.early_stage_end_days:
            return self._early
        if days_elapsed < self.policy.mid_stage_end_days:
            return self._mid
        return self._late

    def project(
        self,
        current_performance: float | None,
        days_elapsed: int,
        target_pct: float | None,
        trend_line: TrendLine | None,
    ) -> HybridProjection | None:
        """Project the return at the end of the window.

        Returns:
            ``HybridProjection`` or ``None`` when current performance is unknown.
        """
        if current_performance is None:
            return None

        strategy = self.strategy_for(days_elapsed)
        estimate = strategy.project(ProjectionInputs(
            current_performance=current_performance,
            days_elapsed=days_elapsed,
            target_pct=target_pct,
            trend_line=trend_line,
        ))

        projected = self._clamp(estimate.value)
        confidence = min(max(estimate.confidence, 0.0), 1.0)

        log.debug(
            "Projection | strategy=%s | method=%s | days=%d | current=%.2f | projected=%.2f | confidence=%.2f",
            strategy.name, estimate.method.value, days_elapsed,
            current_performance, projected, confidence,
        )
        return HybridProjection(
            projected_return_pct=projected,
            method=estimate.method,
            confidence=confidence,
            days_elapsed=days_elapsed,
            current_performance=current_performance,
            target_pct=target_pct,
            dampened_slope=estimate.dampened_slope,
        )

    def projection_path(
        self,
        projection: HybridProjection,
        score_date: date,
        step_days: int = 7,
    ) -> list[ProjectionPoint]:
        """Weekly points of the projection curve from day 0 to the horizon.

        - dampened_trend: the dampened line itself.
        - realistic_trajectory: realized rate up to today, then a straight
          ramp to the projection.
        - target_based / mean_reversion: straight ramp from 0 to the projection.

        The final point always sits exactly on the horizon day.
        """
        horizon = self.horizon_days
        final = projection.projected_return_pct
        days = projection.days_elapsed
        path: list[ProjectionPoint] = []

        for day in weekly_offsets(horizon, step_days):
            if projection.method is ProjectionMethod.DAMPENED_TREND and projection.dampened_slope is not None:
                value = max(projection.dampened_slope * day, -100.0)
            elif projection.method is ProjectionMethod.REALISTIC_TRAJECTORY and days > 0:
                if day == horizon:
                    value = final
                elif day <= days:
                    value = projection.current_performance / days * day
                else:
                    value = final * day / horizon
            else:
                value = final * min(day / horizon, 1.0)

            path.append(ProjectionPoint(
                day=day,
                date=score_date + timedelta(days=day),
                projected_return_pct=self._clamp(value),
            ))
        return path

    def _clamp(self, value: float) -> float:
        return max(min(value, self.policy.max_projection_pct), self.policy.min_projection_pct)
