"""
Outcome classification.

Final (90 days elapsed), on realized performance against 80% of target:
    >= threshold → Hit Target;  > 0 → Partial Success;  else Missed Target

Interim (< 90 days) with a projection whose confidence > 0.2, on the
projected value with the same comparison:
    On Track / Below Target / Declining

Interim with no usable projection, on realized performance:
    < early stage end → Early Days (30 days by default)
    otherwise         → On Track / Below Target / Declining

A missing target falls back to 20%.  Missing performance → Pending.
"""

from __future__ import annotations

from grq_validation.config import JudgementConfig, ProjectionConfig
from grq_validation.models.results import (
    HybridProjection,
    Judgement,
    JudgementBasis,
    Outcome,
)
from grq_validation.utils.time_utils import DEFAULT_HORIZON_DAYS

DEFAULT_TARGET_PCT = 20.0
# Early Days ends where the early projection stage does.
DEFAULT_EARLY_DAYS_END: int = ProjectionConfig.model_fields["early_stage_end_days"].default


def _tier(value: float, threshold: float) -> int:
    """0 = at/above threshold, 1 = positive, 2 = flat or negative."""
    if value >= threshold:
        return 0
    if value > 0:
        return 1
    return 2


_FINAL = (Outcome.HIT_TARGET, Outcome.PARTIAL_SUCCESS, Outcome.MISSED_TARGET)
_INTERIM = (Outcome.ON_TRACK, Outcome.BELOW_TARGET, Outcome.DECLINING)


def classify(
    days_elapsed: int,
    performance: float | None,
    target_pct: float | None,
    projection: HybridProjection | None = None,
    config: JudgementConfig | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    default_target_pct: float = DEFAULT_TARGET_PCT,
    early_days_end: int = DEFAULT_EARLY_DAYS_END,
) -> Judgement:
    """Map performance, target, and projection to a ``Judgement``.

    Args:
        days_elapsed:  Days from score date to the latest market date.
        performance:   Realized total return (%), or ``None``.
        target_pct:    Target return (%), or ``None`` (→ ``default_target_pct``).
        projection:    Hybrid projection, if one could be made.
        config:        Threshold ratio and minimum projection confidence.
        horizon_days:  Window length; at or beyond it the judgement is final.
        default_target_pct: Target used when ``target_pct`` is ``None``.
        early_days_end: Without a usable projection, fewer days than this
            → Early Days (``ProjectionConfig.early_stage_end_days``).

    Returns:
        ``Judgement`` with outcome, the value it was derived from, and its basis.
    """
    cfg = config or JudgementConfig()
    if performance is None:
        return Judgement(outcome=Outcome.PENDING)

    target = target_pct if target_pct is not None else default_target_pct
    threshold = target * cfg.hit_threshold_ratio

    if days_elapsed >= horizon_days:
        return Judgement(
            outcome=_FINAL[_tier(performance, threshold)],
            value=performance,
            basis=JudgementBasis.REALIZED,
        )

    if projection is not None and projection.confidence > cfg.min_projection_confidence:
        predicted = projection.projected_return_pct
        return Judgement(
            outcome=_INTERIM[_tier(predicted, threshold)],
            value=predicted,
            basis=JudgementBasis.PROJECTED,
        )

    if days_elapsed < early_days_end:
        return Judgement(
            outcome=Outcome.EARLY_DAYS,
            value=performance,
            basis=JudgementBasis.REALIZED,
        )
    return Judgement(
        outcome=_INTERIM[_tier(performance, threshold)],
        value=performance,
        basis=JudgementBasis.REALIZED,
    )
