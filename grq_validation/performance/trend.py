"""
Trend line estimation.

Fits ``return = slope * days_since_score`` by least squares with the
intercept fixed at zero: performance is exactly 0% on the score date by
definition, so the line is anchored there instead of floating to wherever
the early noise puts it.

    slope = Σ(x·y) / Σ(x²)
    R²    = 1 - SS_res / SS_tot        (SS_res against the zero-intercept line)

R² is measured against the anchored line, so it can go negative when the
series moves away from zero in a way the origin-anchored line cannot follow.
Callers compare it to a small positive threshold, which treats such fits as
unusable.

The fit window ends at the instrument's latest *market* date, never at the
wall clock: a run on a weekend would otherwise stretch x without adding y.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

import numpy as np

from grq_validation.models.market import DividendRecord, MarketPoint
from grq_validation.models.results import BuyPriceResolution, TrendLine
from grq_validation.performance.returns import return_series
from grq_validation.utils.time_utils import DEFAULT_HORIZON_DAYS, days_since

log = logging.getLogger(__name__)

MIN_TREND_POINTS = 3


def fit_zero_intercept(
    samples: Sequence[tuple[float, float]],
    min_points: int = MIN_TREND_POINTS,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> TrendLine | None:
    """Least-squares line through the origin.

    Args:
        samples:    ``(days_since_score, cumulative_return_pct)`` pairs.
        min_points: Fewer samples than this → ``None``.
        horizon_days: Stored on the line for ``predicted_90_day``.

    Returns:
        ``TrendLine`` or ``None`` when there are too few samples or every
        sample sits on day 0 (Σx² = 0).
    """
    if len(samples) < min_points:
        return None

    x = np.asarray([s[0] for s in samples], dtype=np.float64)
    y = np.asarray([s[1] for s in samples], dtype=np.float64)

    sum_xx = float(np.dot(x, x))
    if sum_xx == 0.0:
        return None

    slope = float(np.dot(x, y) / sum_xx)

    residuals = y - slope * x
    ss_res = float(np.dot(residuals, residuals))
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return TrendLine(
        slope=slope,
        r_squared=r_squared,
        points=tuple((float(a), float(b)) for a, b in samples),
        horizon_days=horizon_days,
    )


def fit_trend_line(
    points: Sequence[MarketPoint],
    dividends: Sequence[DividendRecord],
    buy: BuyPriceResolution | None,
    score_date: date,
    end_date: date | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    min_points: int = MIN_TREND_POINTS,
) -> TrendLine | None:
    """Fit the instrument's cumulative return against days since the score date.

    Args:
        points:     Ascending market series.
        dividends:  Dividend events for the instrument.
        buy:        Resolved buy price (``None`` → no fit).
        score_date: Day 0 of the line.
        end_date:   Last sample date; defaults to the latest bar in ``points``.
        horizon_days: Samples never extend past ``score_date + horizon_days``.
        min_points: Minimum samples for a fit.

    Returns:
        ``TrendLine`` or ``None`` (insufficient data is an expected state
        early in the window, not an error).
    """
    if not points or buy is None:
        return None

    end = end_date if end_date is not None else points[-1].trade_date
    series = return_series(points, dividends, buy, score_date, end, horizon_days)
    samples = [
        (float(days_since(score_date, rp.date)), rp.cumulative_return_pct)
        for rp in series
    ]

    trend = fit_zero_intercept(samples, min_points, horizon_days)
    if trend is None:
        log.debug(
            "Trend line unavailable | score_date=%s | samples=%d",
            score_date, len(samples),
        )
    return trend
