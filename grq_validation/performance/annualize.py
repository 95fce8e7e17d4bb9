"""
Annualization and the cost-of-capital benchmark.

Annualized return compounds the period return over the days that actually
elapsed::

    annualized = ((1 + p / 100) ** (365.25 / days) - 1) * 100

A fixed 90-day divisor would understate early-window rates badly: +2% in
5 days is a very different pace from +2% in 90.

The cost-of-capital benchmark is simple (not compounded) accrual of the
annual rate, capped at the 90-day window::

    benchmark = rate / 365 * min(days, 90) * 100
"""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable
from datetime import date

from grq_validation.models.results import ReturnPoint
from grq_validation.utils.time_utils import DEFAULT_HORIZON_DAYS, days_since

DAYS_PER_YEAR = 365.25
DEFAULT_COST_OF_CAPITAL = 0.10
# largest log-growth whose annualized percentage still fits in a float
MAX_LOG_GROWTH = math.log(sys.float_info.max / 100)


def annualize(performance_pct: float, days_elapsed: float) -> float | None:
    """Compound a period return to an annual rate.

    Returns 0.0 for zero performance or non-positive ``days_elapsed``, and
    -100.0 when the period lost everything (a fractional power of a
    non-positive base has no real value).  Returns ``None`` when the
    compounded rate does not fit in a float (e.g. +700% in one day).

    The power is taken in log space so very large growth over a handful of
    days cannot raise ``OverflowError``.
    """
    if performance_pct == 0 or days_elapsed <= 0:
        return 0.0
    growth = 1 + performance_pct / 100
    if growth <= 0:
        return -100.0
    exponent = math.log(growth) * (DAYS_PER_YEAR / days_elapsed)
    if exponent > MAX_LOG_GROWTH:
        return None
    return math.expm1(exponent) * 100


def cost_of_capital_return(
    days_elapsed: float,
    annual_rate: float = DEFAULT_COST_OF_CAPITAL,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> float:
    """Benchmark return (%) accrued over ``days_elapsed``, capped at the horizon."""
    capped = min(max(days_elapsed, 0), horizon_days)
    return annual_rate / 365 * capped * 100


def excess_return(
    performance_pct: float | None,
    days_elapsed: float,
    annual_rate: float = DEFAULT_COST_OF_CAPITAL,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> float | None:
    """Performance minus the cost-of-capital benchmark over the same days."""
    if performance_pct is None:
        return None
    return performance_pct - cost_of_capital_return(days_elapsed, annual_rate, horizon_days)


def cost_of_capital_series(
    dates: Iterable[date],
    score_date: date,
    annual_rate: float = DEFAULT_COST_OF_CAPITAL,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[ReturnPoint]:
    """Benchmark curve on each of ``dates`` (sorted, de-duplicated)."""
    return [
        ReturnPoint(
            date=d,
            cumulative_return_pct=cost_of_capital_return(
                days_since(score_date, d), annual_rate, horizon_days,
            ),
        )
        for d in sorted(set(dates))
    ]
