"""
Dividend accumulation within the validation window.

Only dividends with an ex-date on or before ``score_date + 90d`` ever count
toward a recommendation's return.  Dividends before the score date are not
excluded here: the acquisition layer only supplies dividends from the score
date onward.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from grq_validation.models.market import DividendRecord
from grq_validation.utils.time_utils import DEFAULT_HORIZON_DAYS, horizon_end


def dividends_within_horizon(
    dividends: Sequence[DividendRecord],
    score_date: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[DividendRecord]:
    """Dividends whose ex-date is on or before the end of the window."""
    cutoff = horizon_end(score_date, horizon_days)
    return [d for d in dividends if d.ex_dividend_date <= cutoff]


def sum_dividends(dividends: Sequence[DividendRecord], cutoff: date) -> float:
    """Total cash per share with ex-date on or before ``cutoff``.

    Monotone non-decreasing in ``cutoff``.  No records → 0.0.
    """
    return sum((d.amount for d in dividends if d.ex_dividend_date <= cutoff), 0.0)


def next_ex_dividend_date(
    dividends: Sequence[DividendRecord],
    score_date: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> date | None:
    """Earliest ex-date strictly after ``score_date`` and inside the window."""
    cutoff = horizon_end(score_date, horizon_days)
    upcoming = [
        d.ex_dividend_date for d in dividends
        if score_date < d.ex_dividend_date <= cutoff
    ]
    return min(upcoming) if upcoming else None
