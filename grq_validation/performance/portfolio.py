"""
Equal-weight portfolio aggregation.

The portfolio holds every instrument of a score batch in equal weight; there
is no dollar weighting.  On each date the portfolio return is the arithmetic
mean of the cumulative returns of the instruments that can be measured that
day:

  - the instrument has a resolved buy price, and
  - it has a bar on that date, or the date is the score date itself
    (where every instrument contributes exactly 0%).

Instruments without a buy price are excluded and the divisor shrinks
accordingly, so one missing instrument never blanks the whole portfolio.

Buy prices are passed in already resolved (one per instrument) rather than
re-resolved per date.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date

from grq_validation.models.batch import ScoreBatch
from grq_validation.models.market import MarketPoint
from grq_validation.models.results import BuyPriceResolution, PortfolioPoint, TrendLine
from grq_validation.performance.returns import target_percentage, total_return_at
from grq_validation.performance.trend import MIN_TREND_POINTS, fit_zero_intercept
from grq_validation.utils.time_utils import DEFAULT_HORIZON_DAYS, days_since, horizon_end

DEFAULT_PORTFOLIO_TARGET_PCT = 20.0


def _unique_instruments(batch: ScoreBatch) -> list[str]:
    return list(dict.fromkeys(batch.instruments))


def portfolio_series(
    batch: ScoreBatch,
    buys: Mapping[str, BuyPriceResolution | None],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[PortfolioPoint]:
    """Mean cumulative return on every date any instrument traded.

    Dates run from the score date to the end of the window.  Dates where no
    instrument can be measured are omitted.

    Args:
        batch:        Score batch with market and dividend data.
        buys:         Instrument → resolved buy price (``None`` = excluded).
        horizon_days: Window length.

    Returns:
        Ascending ``PortfolioPoint`` list.
    """
    score_date = batch.score_date
    end = horizon_end(score_date, horizon_days)
    instruments = _unique_instruments(batch)

    by_instrument: dict[str, dict[date, MarketPoint]] = {}
    all_dates: set[date] = {score_date}
    for inst in instruments:
        lookup = {p.trade_date: p for p in batch.points_for(inst)}
        by_instrument[inst] = lookup
        all_dates.update(d for d in lookup if score_date <= d <= end)

    series: list[PortfolioPoint] = []
    for day in sorted(all_dates):
        total = 0.0
        n_valid = 0
        for inst in instruments:
            buy = buys.get(inst)
            if buy is None or buy.price <= 0:
                continue
            point = by_instrument[inst].get(day)
            if point is not None:
                total += total_return_at(
                    point,
                    batch.points_for(inst),
                    batch.dividends_for(inst),
                    buy.price,
                    day,
                )
                n_valid += 1
            elif day == score_date:
                n_valid += 1

        if n_valid == 0:
            continue

        series.append(PortfolioPoint(
            date=day,
            mean_return_pct=total / n_valid,
            n_instruments=n_valid,
            dividends_on_date=_dividend_markers(batch, instruments, day),
        ))
    return series


def _dividend_markers(batch: ScoreBatch, instruments: Sequence[str], day: date) -> tuple[str, ...]:
    return tuple(
        f"{inst}: ${d.amount:.2f}"
        for inst in instruments
        for d in batch.dividends_for(inst)
        if d.ex_dividend_date == day
    )


def portfolio_target(
    batch: ScoreBatch,
    buys: Mapping[str, BuyPriceResolution | None],
    default: float = DEFAULT_PORTFOLIO_TARGET_PCT,
) -> float:
    """Mean of the resolvable per-instrument target returns (%).

    Falls back to ``default`` when no instrument has a buy price.
    """
    targets: list[float] = []
    for entry in batch.entries:
        pct = target_percentage(
            entry.target_price,
            batch.points_for(entry.instrument),
            buys.get(entry.instrument),
            batch.score_date,
        )
        if pct is not None:
            targets.append(pct)
    return sum(targets) / len(targets) if targets else default


def portfolio_performance(performances: Sequence[float | None]) -> float | None:
    """Mean of the available per-instrument returns; ``None`` if none are."""
    valid = [p for p in performances if p is not None]
    return sum(valid) / len(valid) if valid else None


def portfolio_days_elapsed(
    batch: ScoreBatch,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> int:
    """Days from the score date to the latest bar of any instrument, capped at the window.

    0 when no instrument has data after the score date.
    """
    latest = batch.score_date
    for inst in _unique_instruments(batch):
        points = batch.points_for(inst)
        if points and points[-1].trade_date > latest:
            latest = points[-1].trade_date
    return min(days_since(batch.score_date, latest), horizon_days)


def portfolio_trend_line(
    series: Sequence[PortfolioPoint],
    score_date: date,
    min_points: int = MIN_TREND_POINTS,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> TrendLine | None:
    """Zero-intercept trend over the portfolio series."""
    samples = [
        (float(days_since(score_date, p.date)), p.mean_return_pct)
        for p in series
        if p.date >= score_date
    ]
    return fit_zero_intercept(samples, min_points, horizon_days)
