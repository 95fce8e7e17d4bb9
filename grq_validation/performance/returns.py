"""
Total return calculations.

Total return = price return + dividend return, both relative to the resolved
buy price::

    price_return    = (adjusted_mid(as_of) - buy_price) / buy_price * 100
    dividend_return = dividends_up_to(as_of) / buy_price * 100

Everything is truncated at the end of the validation window: a bar or a
dividend after ``score_date + 90d`` never contributes.  Every function
returns ``None`` rather than dividing by a missing or non-positive buy price.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from grq_validation.models.market import DividendRecord, MarketPoint
from grq_validation.models.results import BuyPriceResolution, ReturnPoint
from grq_validation.performance.dividends import sum_dividends
from grq_validation.performance.splits import adjust_price
from grq_validation.utils.time_utils import DEFAULT_HORIZON_DAYS, horizon_end


def _valid_buy_price(buy: BuyPriceResolution | None) -> float | None:
    if buy is None or buy.price <= 0:
        return None
    return buy.price


def latest_point(points: Sequence[MarketPoint], cutoff: date) -> MarketPoint | None:
    """Last bar with ``trade_date <= cutoff`` in an ascending series."""
    for point in reversed(points):
        if point.trade_date <= cutoff:
            return point
    return None


def total_return_at(
    point: MarketPoint,
    points: Sequence[MarketPoint],
    dividends: Sequence[DividendRecord],
    buy_price: float,
    dividend_cutoff: date,
) -> float:
    """Cumulative total return (%) at ``point`` for a known positive buy price."""
    price = adjust_price(point.mid_price, points, point.trade_date)
    price_return = (price - buy_price) / buy_price * 100
    dividend_return = sum_dividends(dividends, dividend_cutoff) / buy_price * 100
    return price_return + dividend_return


def current_performance(
    points: Sequence[MarketPoint],
    dividends: Sequence[DividendRecord],
    buy: BuyPriceResolution | None,
    score_date: date,
    as_of: date | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> float | None:
    """Total return (%) as of ``as_of`` (default: latest data in the window).

    Prices the last bar on or before ``min(as_of, score_date + horizon)``
    and counts dividends up to that bar's date, so the value matches the
    last point of ``return_series`` and does not change when later
    dividends are dropped by an ``as_of`` replay.

    Returns:
        Percent return, or ``None`` without a usable buy price or a bar in range.
    """
    buy_price = _valid_buy_price(buy)
    if buy_price is None or not points:
        return None

    cutoff = horizon_end(score_date, horizon_days)
    if as_of is not None and as_of < cutoff:
        cutoff = as_of

    point = latest_point(points, cutoff)
    if point is None:
        return None
    return total_return_at(point, points, dividends, buy_price, point.trade_date)


def target_percentage(
    target_price: float,
    points: Sequence[MarketPoint],
    buy: BuyPriceResolution | None,
    score_date: date,
) -> float | None:
    """Return (%) implied by hitting the split-adjusted target price.

    Time-independent once the buy price is known.
    """
    buy_price = _valid_buy_price(buy)
    if buy_price is None:
        return None
    adjusted_target = adjust_price(target_price, points, score_date)
    return (adjusted_target - buy_price) / buy_price * 100


def return_series(
    points: Sequence[MarketPoint],
    dividends: Sequence[DividendRecord],
    buy: BuyPriceResolution | None,
    score_date: date,
    end_date: date | None = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[ReturnPoint]:
    """Cumulative return on every trading date in ``[score_date, end]``.

    ``end`` is ``min(end_date, score_date + horizon)``; ``end_date`` defaults
    to the last bar.  Each point counts dividends up to its own date.
    """
    buy_price = _valid_buy_price(buy)
    if buy_price is None or not points:
        return []

    end = horizon_end(score_date, horizon_days)
    if end_date is not None and end_date < end:
        end = end_date

    return [
        ReturnPoint(
            date=p.trade_date,
            cumulative_return_pct=total_return_at(p, points, dividends, buy_price, p.trade_date),
        )
        for p in points
        if score_date <= p.trade_date <= end
    ]
