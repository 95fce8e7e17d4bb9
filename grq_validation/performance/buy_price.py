"""
Buy price resolution.

The entry price for a recommendation is the session midpoint
``(high + low) / 2`` on the score date, split-adjusted to current share
terms.  Score files are often dated on weekends or market holidays, so the
resolver walks forward up to ``window_days`` calendar days and takes the
first trading date it finds.  Anything beyond that window is treated as a
genuine data gap rather than silently bridged.

The resolved price is computed once per (instrument, score date) and passed
down to every downstream calculation, so all metrics for an instrument share
exactly one entry price.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, timedelta

from grq_validation.models.market import MarketPoint
from grq_validation.models.results import BuyPriceResolution
from grq_validation.performance.splits import adjust_price

log = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 5


def resolve_buy_price(
    points: Sequence[MarketPoint],
    score_date: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> BuyPriceResolution | None:
    """Find the effective entry price at or after ``score_date``.

    Args:
        points:      Instrument market series (any order).
        score_date:  Date the recommendation was issued.
        window_days: Maximum forward offset in calendar days (inclusive).

    Returns:
        ``BuyPriceResolution`` for the first trading date in
        ``[score_date, score_date + window_days]``, or ``None`` when no bar
        falls inside the window or the resolved price is not positive.
    """
    if not points:
        return None

    by_date: dict[date, MarketPoint] = {p.trade_date: p for p in points}

    for offset in range(window_days + 1):
        candidate = score_date + timedelta(days=offset)
        match = by_date.get(candidate)
        if match is None:
            continue
        price = adjust_price(match.mid_price, points, score_date)
        if price <= 0:
            log.warning(
                "Non-positive buy price %.4f on %s for %s; treating as missing",
                price, candidate, match.instrument,
                extra={"instrument": match.instrument},
            )
            return None
        return BuyPriceResolution(price=price, date_used=candidate)

    log.debug(
        "No trading date within %d days of %s (first bar %s)",
        window_days, score_date, points[0].trade_date,
    )
    return None
