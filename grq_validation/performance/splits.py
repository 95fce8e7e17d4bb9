"""
Split adjustment: express a historical price in current share-count terms.

A target price issued before a 2-for-1 split is worth half as much per
post-split share.  Market bars carry the split coefficient on the day the
split took effect, so the multiplier for a historical date is the product of
every coefficient above 1.0 recorded strictly after that date.

Reverse splits (coefficient < 1.0) are ignored, matching the provider's
convention of only reporting forward splits reliably.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from grq_validation.models.market import MarketPoint


def split_multiplier(points: Sequence[MarketPoint], historical_date: date) -> float:
    """Cumulative forward-split factor for splits after ``historical_date``.

    Returns 1.0 when there is no market data or no qualifying split.
    """
    multiplier = 1.0
    for point in points:
        if point.trade_date > historical_date and point.split_coefficient > 1.0:
            multiplier *= point.split_coefficient
    return multiplier


def adjust_price(price: float, points: Sequence[MarketPoint], historical_date: date) -> float:
    """Convert ``price`` quoted on ``historical_date`` to current share terms.

    Example::

        # 2-for-1 split after the score date
        adjust_price(29.90, points, date(2025, 2, 14))  # -> 14.95
    """
    return price / split_multiplier(points, historical_date)
