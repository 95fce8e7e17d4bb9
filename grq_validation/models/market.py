"""
Market input models — daily price points and dividend events.

Both models are frozen (immutable) after construction.  They are produced by
an external acquisition layer and consumed read-only by the evaluation
engine; nothing downstream ever mutates a point or a dividend.

Timestamps are normalized to calendar dates on construction: a provider that
stamps bars at market close still matches the plain score date.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from grq_validation.utils.time_utils import to_calendar_date


class MarketPoint(BaseModel):
    """One daily OHLC bar for an instrument.

    Prices are as-traded on ``trade_date`` (not back-adjusted).  The
    ``split_coefficient`` records a split that took effect that day; 1.0
    means no corporate action.

    Attributes:
        instrument: Ticker symbol.
        trade_date: Calendar date of the bar.
        open: Opening price.
        high: Session high.
        low: Session low.
        close: Closing price.
        split_coefficient: Split ratio applied on this date (2.0 = 2-for-1).
    """

    model_config = ConfigDict(frozen=True)

    instrument: str
    trade_date: date
    open: float
    high: float
    low: float
    close: float
    split_coefficient: float = 1.0

    @field_validator("instrument")
    @classmethod
    def validate_instrument(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("trade_date", mode="before")
    @classmethod
    def drop_time_component(cls, v: Any) -> date:
        return to_calendar_date(v)

    @field_validator("open", "high", "low", "close")
    @classmethod
    def validate_price_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Prices must be non-negative.")
        return v

    @field_validator("split_coefficient")
    @classmethod
    def validate_split_coefficient(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"split_coefficient must be positive, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_range(self) -> "MarketPoint":
        if self.low > self.high:
            raise ValueError(f"low ({self.low}) must not exceed high ({self.high}).")
        return self

    @property
    def mid_price(self) -> float:
        """Midpoint of the session range, the price used for entries and marks."""
        return (self.high + self.low) / 2


class DividendRecord(BaseModel):
    """A cash dividend paid per share.

    Attributes:
        instrument: Ticker symbol.
        ex_dividend_date: Ex-dividend date; holders before this date receive it.
        amount: Cash paid per share.
    """

    model_config = ConfigDict(frozen=True)

    instrument: str
    ex_dividend_date: date
    amount: float

    @field_validator("instrument")
    @classmethod
    def validate_instrument(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("ex_dividend_date", mode="before")
    @classmethod
    def drop_time_component(cls, v: Any) -> date:
        return to_calendar_date(v)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Dividend amount must be non-negative.")
        return v
