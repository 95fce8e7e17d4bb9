"""
Score entry model — one AI recommendation from a score-file batch.

A score file is issued on a single score date and lists, per instrument, a
conviction score and a 90-day target price.  Parsing the source TSV is done
upstream; this model is the validated, immutable record handed to the
evaluation engine.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ScoreEntry(BaseModel):
    """A single instrument recommendation.

    Attributes:
        instrument: Ticker symbol, e.g. ``"AAPL"``.  Upper-cased on construction.
        score: Model conviction in ``[0, 1]``.
        target_price: 90-day target price in score-date share terms.
        ex_dividend_hint: Ex-dividend date the score file expected, if any.
        intrinsic_value_basic: Basic intrinsic value per share, if estimated.
        intrinsic_value_adjusted: Adjusted intrinsic value per share, if estimated.
        note: Free-text commentary from the score file.
    """

    model_config = ConfigDict(frozen=True)

    instrument: str
    score: float
    target_price: float
    ex_dividend_hint: Optional[date] = None
    intrinsic_value_basic: Optional[float] = None
    intrinsic_value_adjusted: Optional[float] = None
    note: str = ""

    @field_validator("instrument")
    @classmethod
    def validate_instrument(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("instrument must be a non-empty ticker symbol.")
        return v

    @field_validator("score")
    @classmethod
    def validate_score(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"score must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("target_price")
    @classmethod
    def validate_target_price(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"target_price must be positive, got {v}.")
        return v

    @field_validator("intrinsic_value_basic", "intrinsic_value_adjusted")
    @classmethod
    def validate_intrinsic_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("Intrinsic value estimates must be non-negative.")
        return v
