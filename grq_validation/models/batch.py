"""
Score batch — the immutable unit of evaluation.

A ``ScoreBatch`` bundles everything the engine needs for one score file:
the score date, its entries, and the market and dividend series for every
instrument.  It is loaded once and shared read-only by every instrument and
portfolio evaluation.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from grq_validation.models.market import DividendRecord, MarketPoint
from grq_validation.models.score import ScoreEntry
from grq_validation.utils.time_utils import to_calendar_date


class ScoreBatch(BaseModel):
    """One score file plus its market context.

    Market series are de-duplicated per ``trade_date`` (last record wins) and
    sorted ascending; dividend lists are sorted by ``ex_dividend_date``. Both
    happen on construction.  Instrument keys are upper-cased to
    match ``ScoreEntry.instrument``.

    Attributes:
        score_date: Date the recommendations were issued.
        entries: Score entries in file order.
        market_data: Instrument → ascending daily bars.
        dividends: Instrument → dividend events.
    """

    model_config = ConfigDict(frozen=True)

    score_date: date
    entries: tuple[ScoreEntry, ...] = ()
    market_data: dict[str, tuple[MarketPoint, ...]] = {}
    dividends: dict[str, tuple[DividendRecord, ...]] = {}

    @field_validator("score_date", mode="before")
    @classmethod
    def drop_time_component(cls, v: Any) -> date:
        return to_calendar_date(v)

    @field_validator("market_data")
    @classmethod
    def sort_market_data(
        cls, v: dict[str, tuple[MarketPoint, ...]]
    ) -> dict[str, tuple[MarketPoint, ...]]:
        series: dict[str, tuple[MarketPoint, ...]] = {}
        for key, points in v.items():
            # one bar per calendar date; a later record for the same date wins
            by_date = {p.trade_date: p for p in points}
            ordered = sorted(by_date.values(), key=lambda p: p.trade_date)
            series[key.strip().upper()] = tuple(ordered)
        return series

    @field_validator("dividends")
    @classmethod
    def sort_dividends(
        cls, v: dict[str, tuple[DividendRecord, ...]]
    ) -> dict[str, tuple[DividendRecord, ...]]:
        return {
            key.strip().upper(): tuple(sorted(divs, key=lambda d: d.ex_dividend_date))
            for key, divs in v.items()
        }

    @property
    def instruments(self) -> list[str]:
        """Instrument tickers in score-file order."""
        return [e.instrument for e in self.entries]

    def entry_for(self, instrument: str) -> ScoreEntry | None:
        key = instrument.strip().upper()
        for entry in self.entries:
            if entry.instrument == key:
                return entry
        return None

    def points_for(self, instrument: str) -> tuple[MarketPoint, ...]:
        """Market series for ``instrument``; empty when the provider had none."""
        return self.market_data.get(instrument.strip().upper(), ())

    def dividends_for(self, instrument: str) -> tuple[DividendRecord, ...]:
        return self.dividends.get(instrument.strip().upper(), ())
