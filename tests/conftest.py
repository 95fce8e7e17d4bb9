"""
Shared pytest fixtures for the GRQ Validation test suite.

Provides:
  - ``score_date``: The reference score date used across modules
    (Friday 2025-02-14; the first trading day after it is Tuesday 2025-02-18).
  - ``make_point`` / ``make_dividend``: Factories for market input models.
  - ``sample_batch``: A three-instrument batch with one instrument lacking
    market data entirely.
  - ``config_file``: A minimal TOML config written to a temp dir.
"""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import Callable

import pytest

from grq_validation.models.batch import ScoreBatch
from grq_validation.models.market import DividendRecord, MarketPoint
from grq_validation.models.score import ScoreEntry


SCORE_DATE = date(2025, 2, 14)


@pytest.fixture
def score_date() -> date:
    return SCORE_DATE


# ── Model factories ───────────────────────────────────────────────────────────

@pytest.fixture
def make_point() -> Callable[..., MarketPoint]:
    """Return a factory building a bar whose midpoint is exactly ``mid``."""

    def _make(
        trade_date: date,
        mid: float,
        instrument: str = "AAPL",
        split: float = 1.0,
        spread: float = 0.0,
    ) -> MarketPoint:
        return MarketPoint(
            instrument=instrument,
            trade_date=trade_date,
            open=mid,
            high=mid + spread,
            low=mid - spread,
            close=mid,
            split_coefficient=split,
        )

    return _make


@pytest.fixture
def make_dividend() -> Callable[..., DividendRecord]:
    def _make(ex_date: date, amount: float, instrument: str = "AAPL") -> DividendRecord:
        return DividendRecord(instrument=instrument, ex_dividend_date=ex_date, amount=amount)

    return _make


# ── Batches ───────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_batch(make_point, make_dividend) -> ScoreBatch:
    """Three entries scored on 2025-02-14.

    - AAPL: first bar 2025-02-18 (15.18 / 14.72 → buy 14.95), target 18.50,
      steady climb to 16.45 by day 25, one 0.25 dividend.
    - MSFT: bar on the score date at 100, target 120 (20%), up to 105.
    - ZZZZ: no market data at all.
    """
    aapl = [
        MarketPoint(
            instrument="AAPL",
            trade_date=date(2025, 2, 18),
            open=14.80, high=15.18, low=14.72, close=15.05,
        ),
    ]
    aapl += [
        make_point(SCORE_DATE + timedelta(days=d), 14.95 + 0.06 * d, "AAPL")
        for d in range(5, 26)
    ]
    msft = [
        make_point(SCORE_DATE + timedelta(days=d), 100.0 + 0.2 * d, "MSFT")
        for d in range(0, 26)
    ]
    return ScoreBatch(
        score_date=SCORE_DATE,
        entries=(
            ScoreEntry(instrument="AAPL", score=0.82, target_price=18.50),
            ScoreEntry(instrument="MSFT", score=0.64, target_price=120.0),
            ScoreEntry(instrument="ZZZZ", score=0.51, target_price=40.0),
        ),
        market_data={"AAPL": tuple(aapl), "MSFT": tuple(msft)},
        dividends={"AAPL": (make_dividend(date(2025, 3, 3), 0.25, "AAPL"),)},
    )


# ── Config ────────────────────────────────────────────────────────────────────

@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a minimal valid config TOML and return its path."""
    path = tmp_path / "config" / "test.toml"
    path.parent.mkdir(parents=True)
    path.write_text(
        "[validation]\n"
        "horizon_days = 90\n"
        "cost_of_capital = 0.10\n"
        "\n"
        "[logging]\n"
        'level = "WARNING"\n',
        encoding="utf-8",
    )
    return path
