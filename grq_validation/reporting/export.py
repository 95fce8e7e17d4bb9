"""
Export helpers for evaluation results.

All functions that write to disk return the written ``Path``.

The JSON report is the full nested ``PortfolioMetrics.to_dict()`` payload
(series, projection path, and per-instrument rows).  The CSV export is
flat, one row per instrument, so it loads directly in a spreadsheet
without any unpivoting.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

from grq_validation.models.results import InstrumentMetrics, PortfolioMetrics

INSTRUMENT_CSV_COLUMNS = [
    "instrument", "score", "target_price", "buy_price", "buy_date",
    "current_price", "adjusted_target_price", "target_pct",
    "current_performance", "dividend_total", "dividend_count",
    "next_ex_dividend", "days_elapsed", "trend_slope", "trend_r_squared",
    "projected_return_pct", "projection_method", "projection_confidence",
    "judgement", "annualized_pct", "excess_return_pct", "unavailable_reason",
]


def export_to_json(data: dict | list, path: Path) -> Path:
    """Write ``data`` to a pretty-printed JSON file (parent dirs created)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def export_to_csv(records: list[dict], path: Path, fieldnames: list[str] | None = None) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def flatten_instrument(m: InstrumentMetrics) -> dict:
    """One flat CSV row for an instrument (empty string for missing values)."""
    def blank(v):
        return "" if v is None else v

    return {
        "instrument":            m.instrument,
        "score":                 m.score,
        "target_price":          m.target_price,
        "buy_price":             blank(m.buy_price),
        "buy_date":              m.buy.date_used.isoformat() if m.buy is not None else "",
        "current_price":         blank(m.current_price),
        "adjusted_target_price": blank(m.adjusted_target_price),
        "target_pct":            blank(m.target_pct),
        "current_performance":   blank(m.current_performance),
        "dividend_total":        m.dividend_total,
        "dividend_count":        m.dividend_count,
        "next_ex_dividend":      m.next_ex_dividend.isoformat() if m.next_ex_dividend else "",
        "days_elapsed":          m.days_elapsed,
        "trend_slope":           m.trend_line.slope if m.trend_line else "",
        "trend_r_squared":       m.trend_line.r_squared if m.trend_line else "",
        "projected_return_pct":  m.projection.projected_return_pct if m.projection else "",
        "projection_method":     m.projection.method.value if m.projection else "",
        "projection_confidence": m.projection.confidence if m.projection else "",
        "judgement":             m.judgement.label,
        "annualized_pct":        blank(m.annualized_pct),
        "excess_return_pct":     blank(m.excess_return_pct),
        "unavailable_reason":    m.unavailable_reason.value if m.unavailable_reason else "",
    }


def write_report(portfolio: PortfolioMetrics, path: Path) -> Path:
    """Write the evaluation to ``path``; ``.csv`` gives the flat table, anything else JSON."""
    if path.suffix.lower() == ".csv":
        rows = [flatten_instrument(m) for m in portfolio.instruments]
        return export_to_csv(rows, path, INSTRUMENT_CSV_COLUMNS)
    return export_to_json(portfolio.to_dict(), path)
