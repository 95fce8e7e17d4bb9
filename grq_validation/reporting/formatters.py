"""
ASCII terminal formatters for the ``evaluate`` command.

All formatters accept result objects and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Missing metrics
---------------
A metric that could not be computed prints as ``n/a``; a measured zero
prints as ``+0.0%``.  The two are never conflated.
"""

from __future__ import annotations

from grq_validation.models.results import InstrumentMetrics, PortfolioMetrics


def _pct(value: float | None) -> str:
    return f"{value:+.1f}%" if value is not None else "n/a"


def _price(value: float | None) -> str:
    return f"{value:.2f}" if value is not None else "n/a"


# ── Instrument table ──────────────────────────────────────────────────────────


def format_instrument_table(rows: list[InstrumentMetrics] | tuple[InstrumentMetrics, ...]) -> str:
    """Format per-instrument metrics as an ASCII table.

    Example::

        Ticker   Score     Buy  Current   Target    Perf   Divs  Days  Judgement
        -------------------------------------------------------------------------
        AAPL      0.82   14.95    16.10   +23.7%   +7.7%   0.25    21  On Track (19.5%)

    Rows without a buy price show the unavailable reason in place of the
    judgement.
    """
    lines: list[str] = []
    header = (
        f"  {'Ticker':<8} {'Score':>5}  {'Buy':>8}  {'Current':>8}  "
        f"{'Target':>7}  {'Perf':>7}  {'Divs':>6}  {'Days':>4}  Judgement"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    if not rows:
        lines.append("  (no score entries)")
        return "\n".join(lines)

    for m in rows:
        verdict = (
            f"[{m.unavailable_reason.value}]"
            if m.unavailable_reason is not None
            else m.judgement.label
        )
        lines.append(
            f"  {m.instrument:<8} {m.score:>5.2f}  {_price(m.buy_price):>8}  "
            f"{_price(m.current_price):>8}  {_pct(m.target_pct):>7}  "
            f"{_pct(m.current_performance):>7}  {m.dividend_total:>6.2f}  "
            f"{m.days_elapsed:>4}  {verdict}"
        )
    return "\n".join(lines)


# ── Portfolio summary ─────────────────────────────────────────────────────────


def format_portfolio_summary(portfolio: PortfolioMetrics) -> str:
    """Return the equal-weight portfolio block printed after the table."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Portfolio (equal weight) ===")
    lines.append(f"  Score date:        {portfolio.score_date.isoformat()}")
    lines.append(
        f"  Instruments:       {portfolio.n_evaluated} evaluated / {portfolio.n_instruments} scored"
    )
    lines.append(f"  Days elapsed:      {portfolio.days_elapsed}")
    lines.append(f"  Target:            {_pct(portfolio.target_pct)}")
    lines.append(f"  Performance:       {_pct(portfolio.performance_pct)}")
    lines.append(f"  Annualized:        {_pct(portfolio.annualized_pct)}")
    lines.append(f"  vs. cost of cap.:  {_pct(portfolio.excess_return_pct)}")

    if portfolio.trend_line is not None:
        trend = portfolio.trend_line
        lines.append(
            f"  Trend:             {trend.slope:+.3f}%/day  (R² {trend.r_squared:.2f})"
        )
    else:
        lines.append("  Trend:             n/a (too few points)")

    if portfolio.projection is not None:
        proj = portfolio.projection
        lines.append(
            f"  Projection:        {_pct(proj.projected_return_pct)}  "
            f"[{proj.method.value}, confidence {proj.confidence:.2f}]"
        )
    else:
        lines.append("  Projection:        n/a")

    lines.append(f"  Judgement:         {portfolio.judgement.label}")
    return "\n".join(lines)
