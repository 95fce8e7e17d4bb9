"""
Batch evaluator: compute every metric for each instrument and the portfolio.

How it works
------------
1. Optionally truncate the batch to what was known on ``as_of`` (bars and
   dividends after that date are dropped).
2. For each score entry:
   a. No market series                 → row marked MISSING_MARKET_DATA.
   b. Resolve the buy price once       → none in window: MISSING_BUY_PRICE.
   c. Target %, current performance, trend line, hybrid projection,
      judgement, annualized and excess return, all from that one buy price.
3. Portfolio: equal-weight series over the same buy prices, mean target,
   mean performance, portfolio trend, projection, and judgement.

Failures are local: an instrument without data yields a row of ``None``
metrics and drops out of the portfolio divisor; nothing here raises for
missing data.
"""

from __future__ import annotations

import logging
from datetime import date

from grq_validation.config import AppConfig
from grq_validation.models.batch import ScoreBatch
from grq_validation.models.results import (
    InstrumentMetrics,
    Judgement,
    Outcome,
    PortfolioMetrics,
    UnavailableReason,
)
from grq_validation.models.score import ScoreEntry
from grq_validation.performance.annualize import (
    annualize,
    cost_of_capital_series,
    excess_return,
)
from grq_validation.performance.buy_price import resolve_buy_price
from grq_validation.performance.dividends import (
    dividends_within_horizon,
    next_ex_dividend_date,
)
from grq_validation.performance.judgement import classify
from grq_validation.performance.portfolio import (
    portfolio_days_elapsed,
    portfolio_performance,
    portfolio_series,
    portfolio_target,
    portfolio_trend_line,
)
from grq_validation.performance.projection import HybridProjector
from grq_validation.performance.returns import current_performance, target_percentage
from grq_validation.performance.splits import adjust_price
from grq_validation.performance.trend import fit_trend_line
from grq_validation.utils.time_utils import days_since

log = logging.getLogger(__name__)


def truncate_batch(batch: ScoreBatch, as_of: date) -> ScoreBatch:
    """Copy of ``batch`` with bars and dividends after ``as_of`` removed."""
    return ScoreBatch(
        score_date=batch.score_date,
        entries=batch.entries,
        market_data={
            inst: tuple(p for p in points if p.trade_date <= as_of)
            for inst, points in batch.market_data.items()
        },
        dividends={
            inst: tuple(d for d in divs if d.ex_dividend_date <= as_of)
            for inst, divs in batch.dividends.items()
        },
    )


def evaluate_instrument(
    entry: ScoreEntry,
    batch: ScoreBatch,
    config: AppConfig | None = None,
    projector: HybridProjector | None = None,
) -> InstrumentMetrics:
    """Compute all metrics for one score entry.

    Args:
        entry:     The recommendation.
        batch:     Batch supplying the score date and market context.
        config:    Application config (defaults to ``AppConfig()``).
        projector: Shared projector; built from ``config`` if omitted.

    Returns:
        ``InstrumentMetrics``; never raises for missing data.
    """
    cfg = config or AppConfig()
    horizon = cfg.validation.horizon_days
    projector = projector or HybridProjector(cfg.projection, horizon)

    score_date = batch.score_date
    points = batch.points_for(entry.instrument)
    dividends = batch.dividends_for(entry.instrument)
    window_dividends = dividends_within_horizon(dividends, score_date, horizon)

    base = dict(
        instrument=entry.instrument,
        score=entry.score,
        target_price=entry.target_price,
        dividend_total=sum((d.amount for d in window_dividends), 0.0),
        dividend_count=len(window_dividends),
        next_ex_dividend=next_ex_dividend_date(dividends, score_date, horizon),
    )

    if not points:
        log.warning(
            "No market data for %s; metrics unavailable", entry.instrument,
            extra={"instrument": entry.instrument},
        )
        return InstrumentMetrics(
            **base,
            buy=None,
            current_price=None,
            adjusted_target_price=None,
            target_pct=None,
            current_performance=None,
            days_elapsed=0,
            trend_line=None,
            projection=None,
            judgement=Judgement(outcome=Outcome.PENDING),
            annualized_pct=None,
            excess_return_pct=None,
            unavailable_reason=UnavailableReason.MISSING_MARKET_DATA,
        )

    days_elapsed = max(days_since(score_date, points[-1].trade_date), 0)
    adjusted_target = adjust_price(entry.target_price, points, score_date)
    intrinsic_basic = (
        adjust_price(entry.intrinsic_value_basic, points, score_date)
        if entry.intrinsic_value_basic is not None else None
    )
    intrinsic_adjusted = (
        adjust_price(entry.intrinsic_value_adjusted, points, score_date)
        if entry.intrinsic_value_adjusted is not None else None
    )

    buy = resolve_buy_price(points, score_date, cfg.validation.buy_price_window_days)
    if buy is None:
        log.warning(
            "No buy price for %s within %d days of %s",
            entry.instrument, cfg.validation.buy_price_window_days, score_date,
            extra={"instrument": entry.instrument},
        )
        return InstrumentMetrics(
            **base,
            buy=None,
            current_price=points[-1].mid_price,
            adjusted_target_price=adjusted_target,
            target_pct=None,
            current_performance=None,
            days_elapsed=days_elapsed,
            trend_line=None,
            projection=None,
            judgement=Judgement(outcome=Outcome.PENDING),
            annualized_pct=None,
            excess_return_pct=None,
            intrinsic_value_basic=intrinsic_basic,
            intrinsic_value_adjusted=intrinsic_adjusted,
            unavailable_reason=UnavailableReason.MISSING_BUY_PRICE,
        )

    target_pct = target_percentage(entry.target_price, points, buy, score_date)
    performance = current_performance(points, dividends, buy, score_date, horizon_days=horizon)
    trend = fit_trend_line(
        points, dividends, buy, score_date,
        horizon_days=horizon, min_points=cfg.validation.min_trend_points,
    )
    projection = projector.project(performance, days_elapsed, target_pct, trend)
    judgement = classify(
        days_elapsed, performance, target_pct, projection,
        config=cfg.judgement,
        horizon_days=horizon,
        default_target_pct=cfg.validation.default_target_pct,
        early_days_end=cfg.projection.early_stage_end_days,
    )

    window_days = min(days_elapsed, horizon)
    annualized = annualize(performance, window_days) if performance is not None else None

    log.debug(
        "%s | buy=%.2f@%s | perf=%s | target=%s | days=%d | judgement=%s",
        entry.instrument, buy.price, buy.date_used,
        f"{performance:.2f}" if performance is not None else "n/a",
        f"{target_pct:.2f}" if target_pct is not None else "n/a",
        days_elapsed, judgement.label,
        extra={"instrument": entry.instrument},
    )

    return InstrumentMetrics(
        **base,
        buy=buy,
        current_price=points[-1].mid_price,
        adjusted_target_price=adjusted_target,
        target_pct=target_pct,
        current_performance=performance,
        days_elapsed=days_elapsed,
        trend_line=trend,
        projection=projection,
        judgement=judgement,
        annualized_pct=annualized,
        excess_return_pct=excess_return(
            performance, window_days, cfg.validation.cost_of_capital, horizon,
        ),
        intrinsic_value_basic=intrinsic_basic,
        intrinsic_value_adjusted=intrinsic_adjusted,
    )


def evaluate_batch(
    batch: ScoreBatch,
    config: AppConfig | None = None,
    as_of: date | None = None,
) -> PortfolioMetrics:
    """Evaluate every instrument in ``batch`` and the equal-weight portfolio.

    Args:
        batch:  Immutable score batch.
        config: Application config (defaults to ``AppConfig()``).
        as_of:  Evaluate with only the data known on this date.

    Returns:
        ``PortfolioMetrics`` including per-instrument rows.
    """
    cfg = config or AppConfig()
    horizon = cfg.validation.horizon_days
    if as_of is not None:
        batch = truncate_batch(batch, as_of)

    projector = HybridProjector(cfg.projection, horizon)
    instruments = tuple(
        evaluate_instrument(entry, batch, cfg, projector) for entry in batch.entries
    )
    buys = {m.instrument: m.buy for m in instruments}

    series = portfolio_series(batch, buys, horizon)
    target = portfolio_target(batch, buys, cfg.validation.default_target_pct)
    performance = portfolio_performance([m.current_performance for m in instruments])
    days_elapsed = portfolio_days_elapsed(batch, horizon)
    trend = portfolio_trend_line(
        series, batch.score_date, cfg.validation.min_trend_points, horizon,
    )
    projection = projector.project(performance, days_elapsed, target, trend)
    judgement = classify(
        days_elapsed, performance, target, projection,
        config=cfg.judgement,
        horizon_days=horizon,
        default_target_pct=cfg.validation.default_target_pct,
        early_days_end=cfg.projection.early_stage_end_days,
    )
    n_evaluated = sum(1 for m in instruments if m.current_performance is not None)

    log.info(
        "Batch evaluated | score_date=%s | instruments=%d | evaluated=%d | days=%d | judgement=%s",
        batch.score_date, len(instruments), n_evaluated, days_elapsed, judgement.label,
    )

    return PortfolioMetrics(
        score_date=batch.score_date,
        n_instruments=len(instruments),
        n_evaluated=n_evaluated,
        target_pct=target,
        performance_pct=performance,
        days_elapsed=days_elapsed,
        series=tuple(series),
        cost_of_capital_series=tuple(cost_of_capital_series(
            [p.date for p in series], batch.score_date,
            cfg.validation.cost_of_capital, horizon,
        )),
        trend_line=trend,
        projection=projection,
        judgement=judgement,
        annualized_pct=annualize(performance, days_elapsed) if performance is not None else None,
        excess_return_pct=excess_return(
            performance, days_elapsed, cfg.validation.cost_of_capital, horizon,
        ),
        projection_path=(
            tuple(projector.projection_path(projection, batch.score_date))
            if projection is not None else ()
        ),
        instruments=instruments,
    )
