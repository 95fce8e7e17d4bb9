"""
Command line for GRQ validation (``grq-validation``).

Commands
--------
  validate-config   load the merged config and print the values that matter
  evaluate          score a batch JSON and print instrument rows + portfolio

Each command resolves its config first and exits with status 1 and an
``[ERROR]`` line on stderr for any bad input; heavy imports happen inside
the command body so ``--help`` stays fast.

Examples::

    grq-validation validate-config --full
    grq-validation evaluate data/batches/2025-02-14.json
    grq-validation evaluate batch.json --as-of 2025-03-15 --output out/report.json
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import NoReturn, Optional

import typer

app = typer.Typer(
    name="grq-validation",
    help="Validate AI stock-score recommendations against 90-day market outcomes.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _fail(message: str) -> NoReturn:
    typer.echo(f"[ERROR] {message}", err=True)
    raise typer.Exit(code=1)


def _load_config_or_exit(config_path: Optional[str] = None):
    from pydantic import ValidationError

    from grq_validation.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        _fail(str(exc))
    except (ValidationError, ValueError) as exc:
        _fail(f"Config validation failed: {exc}")


def _configure_logging(config) -> None:
    from grq_validation.utils.logging import configure_logging

    configure_logging(config.logging, debug=config.debug)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(None, "--config", help="TOML config file to load."),
    show_full: bool = typer.Option(False, "--full", help="Also dump every merged value as JSON."),
) -> None:
    """Check that the config loads, then show the values evaluation depends on."""
    config = _load_config_or_exit(config_path)
    val, proj = config.validation, config.projection

    summary = [
        ("Horizon", f"{val.horizon_days} days"),
        ("Buy-price window", f"{val.buy_price_window_days} days"),
        ("Cost of capital", f"{val.cost_of_capital:.2%}"),
        ("Default target", f"{val.default_target_pct:.1f}%"),
        (
            "Stage buckets",
            f"[0, {proj.early_stage_end_days}) "
            f"[{proj.early_stage_end_days}, {proj.mid_stage_end_days}) "
            f"[{proj.mid_stage_end_days}, ∞)",
        ),
        ("Hit threshold", f"{config.judgement.hit_threshold_ratio:.0%} of target"),
        ("Log level", config.logging.level),
        ("Debug mode", str(config.debug)),
    ]
    for label, value in summary:
        typer.echo(f"  {label + ':':<17} {value}")

    if show_full:
        typer.echo("")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("evaluate")
def evaluate(
    batch_file: str = typer.Argument(..., help="Score batch JSON document."),
    config_path: Optional[str] = typer.Option(None, "--config", help="TOML config file to load."),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="Ignore bars and dividends after this ISO date (replays a past evaluation).",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        help="Report path; a .csv suffix writes the flat instrument table, anything else JSON.",
    ),
    instrument: Optional[str] = typer.Option(
        None,
        "--instrument",
        help="Show a single ticker's row; portfolio figures still use the whole batch.",
    ),
) -> None:
    """Evaluate every score in BATCH_FILE and the equal-weight portfolio.

    The batch is one JSON object with ``score_date``, ``entries``
    (instrument, score, target_price), ``market_data`` keyed by ticker and
    an optional ``dividends`` map keyed the same way.
    """
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    from grq_validation.ingestion.batch_loader import BatchLoadError, load_batch_json
    from grq_validation.performance.evaluator import evaluate_batch
    from grq_validation.reporting.export import write_report
    from grq_validation.reporting.formatters import (
        format_instrument_table,
        format_portfolio_summary,
    )

    cutoff: Optional[date] = None
    if as_of:
        try:
            cutoff = date.fromisoformat(as_of)
        except ValueError:
            _fail(f"--as-of expects an ISO date (YYYY-MM-DD), got {as_of!r}.")

    try:
        batch = load_batch_json(Path(batch_file))
    except FileNotFoundError as exc:
        _fail(str(exc))
    except BatchLoadError as exc:
        _fail(f"Batch load failed:\n{exc}")

    if cutoff is not None and cutoff < batch.score_date:
        _fail(f"--as-of {cutoff} is before the score date {batch.score_date}.")

    portfolio = evaluate_batch(batch, config, as_of=cutoff)

    rows = portfolio.instruments
    if instrument:
        ticker = instrument.strip().upper()
        rows = tuple(m for m in rows if m.instrument == ticker)
        if not rows:
            _fail(f"Instrument '{ticker}' is not in this batch.")

    header = f"  Score date: {batch.score_date} | entries: {len(batch.entries)}"
    if cutoff:
        header += f" | as of: {cutoff}"
    typer.echo(header)
    typer.echo("")
    typer.echo(format_instrument_table(rows))
    typer.echo(format_portfolio_summary(portfolio))

    if output:
        written = write_report(portfolio, Path(output))
        typer.echo(f"\n  Report written: {written}")

    typer.echo("")
    typer.echo("[OK] Evaluation complete.")


if __name__ == "__main__":
    app()
