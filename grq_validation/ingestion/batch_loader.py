"""
JSON loader for score batches.

Document shape::

    {
      "score_date": "2025-02-14",
      "entries": [
        {"instrument": "AAPL", "score": 0.82, "target_price": 18.50,
         "ex_dividend_hint": "2025-03-10",            # optional
         "intrinsic_value_basic": 21.0,                # optional
         "intrinsic_value_adjusted": 19.4,             # optional
         "note": "..."}                                # optional
      ],
      "market_data": {
        "AAPL": [
          {"date": "2025-02-18", "open": 15.0, "high": 15.18,
           "low": 14.72, "close": 15.1, "split_coefficient": 1.0}
        ]
      },
      "dividends": {
        "AAPL": [{"ex_dividend_date": "2025-03-10", "amount": 0.25}]
      }
    }

``market_data`` and ``dividends`` are keyed by ticker; the ticker is
injected into each record, so records need not repeat it.  A bar may use
``date`` or ``trade_date``; ``split_coefficient`` defaults to 1.0.

All records are validated before the batch is returned.  If any fail, a
single :class:`BatchLoadError` lists the first 10 failures.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from grq_validation.models.batch import ScoreBatch
from grq_validation.models.market import DividendRecord, MarketPoint
from grq_validation.models.score import ScoreEntry

logger = logging.getLogger(__name__)

MAX_ERRORS_SHOWN = 10


class BatchLoadError(ValueError):
    """Raised when a batch document is malformed or fails validation."""


def load_batch_json(path: Path) -> ScoreBatch:
    """Read and validate a JSON batch document.

    Args:
        path: Path to the JSON file (must exist).

    Returns:
        Validated, immutable :class:`ScoreBatch`.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        BatchLoadError: On non-UTF-8 bytes, invalid JSON, wrong structure,
            or record failures.
    """
    if not path.exists():
        raise FileNotFoundError(f"Batch file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except UnicodeDecodeError as exc:
        raise BatchLoadError(f"{path.name} is not UTF-8 text: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise BatchLoadError(f"Invalid JSON in {path.name}: {exc}") from exc

    batch = parse_batch(raw, source=path.name)
    logger.info(
        "Loaded batch %s | score_date=%s | entries=%d | series=%d",
        path.name, batch.score_date, len(batch.entries), len(batch.market_data),
    )
    return batch


def parse_batch(raw: Any, source: str = "<batch>") -> ScoreBatch:
    """Validate an already-decoded batch document.

    Args:
        raw:    Decoded JSON value.
        source: Name used in error messages.

    Raises:
        BatchLoadError: On wrong structure or any record failure.
    """
    if not isinstance(raw, dict):
        raise BatchLoadError(f"{source}: batch document must be a JSON object.")
    if "score_date" not in raw:
        raise BatchLoadError(f"{source}: missing required key 'score_date'.")

    errors: list[str] = []

    entries: list[ScoreEntry] = []
    for i, item in enumerate(_as_list(raw.get("entries", []), "entries", source)):
        try:
            entries.append(ScoreEntry.model_validate(item))
        except ValidationError as exc:
            errors.append(f"entries[{i}]: {_first_error(exc)}")

    if not entries and not errors:
        logger.warning("Batch %s has no score entries", source)

    market_data: dict[str, list[MarketPoint]] = {}
    for ticker, records in _as_mapping(raw.get("market_data", {}), "market_data", source).items():
        for i, item in enumerate(_as_list(records, f"market_data.{ticker}", source)):
            try:
                point = MarketPoint.model_validate(_with_instrument(_bar_fields(item), ticker))
            except ValidationError as exc:
                errors.append(f"market_data.{ticker}[{i}]: {_first_error(exc)}")
                continue
            market_data.setdefault(ticker, []).append(point)

    dividends: dict[str, list[DividendRecord]] = {}
    for ticker, records in _as_mapping(raw.get("dividends", {}), "dividends", source).items():
        for i, item in enumerate(_as_list(records, f"dividends.{ticker}", source)):
            try:
                record = DividendRecord.model_validate(_with_instrument(item, ticker))
            except ValidationError as exc:
                errors.append(f"dividends.{ticker}[{i}]: {_first_error(exc)}")
                continue
            dividends.setdefault(ticker, []).append(record)

    if errors:
        detail = "\n".join(f"  {msg}" for msg in errors[:MAX_ERRORS_SHOWN])
        suffix = (
            f"\n  … and {len(errors) - MAX_ERRORS_SHOWN} more"
            if len(errors) > MAX_ERRORS_SHOWN else ""
        )
        raise BatchLoadError(
            f"{len(errors)} record(s) failed validation in {source}:\n{detail}{suffix}"
        )

    try:
        return ScoreBatch(
            score_date=raw["score_date"],
            entries=tuple(entries),
            market_data={k: tuple(v) for k, v in market_data.items()},
            dividends={k: tuple(v) for k, v in dividends.items()},
        )
    except (ValueError, TypeError) as exc:
        raise BatchLoadError(f"{source}: invalid score_date {raw['score_date']!r}: {exc}") from exc


# ── Private helpers ────────────────────────────────────────────────────────────

def _as_list(value: Any, key: str, source: str) -> list[Any]:
    if not isinstance(value, list):
        raise BatchLoadError(f"{source}: '{key}' must be an array.")
    return value


def _as_mapping(value: Any, key: str, source: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise BatchLoadError(f"{source}: '{key}' must be an object keyed by ticker.")
    return value


def _with_instrument(item: Any, ticker: str) -> Any:
    """Inject the ticker key unless the record names its own instrument."""
    if isinstance(item, dict):
        return {"instrument": ticker, **item}
    return item


def _bar_fields(item: Any) -> Any:
    """Accept ``date`` as an alias of ``trade_date``."""
    if isinstance(item, dict) and "trade_date" not in item and "date" in item:
        item = dict(item)
        item["trade_date"] = item.pop("date")
    return item


def _first_error(exc: ValidationError) -> str:
    """Compact one-line summary of a pydantic error."""
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]
