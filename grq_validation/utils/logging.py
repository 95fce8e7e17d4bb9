"""
Logging setup for GRQ validation.

``configure_logging(config, debug)`` is called once, by the CLI, before a batch is
loaded.  Library modules only ever do ``log = logging.getLogger(__name__)``.

Evaluation context
------------------
Per-instrument messages pass ``extra={"instrument": ticker}``.  Every
handler installed here carries ``_InstrumentContext``, which fills in ``"-"``
for records without one, so the text format can always show the column::

    2025-03-01T15:00:00Z WARNING  grq_validation.performance.evaluator [ZZZZ] No market data ...

With ``json_format = true`` each record is one JSON object per line, with
the instrument as its own key when present::

    {"time": "...", "level": "WARNING", "logger": "...", "instrument": "ZZZZ", "message": "..."}

Handlers write to stderr so the report on stdout stays clean when piped.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from grq_validation.config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(instrument)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
NO_INSTRUMENT = "-"

_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "instrument"}


class _InstrumentContext(logging.Filter):
    """Give every record an ``instrument`` attribute."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "instrument"):
            record.instrument = NO_INSTRUMENT
        return True


class _JsonLineFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` keys are carried through."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
        }
        instrument = getattr(record, "instrument", NO_INSTRUMENT)
        if instrument != NO_INSTRUMENT:
            payload["instrument"] = instrument
        payload["message"] = record.getMessage()
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        payload.update(
            (key, val) for key, val in record.__dict__.items()
            if key not in _RESERVED and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def _build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonLineFormatter()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def _build_handlers(config: "LoggingConfig") -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    return handlers


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Install stderr (and optional file) handlers on the root logger.

    Args:
        config: ``[logging]`` section of ``AppConfig``.
        debug:  ``AppConfig.debug``; forces DEBUG whatever ``config.level`` says.
    """
    level = logging.DEBUG if debug else getattr(logging, config.level.upper(), logging.INFO)
    formatter = _build_formatter(config.json_format)
    context = _InstrumentContext()

    handlers = _build_handlers(config)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context)

    logging.basicConfig(level=level, handlers=handlers, force=True)
