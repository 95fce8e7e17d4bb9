"""
Configuration for GRQ validation runs.

Layers, later ones winning:

  * ``config/default.toml`` (committed) or the file passed with ``--config``
  * ``local.toml`` in the same directory, if present (not committed)
  * ``.env`` at the project root, loaded into the environment
  * ``GRQ_VALIDATION_LOG_LEVEL`` / ``_COST_OF_CAPITAL`` / ``_DEBUG``

The projector and the judgement classifier read their thresholds from the
resulting ``AppConfig``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class ValidationConfig(BaseModel):
    """Validation window and benchmark settings."""

    model_config = ConfigDict(frozen=True)

    horizon_days: int = 90
    buy_price_window_days: int = 5
    cost_of_capital: float = 0.10
    default_target_pct: float = 20.0
    min_trend_points: int = 3

    @field_validator("cost_of_capital")
    @classmethod
    def validate_cost_of_capital(cls, v: float) -> float:
        if not 0.0 <= v < 1.0:
            raise ValueError(f"cost_of_capital must be in [0.0, 1.0), got {v}.")
        return v

    @field_validator("horizon_days", "min_trend_points")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}.")
        return v

    @field_validator("buy_price_window_days")
    @classmethod
    def validate_window(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"buy_price_window_days must be non-negative, got {v}.")
        return v


class ProjectionConfig(BaseModel):
    """Hybrid projector policy constants.

    These are policy, not derived values: historical judgements were made
    with the defaults below, so changing them changes past outcomes.
    """

    model_config = ConfigDict(frozen=True)

    early_stage_end_days: int = 30
    mid_stage_end_days: int = 60

    early_r_squared_min: float = 0.1
    early_dampening: float = 0.3
    early_confidence_weight: float = 0.7
    early_confidence_cap: float = 0.8
    early_gap_fraction: float = 0.10
    early_loss_retention: float = 0.5
    early_fallback_confidence: float = 0.3

    mid_r_squared_min: float = 0.05
    mid_dampening: float = 0.5
    mid_confidence_weight: float = 0.8
    mid_confidence_cap: float = 0.9
    mid_gap_fraction: float = 0.15
    mid_loss_retention: float = 0.6
    mid_fallback_confidence: float = 0.5

    no_target_fallback_pct: float = -5.0

    unrealistic_daily_rate_pct: float = 2.0
    missed_target_cap_ratio: float = 0.6
    missed_target_floor_growth: float = 1.2
    conservative_target_ratio: float = 0.8
    missed_target_confidence: float = 0.7
    above_target_confidence: float = 0.7
    conservative_confidence: float = 0.6
    mean_reversion_rate: float = 0.4
    mean_reversion_confidence: float = 0.3

    min_projection_pct: float = -100.0
    max_projection_pct: float = 200.0

    @model_validator(mode="after")
    def validate_buckets(self) -> "ProjectionConfig":
        if not 0 < self.early_stage_end_days < self.mid_stage_end_days:
            raise ValueError(
                "Projection buckets must satisfy 0 < early_stage_end_days < mid_stage_end_days, "
                f"got {self.early_stage_end_days} / {self.mid_stage_end_days}."
            )
        if self.min_projection_pct >= self.max_projection_pct:
            raise ValueError("min_projection_pct must be below max_projection_pct.")
        return self


class JudgementConfig(BaseModel):
    """Outcome classification thresholds."""

    model_config = ConfigDict(frozen=True)

    hit_threshold_ratio: float = 0.8
    min_projection_confidence: float = 0.2

    @field_validator("hit_threshold_ratio", "min_projection_confidence")
    @classmethod
    def validate_ratio(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"Ratio must be in [0.0, 1.0], got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """All sections together.

    ``AppConfig()`` with no arguments equals the committed defaults, which
    is what ``evaluate_batch`` falls back to when called without a config.
    """

    model_config = ConfigDict(frozen=True)

    validation: ValidationConfig = ValidationConfig()
    projection: ProjectionConfig = ProjectionConfig()
    judgement: JudgementConfig = JudgementConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False  # forces DEBUG logging in the CLI


# ── Loader ────────────────────────────────────────────────────────────────────

# env var -> (section or None for top level, key, parser)
_ENV_OVERRIDES: dict[str, tuple[Optional[str], str, Callable[[str], Any]]] = {
    "GRQ_VALIDATION_LOG_LEVEL": ("logging", "level", str),
    "GRQ_VALIDATION_COST_OF_CAPITAL": ("validation", "cost_of_capital", float),
    "GRQ_VALIDATION_DEBUG": (None, "debug", lambda s: s.lower() in ("1", "true", "yes")),
}

_SECTIONS: dict[str, type[BaseModel]] = {
    "validation": ValidationConfig,
    "projection": ProjectionConfig,
    "judgement": JudgementConfig,
    "logging": LoggingConfig,
}


def _project_root() -> Path:
    """First ancestor of this package holding a ``pyproject.toml``."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return here.parent


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build an ``AppConfig`` from TOML, ``.env`` and the environment.

    Args:
        config_path: TOML file to start from; ``config/default.toml`` under
            the project root when omitted.  A ``local.toml`` next to it is
            merged on top.

    Raises:
        FileNotFoundError: ``config_path`` does not exist.
        pydantic.ValidationError: a merged value is out of range.
    """
    root = _project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.is_file():
        raise FileNotFoundError(
            f"Config file not found: {path} (pass --config or add config/default.toml)."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.is_file():
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Nested-dict merge; values in ``override`` win."""
    merged = dict(base)
    for key, val in override.items():
        current = merged.get(key)
        merged[key] = (
            _deep_merge(current, val)
            if isinstance(current, dict) and isinstance(val, dict)
            else val
        )
    return merged


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    for var, (section, key, parse) in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        target = raw if section is None else raw.setdefault(section, {})
        target[key] = parse(value)
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    # [project] only carries metadata plus an optional debug flag.
    project = raw.get("project", {})
    sections = {name: model(**raw.get(name, {})) for name, model in _SECTIONS.items()}
    return AppConfig(**sections, debug=raw.get("debug", project.get("debug", False)))
