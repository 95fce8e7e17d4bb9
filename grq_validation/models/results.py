"""
Derived result types produced by the evaluation engine.

Every type here is a frozen dataclass computed from a ``ScoreBatch``; none is
ever updated after construction.  An absent metric is always ``None``; a
0.0 always means "measured as zero", never "no data".
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from grq_validation.utils.time_utils import DEFAULT_HORIZON_DAYS


class UnavailableReason(str, Enum):
    """Why an instrument's performance metrics could not be computed."""

    MISSING_MARKET_DATA = "missing_market_data"
    MISSING_BUY_PRICE = "missing_buy_price"


class ProjectionMethod(str, Enum):
    """Strategy that produced a ``HybridProjection``."""

    DAMPENED_TREND = "dampened_trend"
    TARGET_BASED = "target_based"
    REALISTIC_TRAJECTORY = "realistic_trajectory"
    MEAN_REVERSION = "mean_reversion"


class Outcome(str, Enum):
    """Discrete judgement outcome.

    The first three are final (90 days elapsed); the rest are interim.
    """

    HIT_TARGET = "Hit Target"
    PARTIAL_SUCCESS = "Partial Success"
    MISSED_TARGET = "Missed Target"
    ON_TRACK = "On Track"
    BELOW_TARGET = "Below Target"
    DECLINING = "Declining"
    EARLY_DAYS = "Early Days"
    PENDING = "Pending"

    @property
    def is_final(self) -> bool:
        return self in (Outcome.HIT_TARGET, Outcome.PARTIAL_SUCCESS, Outcome.MISSED_TARGET)


class JudgementBasis(str, Enum):
    """Which value a judgement was classified on."""

    REALIZED = "realized"
    PROJECTED = "projected"
    NONE = "none"


@dataclass(frozen=True)
class BuyPriceResolution:
    """Effective entry price for an (instrument, score date) pair.

    Attributes:
        price:     Split-adjusted session midpoint, in current share terms.
        date_used: Trading date the price was taken from (score date or up
                   to the resolution window later).
    """

    price: float
    date_used: date


@dataclass(frozen=True)
class ReturnPoint:
    """Cumulative total return (price + dividends) on one trading date."""

    date: date
    cumulative_return_pct: float


@dataclass(frozen=True)
class TrendLine:
    """Zero-intercept least-squares fit of cumulative return vs. elapsed days.

    Attributes:
        slope:     Percent per day.
        r_squared: Goodness of fit against the zero-intercept line
                   (can be negative when the forced origin fits worse than the mean).
        points:    ``(days_since_score, cumulative_return_pct)`` samples used.
        horizon_days: Window length the line is read off at (``predicted_90_day``).
    """

    slope: float
    r_squared: float
    points: tuple[tuple[float, float], ...] = ()
    horizon_days: int = DEFAULT_HORIZON_DAYS

    @property
    def intercept(self) -> float:
        return 0.0

    def predicted_at(self, day: float) -> float:
        """Line value at ``day``, floored at a total loss (-100%)."""
        return max(self.slope * day, -100.0)

    @property
    def predicted_90_day(self) -> float:
        """Line value at the end of the validation window (``horizon_days``)."""
        return self.predicted_at(self.horizon_days)


@dataclass(frozen=True)
class HybridProjection:
    """Projected return at the end of the validation window.

    Attributes:
        projected_return_pct: Final projection, always in [-100, 200].
        method:               Strategy that produced it.
        confidence:           In [0, 1].
        days_elapsed:         Elapsed days the strategy was chosen on.
        current_performance:  Realized return the projection started from.
        target_pct:           Target return, or ``None`` if unknown.
        dampened_slope:       Trend slope after dampening (dampened trend only).
    """

    projected_return_pct: float
    method: ProjectionMethod
    confidence: float
    days_elapsed: int
    current_performance: float
    target_pct: float | None
    dampened_slope: float | None = None


@dataclass(frozen=True)
class ProjectionPoint:
    """One point on a projection curve for the presentation layer."""

    day: int
    date: date
    projected_return_pct: float


@dataclass(frozen=True)
class Judgement:
    """Classified outcome of a recommendation.

    Attributes:
        outcome: Discrete label.
        value:   Performance or projected value the label was derived from.
        basis:   Whether ``value`` is realized or projected.
    """

    outcome: Outcome
    value: float | None = None
    basis: JudgementBasis = JudgementBasis.NONE

    @property
    def label(self) -> str:
        """Display string, e.g. ``"On Track (21.3%)"`` or ``"Hit Target"``."""
        if self.value is None or self.outcome.is_final:
            return self.outcome.value
        sign = "+" if self.outcome is Outcome.EARLY_DAYS and self.value > 0 else ""
        return f"{self.outcome.value} ({sign}{self.value:.1f}%)"


@dataclass(frozen=True)
class PortfolioPoint:
    """Equal-weight portfolio return on one date.

    Attributes:
        date:              Calendar date.
        mean_return_pct:   Mean cumulative return over contributing instruments.
        n_instruments:     Number of contributing instruments (the divisor).
        dividends_on_date: ``"TICKER: $0.25"`` markers for ex-dates on this date.
    """

    date: date
    mean_return_pct: float
    n_instruments: int
    dividends_on_date: tuple[str, ...] = ()


@dataclass(frozen=True)
class InstrumentMetrics:
    """Everything the presentation layer shows for one instrument.

    All float fields are ``None`` when they cannot be computed; see
    ``unavailable_reason`` for the cause when the whole row is empty.
    """

    instrument: str
    score: float
    target_price: float
    buy: BuyPriceResolution | None
    current_price: float | None
    adjusted_target_price: float | None
    target_pct: float | None
    current_performance: float | None
    dividend_total: float
    dividend_count: int
    next_ex_dividend: date | None
    days_elapsed: int
    trend_line: TrendLine | None
    projection: HybridProjection | None
    judgement: Judgement
    annualized_pct: float | None
    excess_return_pct: float | None
    intrinsic_value_basic: float | None = None
    intrinsic_value_adjusted: float | None = None
    unavailable_reason: UnavailableReason | None = None

    @property
    def buy_price(self) -> float | None:
        return self.buy.price if self.buy is not None else None

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly dict (dates as ISO strings, enums as values)."""
        return _jsonable(asdict(self)) | {"judgement_label": self.judgement.label}


@dataclass(frozen=True)
class PortfolioMetrics:
    """Equal-weight portfolio view of a score batch."""

    score_date: date
    n_instruments: int
    n_evaluated: int
    target_pct: float
    performance_pct: float | None
    days_elapsed: int
    series: tuple[PortfolioPoint, ...]
    cost_of_capital_series: tuple[ReturnPoint, ...]
    trend_line: TrendLine | None
    projection: HybridProjection | None
    judgement: Judgement
    annualized_pct: float | None
    excess_return_pct: float | None
    projection_path: tuple[ProjectionPoint, ...] = field(default=())
    instruments: tuple[InstrumentMetrics, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        payload = _jsonable(asdict(self))
        payload["judgement_label"] = self.judgement.label
        payload["instruments"] = [m.to_dict() for m in self.instruments]
        return payload


def _jsonable(value: Any) -> Any:
    """Recursively convert dates and enums so ``json.dumps`` accepts the result."""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value
