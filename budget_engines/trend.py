"""
budget_engines.trend -- Variance trend classifier and cumulative series.

Responsibility:
    Label the recent direction of budget performance from the cumulative
    variance percent of the last (up to) three elapsed months, and build
    the month-by-month cumulative series presentation layers chart.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Reads raw entries directly; the series uses budget_engines.tracking
    for its mode decisions.

Invariants enforced:
    - Cumulative variance percent through month m uses every entry of the
      year with month <= m (of a configured category, when categories are
      passed) and the global sign convention.
    - Fewer than 2 months of history: classify by magnitude alone
      (|pct| < stable_band -> Stable, else Under / Over Budget by sign).
    - Otherwise change = current - previous:
        change >  change_threshold -> Improving
        change < -change_threshold -> Worsening
        |current| < stable_current -> Stable
        else Under / Over Budget by sign.

Failure modes:
    - InvalidPeriodError when current_month is outside 0..12.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from budget_engines.rollup import Totals, entries_in_scope, signed_variance, variance_percent
from budget_engines.tracer import traced_engine
from budget_engines.tracking import resolve_budget_tracking
from budget_kernel.domain.entries import ZERO, BudgetCategory, BudgetEntry
from budget_kernel.domain.forecast_modes import ForecastModes, MonthMode
from budget_kernel.domain.periods import MONTHS, month_name, validate_month
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.trend")


class VarianceTrend(str, Enum):
    """Direction of recent budget performance."""

    STABLE = "Stable"
    UNDER_BUDGET = "Under Budget"
    OVER_BUDGET = "Over Budget"
    IMPROVING = "Improving"
    WORSENING = "Worsening"


@dataclass(frozen=True)
class TrendThresholds:
    """Percentage-point thresholds used by the classifier."""

    stable_band: Decimal = Decimal("5")
    change_threshold: Decimal = Decimal("2")
    stable_current: Decimal = Decimal("10")


@dataclass(frozen=True)
class TrendPoint:
    """One month of the cumulative budget vs. counted series."""

    month: int
    label: str
    mode: MonthMode
    budget: Decimal
    counted: Decimal
    adjusted: Decimal
    cumulative_budget: Decimal
    cumulative_adjusted: Decimal

    @property
    def cumulative_variance(self) -> Decimal:
        return signed_variance(self.cumulative_adjusted, self.cumulative_budget)


def _check_elapsed(month: int, year: int) -> int:
    if month == 0 and not isinstance(month, bool):
        return 0
    return validate_month(month, year)


def _cumulative_percent(entries: tuple[BudgetEntry, ...], through: int) -> Decimal:
    budget = ZERO
    actual = ZERO
    for entry in entries:
        if entry.month <= through:
            budget += entry.budget_amount
            actual += entry.actual_or_zero
    return variance_percent(signed_variance(actual, budget), budget)


def cumulative_variance_percents(
    entries: Iterable[BudgetEntry],
    year: int,
    through_month: int,
    categories: Sequence[BudgetCategory] | None = None,
) -> tuple[Decimal, ...]:
    """
    Cumulative variance percent through each of the last up-to-3 months.

    The window is months max(1, through_month - 2) .. through_month, oldest
    first.  An empty tuple is returned when through_month is 0.  With
    ``categories``, only entries the rollup would count take part.
    """
    through_month = _check_elapsed(through_month, year)
    year_entries = entries_in_scope(entries, year, categories)
    return tuple(
        _cumulative_percent(year_entries, month)
        for month in range(max(1, through_month - 2), through_month + 1)
    )


def _by_sign(percent: Decimal) -> VarianceTrend:
    return VarianceTrend.UNDER_BUDGET if percent > ZERO else VarianceTrend.OVER_BUDGET


@traced_engine("trend", "1.0", fingerprint_fields=("year", "current_month"))
def classify_variance_trend(
    entries: Iterable[BudgetEntry],
    year: int,
    current_month: int,
    thresholds: TrendThresholds | None = None,
    categories: Sequence[BudgetCategory] | None = None,
) -> VarianceTrend:
    """
    Classify the variance trend of ``year`` as of ``current_month``.

    ``current_month`` is the last elapsed month (0 when nothing has elapsed).
    """
    thresholds = thresholds or TrendThresholds()
    percents = cumulative_variance_percents(entries, year, current_month, categories)

    if len(percents) < 2:
        current = percents[-1] if percents else ZERO
        trend = (
            VarianceTrend.STABLE
            if abs(current) < thresholds.stable_band
            else _by_sign(current)
        )
    else:
        previous, current = percents[-2], percents[-1]
        change = current - previous
        if change > thresholds.change_threshold:
            trend = VarianceTrend.IMPROVING
        elif change < -thresholds.change_threshold:
            trend = VarianceTrend.WORSENING
        elif abs(current) < thresholds.stable_current:
            trend = VarianceTrend.STABLE
        else:
            trend = _by_sign(current)

    logger.debug("variance_trend_classified", extra={
        "year": year,
        "current_month": current_month,
        "percents": [str(p) for p in percents],
        "trend": trend.value,
    })
    return trend


def build_trend_series(
    entries: Iterable[BudgetEntry],
    forecast_modes: ForecastModes,
    year: int,
    categories: Sequence[BudgetCategory] | None = None,
) -> tuple[TrendPoint, ...]:
    """
    Twelve cumulative points for ``year``.

    Each month's raw totals are resolved under that month's own mode, so a
    Final month contributes its adjusted actual and a Forecast month its
    adjusted reforecast.
    """
    per_month: dict[int, Totals] = {month: Totals() for month in MONTHS}
    for entry in entries_in_scope(entries, year, categories):
        per_month[entry.month] = per_month[entry.month] + Totals(
            budget=entry.budget_amount,
            actual=entry.actual_or_zero,
            reforecast=entry.reforecast_or_zero,
            adjustments=entry.adjustment_amount,
        )

    points: list[TrendPoint] = []
    cumulative_budget = ZERO
    cumulative_adjusted = ZERO
    for month in MONTHS:
        tracking = resolve_budget_tracking(
            per_month[month], forecast_modes.is_final(year, month)
        )
        cumulative_budget += tracking.budget
        cumulative_adjusted += tracking.adjusted
        points.append(TrendPoint(
            month=month,
            label=month_name(month)[:3],
            mode=tracking.mode,
            budget=tracking.budget,
            counted=tracking.counted,
            adjusted=tracking.adjusted,
            cumulative_budget=cumulative_budget,
            cumulative_adjusted=cumulative_adjusted,
        ))
    return tuple(points)
