"""
budget_engines.forecast -- Quarterly and full-year forecast rollup.

Responsibility:
    Combine monthly rollups into quarters and a whole-year projection,
    honouring the Final / Forecast boundary month by month.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Uses budget_engines.rollup for monthly data and
    budget_engines.tracking for every mode decision.
    ``compute_full_year_forecast`` is the single source of the full-year
    forecast figure; the KPI bundle and the dashboard both call it.

Invariants enforced:
    - Each month is resolved with its own Final flag.
    - Quarter actual accumulates Final months only; quarter reforecast
      accumulates Forecast months only; budget and variance always.
    - contribution = actual + (0 if every month is Final else reforecast).
      Leftover reforecast figures on a fully closed quarter are ignored.
    - Full-year forecast = sum of the four quarter contributions.

Failure modes:
    - InvalidQuarterError for a quarter outside 1..4.
    - InvalidPeriodError when ``summarize_quarter`` is not given one of
      the quarter's months.
    - NotMonthlyRollupError when ``summarize_quarter`` is given a rollup
      covering zero or several months.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from budget_engines.rollup import (
    MonthlyData,
    Totals,
    calculate_monthly_series,
    variance_percent,
)
from budget_engines.tracer import traced_engine
from budget_engines.tracking import BudgetTracking, resolve_budget_tracking
from budget_kernel.domain.entries import ZERO, BudgetCategory, BudgetEntry
from budget_kernel.domain.forecast_modes import ForecastModes
from budget_kernel.domain.periods import QUARTERS, quarter_months
from budget_kernel.exceptions import InvalidPeriodError, NotMonthlyRollupError
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.forecast")


@dataclass(frozen=True)
class QuarterTracking:
    """Mode-aware quarter totals accumulated from resolved months."""

    budget: Decimal
    actual: Decimal
    reforecast: Decimal
    variance: Decimal

    @property
    def variance_percent(self) -> Decimal:
        return variance_percent(self.variance, self.budget)


@dataclass(frozen=True)
class QuarterlySummary:
    """Three monthly rollups, their raw sums and the mode-aware tracking view."""

    year: int
    quarter: int
    months: tuple[MonthlyData, MonthlyData, MonthlyData]
    resolved_months: tuple[BudgetTracking, BudgetTracking, BudgetTracking]
    cost_of_sales: Totals
    opex: Totals
    net_total: Totals
    budget_tracking: QuarterTracking
    all_final: bool
    forecast_contribution: Decimal

    @property
    def cost_of_sales_adjustments(self) -> Decimal:
        return self.cost_of_sales.adjustments

    @property
    def opex_adjustments(self) -> Decimal:
        return self.opex.adjustments


def summarize_quarter(
    monthly_data: Iterable[MonthlyData],
    forecast_modes: ForecastModes,
    year: int,
    quarter: int,
) -> QuarterlySummary:
    """
    Summarize ``quarter`` from already computed monthly rollups.

    ``monthly_data`` may hold any months of the year; the quarter's three
    are picked out by ``.month``.  Every item must be a one-month rollup.
    """
    wanted = quarter_months(quarter)
    by_month: dict[int, MonthlyData] = {}
    for data in monthly_data:
        if len(data.months) != 1:
            raise NotMonthlyRollupError(data.months, year)
        by_month[data.month] = data

    months: list[MonthlyData] = []
    for month in wanted:
        if month not in by_month:
            raise InvalidPeriodError(month, year)
        months.append(by_month[month])

    actual = ZERO
    reforecast = ZERO
    budget = ZERO
    variance = ZERO
    resolved: list[BudgetTracking] = []

    for data in months:
        is_final = forecast_modes.is_final(year, data.month)
        tracking = resolve_budget_tracking(data.net_total, is_final)
        resolved.append(tracking)

        if is_final:
            actual += tracking.actual
        else:
            reforecast += tracking.reforecast
        budget += tracking.budget
        variance += tracking.variance

    all_final = all(forecast_modes.is_final(year, m) for m in wanted)
    contribution = actual + (ZERO if all_final else reforecast)

    logger.debug("quarter_summarized", extra={
        "year": year,
        "quarter": quarter,
        "all_final": all_final,
        "forecast_contribution": str(contribution),
    })

    return QuarterlySummary(
        year=year,
        quarter=quarter,
        months=tuple(months),
        resolved_months=tuple(resolved),
        cost_of_sales=Totals.sum_of(m.cost_of_sales.total for m in months),
        opex=Totals.sum_of(m.opex.total for m in months),
        net_total=Totals.sum_of(m.net_total for m in months),
        budget_tracking=QuarterTracking(
            budget=budget,
            actual=actual,
            reforecast=reforecast,
            variance=variance,
        ),
        all_final=all_final,
        forecast_contribution=contribution,
    )


def calculate_quarterly_summary(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    forecast_modes: ForecastModes,
    year: int,
    quarter: int,
) -> QuarterlySummary:
    """Rollup and summarize one quarter straight from entries."""
    monthly = calculate_monthly_series(entries, categories, year)
    return summarize_quarter(monthly, forecast_modes, year, quarter)


def calculate_yearly_quarters(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    forecast_modes: ForecastModes,
    year: int,
) -> tuple[QuarterlySummary, ...]:
    """All four quarter summaries of ``year`` from a single monthly pass."""
    monthly = calculate_monthly_series(entries, categories, year)
    return tuple(
        summarize_quarter(monthly, forecast_modes, year, quarter)
        for quarter in QUARTERS
    )


@traced_engine("forecast", "1.0", fingerprint_fields=("forecast_modes", "year"))
def compute_full_year_forecast(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    forecast_modes: ForecastModes,
    year: int,
) -> Decimal:
    """
    Full-year forecast: the sum of the four quarter contributions.

    Every caller that needs a full-year forecast figure uses this function.
    """
    quarters = calculate_yearly_quarters(entries, categories, forecast_modes, year)
    total = sum((q.forecast_contribution for q in quarters), ZERO)

    logger.info("full_year_forecast_computed", extra={
        "year": year,
        "final_months": len(forecast_modes.final_months(year)),
        "full_year_forecast": str(total),
    })
    return total
