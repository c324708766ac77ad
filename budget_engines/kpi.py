"""
budget_engines.kpi -- Executive KPI bundle.

Responsibility:
    Assemble the headline figures for one year: YTD performance against
    budget, progress against the annual target, the full-year forecast,
    burn rate, months of budget remaining and the variance trend.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes ytd, tracking, forecast and trend.  The full-year forecast
    comes from ``compute_full_year_forecast`` and nowhere else.

Invariants enforced:
    - ytd_actual is the YTD net total resolved as a Final period, so
      adjustments are netted.
    - Elapsed months = last_month_with_actuals; the clock is never read.
    - Percentages against a zero base are 0.
    - months_remaining is 0 once the target is exhausted, and the runway
      cap when nothing has been spent.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from budget_engines.forecast import compute_full_year_forecast
from budget_engines.rollup import HUNDRED, signed_variance, variance_percent
from budget_engines.tracer import traced_engine
from budget_engines.tracking import resolve_budget_tracking
from budget_engines.trend import TrendThresholds, VarianceTrend, classify_variance_trend
from budget_engines.ytd import calculate_ytd_data
from budget_kernel.domain.entries import ZERO, BudgetCategory, BudgetEntry
from budget_kernel.domain.forecast_modes import ForecastModes
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.kpi")

MONTHS_PER_YEAR = Decimal("12")


@dataclass(frozen=True)
class KPIBundle:
    """Headline figures for one year."""

    year: int
    annual_budget_target: Decimal
    ytd_actual: Decimal
    ytd_budget: Decimal
    variance: Decimal
    variance_percent: Decimal
    budget_utilization: Decimal
    target_achievement: Decimal
    full_year_forecast: Decimal
    forecast_vs_target_variance: Decimal
    remaining_budget: Decimal
    annual_variance: Decimal
    annual_variance_percent: Decimal
    burn_rate: Decimal
    months_remaining: Decimal
    variance_trend: VarianceTrend
    last_month_with_actuals: int


def _percent_of(part: Decimal, whole: Decimal) -> Decimal:
    return part / whole * HUNDRED if whole > ZERO else ZERO


@traced_engine("kpi", "1.0", fingerprint_fields=("forecast_modes", "yearly_targets", "year"))
def compute_kpis(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    forecast_modes: ForecastModes,
    yearly_targets: Mapping[int, Decimal],
    year: int,
    trend_thresholds: TrendThresholds | None = None,
    runway_cap: Decimal = MONTHS_PER_YEAR,
) -> KPIBundle:
    """Compute the KPI bundle for ``year``."""
    entries = tuple(entries)
    target = yearly_targets.get(year, ZERO)

    ytd = calculate_ytd_data(entries, categories, forecast_modes, year)
    elapsed = ytd.last_month_with_actuals
    tracking = resolve_budget_tracking(ytd.data.net_total, is_final=True)
    ytd_actual = tracking.adjusted
    ytd_budget = ytd.data.net_total.budget

    variance = signed_variance(ytd_actual, ytd_budget)
    full_year = compute_full_year_forecast(entries, categories, forecast_modes, year)
    remaining = target - ytd_actual

    expected_to_date = target * elapsed / MONTHS_PER_YEAR
    burn_rate = ytd_actual / elapsed if elapsed > 0 else ZERO

    if remaining <= ZERO:
        months_remaining = ZERO
    elif burn_rate <= ZERO:
        months_remaining = runway_cap
    else:
        months_remaining = remaining / burn_rate

    annual_variance = signed_variance(ytd_actual, target)

    bundle = KPIBundle(
        year=year,
        annual_budget_target=target,
        ytd_actual=ytd_actual,
        ytd_budget=ytd_budget,
        variance=variance,
        variance_percent=variance_percent(variance, ytd_budget),
        budget_utilization=_percent_of(ytd_actual, target),
        target_achievement=_percent_of(ytd_actual, expected_to_date),
        full_year_forecast=full_year,
        forecast_vs_target_variance=signed_variance(full_year, target),
        remaining_budget=remaining,
        annual_variance=annual_variance,
        annual_variance_percent=variance_percent(annual_variance, target),
        burn_rate=burn_rate,
        months_remaining=months_remaining,
        variance_trend=classify_variance_trend(
            entries, year, elapsed, trend_thresholds, categories
        ),
        last_month_with_actuals=elapsed,
    )

    logger.info("kpis_computed", extra={
        "year": year,
        "ytd_actual": str(bundle.ytd_actual),
        "full_year_forecast": str(bundle.full_year_forecast),
        "variance_trend": bundle.variance_trend.value,
    })
    return bundle
