"""
budget_engines.runway -- Compensation runway projector.

Responsibility:
    Extrapolate compensation spend to year end from recent velocity, and
    derive how much of the remaining compensation budget could fund new
    hires.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    ``project_runway`` is pure arithmetic over already aggregated figures;
    ``compute_compensation_runway`` derives those figures from entries via
    budget_engines.rollup and budget_engines.ytd.

Invariants enforced:
    - net_available = annual_budget - ytd_actual.
    - last_three_month_average = mean actual of months L-2..L when L >= 3,
      else ytd_actual / L (0 when L = 0), where L = last_month_with_actuals.
    - remaining_months = 12 - L.
    - projected_remaining_spend = last_three_month_average * remaining_months.
    - budget_vs_projection = (projected_total_spend - annual_budget) * -1;
      negative means projected over budget.
    - A zero velocity never divides: projected remaining spend is 0 and the
      runway is reported as the configured cap.

Failure modes:
    - InvalidPeriodError when last_month_with_actuals is outside 0..12.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from budget_engines.rollup import calculate_period_data, signed_variance
from budget_engines.tracer import traced_engine
from budget_engines.ytd import calculate_ytd_data
from budget_kernel.domain.entries import ZERO, BudgetCategory, BudgetEntry
from budget_kernel.domain.forecast_modes import ForecastModes
from budget_kernel.domain.periods import MONTHS, validate_month
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.runway")

TRAILING_WINDOW = 3


@dataclass(frozen=True)
class RunwaySettings:
    """Hiring-capacity assumptions."""

    hiring_share: Decimal = Decimal("0.75")
    average_hire_cost: Decimal = Decimal("120000")
    runway_cap: Decimal = Decimal("12")


@dataclass(frozen=True)
class RunwayProjection:
    """Projected compensation spend and hiring capacity for one year."""

    ytd_actual: Decimal
    annual_budget: Decimal
    last_month_with_actuals: int
    net_available: Decimal
    burn_rate: Decimal
    last_three_month_average: Decimal
    remaining_months: int
    projected_remaining_spend: Decimal
    projected_total_spend: Decimal
    budget_vs_projection: Decimal
    is_projected_over_budget: bool
    months_of_runway: Decimal
    estimated_hiring_budget: Decimal
    potential_new_hires: int


def _trailing_average(
    ytd_actual: Decimal,
    last_month: int,
    monthly_actuals: Mapping[int, Decimal],
) -> Decimal:
    if last_month >= TRAILING_WINDOW:
        window = range(last_month - TRAILING_WINDOW + 1, last_month + 1)
        total = sum((monthly_actuals.get(m, ZERO) for m in window), ZERO)
        return total / TRAILING_WINDOW
    if last_month == 0:
        return ZERO
    return ytd_actual / last_month


def project_runway(
    ytd_actual: Decimal,
    annual_budget: Decimal,
    last_month_with_actuals: int,
    monthly_actuals: Mapping[int, Decimal],
    settings: RunwaySettings | None = None,
) -> RunwayProjection:
    """
    Project year-end spend from the trailing velocity.

    Args:
        ytd_actual: Actual spend for months 1..last_month_with_actuals.
        annual_budget: Full-year budget of the same categories.
        last_month_with_actuals: Last elapsed month (0..12).
        monthly_actuals: Month -> actual spend; missing months count as 0.
        settings: Hiring assumptions; defaults when omitted.
    """
    settings = settings or RunwaySettings()
    last_month = last_month_with_actuals
    if last_month != 0 or isinstance(last_month, bool):
        validate_month(last_month)

    net_available = annual_budget - ytd_actual
    burn_rate = ytd_actual / last_month if last_month > 0 else ZERO
    average = _trailing_average(ytd_actual, last_month, monthly_actuals)
    remaining_months = 12 - last_month

    if average == ZERO:
        projected_remaining = ZERO
        months_of_runway = settings.runway_cap
    else:
        projected_remaining = average * remaining_months
        months_of_runway = net_available / average

    projected_total = ytd_actual + projected_remaining
    budget_vs_projection = signed_variance(projected_total, annual_budget)

    hiring_budget = net_available * settings.hiring_share
    if settings.average_hire_cost > ZERO:
        potential_hires = max(0, math.floor(hiring_budget / settings.average_hire_cost))
    else:
        potential_hires = 0

    return RunwayProjection(
        ytd_actual=ytd_actual,
        annual_budget=annual_budget,
        last_month_with_actuals=last_month,
        net_available=net_available,
        burn_rate=burn_rate,
        last_three_month_average=average,
        remaining_months=remaining_months,
        projected_remaining_spend=projected_remaining,
        projected_total_spend=projected_total,
        budget_vs_projection=budget_vs_projection,
        is_projected_over_budget=budget_vs_projection < ZERO,
        months_of_runway=months_of_runway,
        estimated_hiring_budget=hiring_budget,
        potential_new_hires=potential_hires,
    )


@traced_engine("runway", "1.0", fingerprint_fields=("forecast_modes", "year", "subgroup_id"))
def compute_compensation_runway(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    forecast_modes: ForecastModes,
    year: int,
    subgroup_id: str = "comp-and-benefits",
    settings: RunwaySettings | None = None,
) -> RunwayProjection:
    """
    Runway for every category of the compensation subgroup.

    An unknown or empty subgroup projects from zeros.
    """
    entries = tuple(entries)
    member_ids = frozenset(
        c.id for c in categories
        if c.subgroup is not None and c.subgroup.id == subgroup_id
    )

    ytd = calculate_ytd_data(entries, categories, forecast_modes, year)
    ytd_subgroup = ytd.data.find_subgroup(subgroup_id)
    ytd_actual = ytd_subgroup.total.actual if ytd_subgroup is not None else ZERO

    full_year = calculate_period_data(entries, categories, year, MONTHS)
    year_subgroup = full_year.find_subgroup(subgroup_id)
    annual_budget = year_subgroup.total.budget if year_subgroup is not None else ZERO

    monthly_actuals: dict[int, Decimal] = {}
    for entry in entries:
        if entry.year == year and entry.category_id in member_ids:
            monthly_actuals[entry.month] = (
                monthly_actuals.get(entry.month, ZERO) + entry.actual_or_zero
            )

    projection = project_runway(
        ytd_actual,
        annual_budget,
        ytd.last_month_with_actuals,
        monthly_actuals,
        settings,
    )

    logger.info("compensation_runway_projected", extra={
        "year": year,
        "subgroup_id": subgroup_id,
        "net_available": str(projection.net_available),
        "budget_vs_projection": str(projection.budget_vs_projection),
        "is_projected_over_budget": projection.is_projected_over_budget,
    })
    return projection
