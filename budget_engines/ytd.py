"""
budget_engines.ytd -- Year-to-date window calculator.

Responsibility:
    Decide which months of a year count as "to date" and aggregate exactly
    those months.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Builds on budget_engines.rollup; feeds kpi, runway and the dashboard.

Invariants enforced:
    - last_month_with_actuals is the highest Final month (scanning 12 -> 1).
      With no Final month it falls back to the highest month holding an
      entry of a configured category with actual > 0 or budget > 0, and to
      0 when there is none.
    - The YTD aggregate covers months 1..last_month_with_actuals only;
      later months are excluded even when they carry entries.

Failure modes:
    - A year with no qualifying month yields an all-zero aggregate with
      last_month_with_actuals = 0 and the label "Current".
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from budget_engines.rollup import PeriodData, calculate_period_data, entries_in_scope
from budget_engines.tracer import traced_engine
from budget_kernel.domain.entries import ZERO, BudgetCategory, BudgetEntry
from budget_kernel.domain.forecast_modes import ForecastModes
from budget_kernel.domain.periods import MONTHS, month_name
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.ytd")

__all__ = [
    "YTDResult",
    "calculate_ytd_data",
    "find_last_month_with_actuals",
    "month_name",
    "ytd_label",
]


@dataclass(frozen=True)
class YTDResult:
    """YTD aggregate plus the cutoff month it was computed through."""

    data: PeriodData
    last_month_with_actuals: int
    through_label: str


def ytd_label(last_month_with_actuals: int) -> str:
    """'YTD through March', or 'Current' when no month has elapsed."""
    if last_month_with_actuals == 0:
        return "Current"
    return f"YTD through {month_name(last_month_with_actuals)}"


def find_last_month_with_actuals(
    entries: Iterable[BudgetEntry],
    forecast_modes: ForecastModes,
    year: int,
    categories: Sequence[BudgetCategory] | None = None,
) -> int:
    """
    Highest month of ``year`` that counts as elapsed.

    Final flags win over entry data: a Final month 4 makes the answer 4 even
    when months 5..12 hold actuals.  When ``categories`` is given, the entry
    scan ignores categories the rollup would skip.
    """
    for month in reversed(MONTHS):
        if forecast_modes.is_final(year, month):
            return month

    last = 0
    for entry in entries_in_scope(entries, year, categories):
        if entry.has_actuals or entry.budget_amount > ZERO:
            last = max(last, entry.month)
    return last


@traced_engine("ytd", "1.0", fingerprint_fields=("forecast_modes", "year"))
def calculate_ytd_data(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    forecast_modes: ForecastModes,
    year: int,
) -> YTDResult:
    """Aggregate months 1..last_month_with_actuals of ``year``."""
    entries = tuple(entries)
    last_month = find_last_month_with_actuals(entries, forecast_modes, year, categories)

    data = calculate_period_data(entries, categories, year, range(1, last_month + 1))

    logger.info("ytd_calculated", extra={
        "year": year,
        "last_month_with_actuals": last_month,
        "ytd_budget": str(data.net_total.budget),
        "ytd_actual": str(data.net_total.actual),
    })

    return YTDResult(
        data=data,
        last_month_with_actuals=last_month,
        through_label=ytd_label(last_month),
    )
