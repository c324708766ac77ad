"""
budget_engines.tracking -- Forecast mode resolver ("budget tracking").

Responsibility:
    Turn one period's raw totals plus its Final / Forecast flag into the
    single counted figure, the adjusted figure, and a variance against
    budget.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    This is the ONLY place in the codebase that branches on month mode.
    Every higher-level rollup (quarter, full year, KPI, trend series)
    calls ``resolve_budget_tracking`` instead of re-deriving the branch.

Invariants enforced:
    - Final: counted = raw actual.  Forecast: counted = raw reforecast.
    - adjusted = counted - adjustments (subtract-only; a negative
      adjustment therefore adds).
    - The slot matching the mode carries the adjusted figure; the other
      slot keeps its raw value for display.
    - variance = (adjusted - budget) * -1; budget always populated.

Failure modes:
    - None.  Every input combination resolves.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from budget_engines.rollup import Totals, signed_variance, variance_percent
from budget_kernel.domain.forecast_modes import MonthMode


@dataclass(frozen=True)
class BudgetTracking:
    """Resolved view of one period (or one aggregate) under a month mode."""

    budget: Decimal
    actual: Decimal
    reforecast: Decimal
    variance: Decimal
    counted: Decimal
    adjusted: Decimal
    mode: MonthMode

    @property
    def is_final(self) -> bool:
        return self.mode is MonthMode.FINAL

    @property
    def variance_percent(self) -> Decimal:
        return variance_percent(self.variance, self.budget)


def resolve_budget_tracking(net_total: Totals, is_final: bool) -> BudgetTracking:
    """
    Resolve ``net_total`` under the given month mode.

    Args:
        net_total: Raw budget / actual / reforecast / adjustments.
        is_final: True when the period is closed.

    Returns:
        BudgetTracking with the mode's slot holding the adjusted figure.
    """
    mode = MonthMode.from_flag(is_final)

    if mode is MonthMode.FINAL:
        counted = net_total.actual
    else:
        counted = net_total.reforecast

    adjusted = counted - net_total.adjustments

    return BudgetTracking(
        budget=net_total.budget,
        actual=adjusted if mode is MonthMode.FINAL else net_total.actual,
        reforecast=adjusted if mode is MonthMode.FORECAST else net_total.reforecast,
        variance=signed_variance(adjusted, net_total.budget),
        counted=counted,
        adjusted=adjusted,
        mode=mode,
    )
