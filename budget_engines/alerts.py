"""
budget_engines.alerts -- Category alerts and top variances.

Responsibility:
    Flag categories whose full-year variance is large, and categories with
    a budget but no actual spend yet; rank categories by absolute variance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Reads one full-year rollup from budget_engines.rollup.

Invariants enforced:
    - A variance alert needs BOTH |variance %| > variance_percent and
      |variance| > variance_amount; above danger_percent it is "danger",
      otherwise "warning".
    - A category with budget != 0 and actual == 0 yields an "info" alert.
    - Alerts are ordered danger, warning, info; configured category order
      is kept within a severity.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from budget_engines.rollup import CategorySummary, calculate_period_data
from budget_engines.tracer import traced_engine
from budget_kernel.domain.entries import ZERO, BudgetCategory, BudgetEntry
from budget_kernel.domain.periods import MONTHS
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.alerts")


class AlertSeverity(str, Enum):
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    AlertSeverity.DANGER: 0,
    AlertSeverity.WARNING: 1,
    AlertSeverity.INFO: 2,
}


@dataclass(frozen=True)
class AlertThresholds:
    variance_percent: Decimal = Decimal("15")
    variance_amount: Decimal = Decimal("50000")
    danger_percent: Decimal = Decimal("25")


@dataclass(frozen=True)
class BudgetAlert:
    """One alert line for a category."""

    id: str
    severity: AlertSeverity
    category_id: str
    category_name: str
    message: str
    amount: Decimal


def _variance_alert(
    summary: CategorySummary,
    thresholds: AlertThresholds,
) -> BudgetAlert | None:
    percent = abs(summary.variance_percent)
    if percent <= thresholds.variance_percent:
        return None
    if abs(summary.variance) <= thresholds.variance_amount:
        return None

    severity = (
        AlertSeverity.DANGER
        if percent > thresholds.danger_percent
        else AlertSeverity.WARNING
    )
    return BudgetAlert(
        id=f"variance-{summary.category_id}",
        severity=severity,
        category_id=summary.category_id,
        category_name=summary.category_name,
        message=f"{percent:.1f}% variance from budget",
        amount=summary.variance,
    )


def _no_actuals_alert(summary: CategorySummary) -> BudgetAlert | None:
    if summary.budget == ZERO or summary.actual != ZERO:
        return None
    return BudgetAlert(
        id=f"no-actuals-{summary.category_id}",
        severity=AlertSeverity.INFO,
        category_id=summary.category_id,
        category_name=summary.category_name,
        message="No actual expenses recorded yet",
        amount=summary.budget,
    )


@traced_engine("alerts", "1.0", fingerprint_fields=("year", "thresholds"))
def generate_alerts(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    year: int,
    thresholds: AlertThresholds | None = None,
) -> tuple[BudgetAlert, ...]:
    """Alerts for every category over the whole of ``year``."""
    thresholds = thresholds or AlertThresholds()
    data = calculate_period_data(entries, categories, year, MONTHS)

    alerts: list[BudgetAlert] = []
    for group in data.groups:
        for summary in group.all_categories():
            for alert in (_variance_alert(summary, thresholds), _no_actuals_alert(summary)):
                if alert is not None:
                    alerts.append(alert)

    # sorted() is stable, so category order survives within a severity
    ordered = tuple(sorted(alerts, key=lambda a: a.severity.rank))

    logger.info("alerts_generated", extra={
        "year": year,
        "danger": sum(1 for a in ordered if a.severity is AlertSeverity.DANGER),
        "warning": sum(1 for a in ordered if a.severity is AlertSeverity.WARNING),
        "info": sum(1 for a in ordered if a.severity is AlertSeverity.INFO),
    })
    return ordered


def top_variance_categories(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    year: int,
    count: int = 5,
) -> tuple[CategorySummary, ...]:
    """
    The ``count`` categories with the largest absolute full-year variance.

    Categories with neither budget nor actual spend are left out.
    """
    data = calculate_period_data(entries, categories, year, MONTHS)
    active = [
        summary
        for group in data.groups
        for summary in group.all_categories()
        if summary.budget != ZERO or summary.actual != ZERO
    ]
    active.sort(key=lambda s: abs(s.variance), reverse=True)
    return tuple(active[:max(count, 0)])
