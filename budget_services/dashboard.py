"""
Year dashboard -- every engine output for one year in a single call.

Responsibility:
    Run each engine once against a snapshot and bundle the results for
    presentation and export collaborators.

Architecture position:
    Services -- orchestration only.  No arithmetic lives here; every figure
    comes from budget_engines.  Engine tunables come from the configuration
    via budget_config.bridges.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from budget_config import get_default_configuration
from budget_config.bridges import (
    build_alert_thresholds,
    build_categories,
    build_runway_settings,
    build_trend_thresholds,
)
from budget_config.schema import BudgetConfiguration
from budget_engines import (
    BudgetAlert,
    CategoryShare,
    CategorySummary,
    KPIBundle,
    MonthlyData,
    QuarterlySummary,
    RunwayProjection,
    TrendPoint,
    YTDResult,
    build_trend_series,
    calculate_category_shares,
    calculate_monthly_series,
    calculate_yearly_quarters,
    calculate_ytd_data,
    compute_compensation_runway,
    compute_kpis,
    generate_alerts,
    top_variance_categories,
)
from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.snapshot import BudgetSnapshot
from budget_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.dashboard")


@dataclass(frozen=True)
class YearDashboard:
    """All engine outputs for one year."""

    year: int
    monthly: tuple[MonthlyData, ...]
    ytd: YTDResult
    quarters: tuple[QuarterlySummary, ...]
    full_year_forecast: Decimal
    kpis: KPIBundle
    runway: RunwayProjection
    trend_series: tuple[TrendPoint, ...]
    alerts: tuple[BudgetAlert, ...]
    top_variances: tuple[CategorySummary, ...]
    ytd_shares: tuple[CategoryShare, ...]


def build_year_dashboard(
    snapshot: BudgetSnapshot,
    year: int | None = None,
    configuration: BudgetConfiguration | None = None,
    top_variance_count: int = 5,
    clock: Clock | None = None,
) -> YearDashboard:
    """
    Compute the dashboard for ``year`` (the clock's current year if omitted).

    The snapshot's categories are used when present; otherwise the
    configuration's category tree is.
    """
    if year is None:
        year = (clock or SystemClock()).current_year()
    configuration = configuration or get_default_configuration()
    categories = snapshot.categories or build_categories(configuration)
    entries = snapshot.entries_for_year(year)
    modes = snapshot.forecast_modes

    with LogContext.bind(fiscal_year=year):
        monthly = calculate_monthly_series(entries, categories, year)
        ytd = calculate_ytd_data(entries, categories, modes, year)
        quarters = calculate_yearly_quarters(entries, categories, modes, year)
        kpis = compute_kpis(
            entries,
            categories,
            modes,
            snapshot.yearly_targets,
            year,
            trend_thresholds=build_trend_thresholds(configuration),
            runway_cap=configuration.runway.runway_cap,
        )
        runway = compute_compensation_runway(
            entries,
            categories,
            modes,
            year,
            subgroup_id=configuration.runway.compensation_subgroup,
            settings=build_runway_settings(configuration),
        )
        alerts = generate_alerts(
            entries, categories, year, build_alert_thresholds(configuration)
        )
        dashboard = YearDashboard(
            year=year,
            monthly=monthly,
            ytd=ytd,
            quarters=quarters,
            full_year_forecast=kpis.full_year_forecast,
            kpis=kpis,
            runway=runway,
            trend_series=build_trend_series(entries, modes, year, categories),
            alerts=alerts,
            top_variances=top_variance_categories(
                entries, categories, year, top_variance_count
            ),
            ytd_shares=tuple(
                share
                for group in ytd.data.groups
                for share in calculate_category_shares(group)
            ),
        )

        logger.info("year_dashboard_built", extra={
            "year": year,
            "through": ytd.through_label,
            "alert_count": len(alerts),
            "full_year_forecast": str(dashboard.full_year_forecast),
        })
    return dashboard
