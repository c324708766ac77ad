"""
Module: budget_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for higher layers (budget_services, presentation collaborators).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import budget_kernel.domain, budget_kernel.exceptions,
    budget_kernel.logging_config (and sibling engine modules).
    MUST NOT import budget_services or budget_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      "Elapsed" always means the last month with actuals, derived from
      the inputs.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs;
      nothing is cached between calls.
    - Forecast modes are passed explicitly into every call that needs
      them; mode branching happens only in ``budget_engines.tracking``.

Failure modes:
    - Typed ``BudgetKernelError`` subclasses for caller precondition
      violations (duplicate entries, months outside 1..12).
    - Missing data never raises; it aggregates to zero.

Tracing:
    Top-level engine invocations are traced via ``@traced_engine``
    (see ``budget_engines.tracer``), emitting BUDGET_ENGINE_TRACE log
    records with engine name, version, input fingerprint, and duration.

Usage:
    from budget_engines import (
        calculate_monthly_data,
        calculate_ytd_data,
        compute_full_year_forecast,
        compute_kpis,
    )
"""

from budget_kernel.logging_config import get_logger

logger = get_logger("engines")

from budget_engines.alerts import (
    AlertSeverity,
    AlertThresholds,
    BudgetAlert,
    generate_alerts,
    top_variance_categories,
)
from budget_engines.forecast import (
    QuarterlySummary,
    QuarterTracking,
    calculate_quarterly_summary,
    calculate_yearly_quarters,
    compute_full_year_forecast,
    summarize_quarter,
)
from budget_engines.kpi import KPIBundle, compute_kpis
from budget_engines.rollup import (
    CategoryGroup,
    CategoryShare,
    CategorySummary,
    MonthlyData,
    PeriodData,
    SubCategoryGroup,
    Totals,
    calculate_category_shares,
    calculate_monthly_data,
    calculate_monthly_series,
    calculate_period_data,
    entries_in_scope,
    index_entries,
    signed_variance,
    variance_percent,
)
from budget_engines.runway import (
    RunwayProjection,
    RunwaySettings,
    compute_compensation_runway,
    project_runway,
)
from budget_engines.tracer import compute_input_fingerprint, traced_engine
from budget_engines.tracking import BudgetTracking, resolve_budget_tracking
from budget_engines.trend import (
    TrendPoint,
    TrendThresholds,
    VarianceTrend,
    build_trend_series,
    classify_variance_trend,
    cumulative_variance_percents,
)
from budget_engines.ytd import (
    YTDResult,
    calculate_ytd_data,
    find_last_month_with_actuals,
    month_name,
    ytd_label,
)

__all__ = [
    # Alerts
    "AlertSeverity",
    "AlertThresholds",
    "BudgetAlert",
    "generate_alerts",
    "top_variance_categories",
    # Forecast
    "QuarterlySummary",
    "QuarterTracking",
    "calculate_quarterly_summary",
    "calculate_yearly_quarters",
    "compute_full_year_forecast",
    "summarize_quarter",
    # KPI
    "KPIBundle",
    "compute_kpis",
    # Rollup
    "CategoryGroup",
    "CategoryShare",
    "CategorySummary",
    "MonthlyData",
    "PeriodData",
    "SubCategoryGroup",
    "Totals",
    "calculate_category_shares",
    "calculate_monthly_data",
    "calculate_monthly_series",
    "calculate_period_data",
    "entries_in_scope",
    "index_entries",
    "signed_variance",
    "variance_percent",
    # Runway
    "RunwayProjection",
    "RunwaySettings",
    "compute_compensation_runway",
    "project_runway",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
    # Tracking
    "BudgetTracking",
    "resolve_budget_tracking",
    # Trend
    "TrendPoint",
    "TrendThresholds",
    "VarianceTrend",
    "build_trend_series",
    "classify_variance_trend",
    "cumulative_variance_percents",
    # YTD
    "YTDResult",
    "calculate_ytd_data",
    "find_last_month_with_actuals",
    "month_name",
    "ytd_label",
]
