"""
Tests for the executive KPI bundle.

Covers:
- YTD figures netted of adjustments
- Target-relative percentages and zero-target guards
- Full-year forecast consistency
- Months remaining edge cases
"""

from decimal import Decimal

from budget_engines.forecast import compute_full_year_forecast
from budget_engines.kpi import compute_kpis
from budget_engines.trend import VarianceTrend
from budget_kernel.domain.forecast_modes import ForecastModes

YEAR = 2025


class TestKPIBundle:

    def setup_method(self):
        self.modes = ForecastModes.of([(YEAR, m) for m in (1, 2, 3)])
        self.targets = {YEAR: Decimal("1200")}

    def _entries(self, make_entry):
        entries = []
        for month in range(1, 13):
            if month <= 3:
                entries.append(make_entry(
                    "cos-software", month, budget=100, actual=110,
                    adjustment=30 if month == 3 else 0,
                ))
            else:
                entries.append(make_entry("cos-software", month, budget=100, reforecast=95))
        return entries

    def test_ytd_figures(self, categories, make_entry):
        kpis = compute_kpis(self._entries(make_entry), categories, self.modes, self.targets, YEAR)

        assert kpis.last_month_with_actuals == 3
        assert kpis.ytd_actual == Decimal("300")
        assert kpis.ytd_budget == Decimal("300")
        assert kpis.variance == Decimal("0")
        assert kpis.variance_percent == Decimal("0")

    def test_target_figures(self, categories, make_entry):
        kpis = compute_kpis(self._entries(make_entry), categories, self.modes, self.targets, YEAR)

        assert kpis.annual_budget_target == Decimal("1200")
        assert kpis.budget_utilization == Decimal("25")
        assert kpis.target_achievement == Decimal("100")
        assert kpis.remaining_budget == Decimal("900")
        assert kpis.annual_variance == Decimal("900")
        assert kpis.annual_variance_percent == Decimal("75")

    def test_forecast_matches_forecast_engine(self, categories, make_entry):
        entries = self._entries(make_entry)

        kpis = compute_kpis(entries, categories, self.modes, self.targets, YEAR)

        assert kpis.full_year_forecast == compute_full_year_forecast(
            entries, categories, self.modes, YEAR
        )
        assert kpis.full_year_forecast == Decimal("1155")
        assert kpis.forecast_vs_target_variance == Decimal("45")

    def test_burn_and_months_remaining(self, categories, make_entry):
        kpis = compute_kpis(self._entries(make_entry), categories, self.modes, self.targets, YEAR)

        assert kpis.burn_rate == Decimal("100")
        assert kpis.months_remaining == Decimal("9")

    def test_trend_uses_raw_actuals(self, categories, make_entry):
        kpis = compute_kpis(self._entries(make_entry), categories, self.modes, self.targets, YEAR)

        assert kpis.variance_trend is VarianceTrend.OVER_BUDGET

    def test_unconfigured_entries_do_not_stretch_elapsed_months(self, categories, make_entry):
        entries = [make_entry("cos-software", m, budget=100, actual=100) for m in (1, 2, 3)]
        entries.append(make_entry("not-configured", 2, budget=100))
        entries.append(make_entry("not-configured", 9, budget=100))

        kpis = compute_kpis(entries, categories, ForecastModes.empty(), self.targets, YEAR)

        assert kpis.last_month_with_actuals == 3
        assert kpis.burn_rate == Decimal("100")
        assert kpis.variance_trend is VarianceTrend.STABLE


class TestKPIGuards:

    def test_missing_target_zeroes_percentages(self, categories, make_entry):
        entries = [make_entry("cos-software", 1, budget=100, actual=100)]

        kpis = compute_kpis(entries, categories, ForecastModes.empty(), {}, YEAR)

        assert kpis.annual_budget_target == Decimal("0")
        assert kpis.budget_utilization == Decimal("0")
        assert kpis.target_achievement == Decimal("0")
        assert kpis.annual_variance_percent == Decimal("0")
        assert kpis.months_remaining == Decimal("0")

    def test_nothing_spent_reports_cap(self, categories):
        kpis = compute_kpis(
            [], categories, ForecastModes.empty(), {YEAR: Decimal("1200")}, YEAR,
            runway_cap=Decimal("18"),
        )

        assert kpis.last_month_with_actuals == 0
        assert kpis.burn_rate == Decimal("0")
        assert kpis.months_remaining == Decimal("18")
        assert kpis.variance_trend is VarianceTrend.STABLE

    def test_exhausted_target(self, categories, make_entry):
        entries = [make_entry("cos-software", 1, budget=100, actual=300)]
        modes = ForecastModes.of([(YEAR, 1)])

        kpis = compute_kpis(entries, categories, modes, {YEAR: Decimal("100")}, YEAR)

        assert kpis.remaining_budget == Decimal("-200")
        assert kpis.months_remaining == Decimal("0")
