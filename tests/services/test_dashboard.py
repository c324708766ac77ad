"""
Tests for the year dashboard orchestration.
"""

from decimal import Decimal

from budget_config import get_default_configuration
from budget_engines.forecast import compute_full_year_forecast
from budget_kernel.domain.clock import DeterministicClock
from budget_kernel.domain.forecast_modes import ForecastModes
from budget_kernel.domain.snapshot import BudgetSnapshot
from budget_services.dashboard import build_year_dashboard

YEAR = 2025


class TestYearDashboard:

    def _snapshot(self, categories, make_entry):
        entries = [
            make_entry("cos-software", m, budget=1000, actual=1100 if m <= 2 else None, reforecast=900)
            for m in range(1, 13)
        ]
        entries.append(make_entry("opex-base-pay", 1, budget=5000, actual=4800))
        modes = ForecastModes.of([(YEAR, 1), (YEAR, 2)])
        return BudgetSnapshot.build(entries, categories, modes, {YEAR: Decimal("20000")})

    def test_every_section_present(self, categories, make_entry):
        dashboard = build_year_dashboard(self._snapshot(categories, make_entry), YEAR)

        assert dashboard.year == YEAR
        assert len(dashboard.monthly) == 12
        assert len(dashboard.quarters) == 4
        assert len(dashboard.trend_series) == 12
        assert dashboard.ytd.last_month_with_actuals == 2
        assert dashboard.ytd.through_label == "YTD through February"

    def test_single_full_year_figure(self, categories, make_entry):
        snapshot = self._snapshot(categories, make_entry)

        dashboard = build_year_dashboard(snapshot, YEAR)

        expected = compute_full_year_forecast(
            snapshot.entries, snapshot.categories, snapshot.forecast_modes, YEAR
        )
        assert dashboard.full_year_forecast == expected
        assert dashboard.kpis.full_year_forecast == expected
        assert sum(q.forecast_contribution for q in dashboard.quarters) == expected

    def test_runway_and_top_variances(self, categories, make_entry):
        dashboard = build_year_dashboard(self._snapshot(categories, make_entry), YEAR)

        assert dashboard.runway.ytd_actual == Decimal("4800")
        assert dashboard.top_variances[0].category_id == "cos-software"
        assert {s.category_id for s in dashboard.ytd_shares} == {c.id for c in categories}

    def test_configuration_categories_used_when_snapshot_has_none(self):
        configuration = get_default_configuration()

        dashboard = build_year_dashboard(BudgetSnapshot.build([], []), YEAR, configuration)

        month = dashboard.monthly[0]
        ids = [s.category_id for g in month.groups for s in g.all_categories()]
        assert ids == list(configuration.category_ids())
        assert dashboard.ytd.through_label == "Current"
        assert dashboard.alerts == ()

    def test_logged_with_fiscal_year(self, categories, make_entry, captured_logs):
        build_year_dashboard(self._snapshot(categories, make_entry), YEAR)

        record = next(r for r in captured_logs() if r["message"] == "year_dashboard_built")
        assert record["fiscal_year"] == "2025"
        assert record["year"] == YEAR

    def test_year_defaults_to_clock(self, categories, make_entry):
        clock = DeterministicClock.at_period(YEAR, 9)

        dashboard = build_year_dashboard(self._snapshot(categories, make_entry), clock=clock)

        assert dashboard.year == YEAR

    def test_other_years_do_not_leak_in(self, categories, make_entry):
        snapshot = self._snapshot(categories, make_entry)
        with_prior_year = BudgetSnapshot.build(
            snapshot.entries + (make_entry("cos-software", 11, budget=9999, year=YEAR - 1),),
            categories,
            snapshot.forecast_modes,
            snapshot.yearly_targets,
        )

        assert build_year_dashboard(with_prior_year, YEAR) == build_year_dashboard(snapshot, YEAR)
