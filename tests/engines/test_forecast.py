"""
Tests for quarterly and full-year forecast rollups.

Covers:
- Fully closed quarters ignore reforecast
- Mixed quarters blend actual and reforecast
- Adjustments per group
- Full-year forecast as the sum of quarter contributions
"""

from decimal import Decimal

import pytest

from budget_engines.forecast import (
    calculate_quarterly_summary,
    calculate_yearly_quarters,
    compute_full_year_forecast,
    summarize_quarter,
)
from budget_engines.rollup import calculate_monthly_data, calculate_period_data
from budget_kernel.domain.forecast_modes import ForecastModes
from budget_kernel.exceptions import (
    InvalidPeriodError,
    InvalidQuarterError,
    NotMonthlyRollupError,
)

YEAR = 2025


class TestQuarterContribution:

    def setup_method(self):
        self.q1_final = ForecastModes.of([(YEAR, 1), (YEAR, 2), (YEAR, 3)])

    def _q1_entries(self, make_entry, march_reforecast=40):
        return [
            make_entry("cos-software", 1, budget=60, actual=50, reforecast=40),
            make_entry("cos-software", 2, budget=60, actual=60, reforecast=40),
            make_entry("cos-software", 3, budget=60, actual=70, reforecast=march_reforecast),
        ]

    def test_closed_quarter_ignores_reforecast(self, categories, make_entry):
        """Actuals 50 / 60 / 70 all Final contribute 180."""
        summary = calculate_quarterly_summary(
            self._q1_entries(make_entry), categories, self.q1_final, YEAR, 1
        )

        assert summary.all_final is True
        assert summary.budget_tracking.actual == Decimal("180")
        assert summary.budget_tracking.reforecast == Decimal("0")
        assert summary.forecast_contribution == Decimal("180")
        assert summary.net_total.reforecast == Decimal("120")

    def test_mixed_quarter_blends(self, categories, make_entry):
        """Months 1 and 2 Final, month 3 Forecast at 60 contribute 170."""
        modes = ForecastModes.of([(YEAR, 1), (YEAR, 2)])

        summary = calculate_quarterly_summary(
            self._q1_entries(make_entry, march_reforecast=60), categories, modes, YEAR, 1
        )

        assert summary.all_final is False
        assert summary.budget_tracking.actual == Decimal("110")
        assert summary.budget_tracking.reforecast == Decimal("60")
        assert summary.forecast_contribution == Decimal("170")

    def test_budget_and_variance_accumulate(self, categories, make_entry):
        summary = calculate_quarterly_summary(
            self._q1_entries(make_entry), categories, self.q1_final, YEAR, 1
        )

        assert summary.budget_tracking.budget == Decimal("180")
        assert summary.budget_tracking.variance == Decimal("0")
        assert [t.is_final for t in summary.resolved_months] == [True, True, True]

    def test_adjustments_reduce_contribution(self, categories, make_entry):
        entries = [
            make_entry("cos-software", 4, actual=100, adjustment=10),
            make_entry("opex-travel", 5, reforecast=50, adjustment=5),
        ]
        modes = ForecastModes.of([(YEAR, 4)])

        summary = calculate_quarterly_summary(entries, categories, modes, YEAR, 2)

        assert summary.cost_of_sales_adjustments == Decimal("10")
        assert summary.opex_adjustments == Decimal("5")
        assert summary.forecast_contribution == Decimal("135")


class TestQuarterValidation:

    def test_invalid_quarter_raises(self, categories):
        with pytest.raises(InvalidQuarterError):
            calculate_quarterly_summary([], categories, ForecastModes.empty(), YEAR, 5)

    def test_missing_month_raises(self, categories):
        monthly = [calculate_monthly_data([], categories, YEAR, m) for m in (1, 2)]

        with pytest.raises(InvalidPeriodError):
            summarize_quarter(monthly, ForecastModes.empty(), YEAR, 1)

    def test_multi_month_rollup_rejected(self, categories, make_entry):
        """A YTD-style window ending in March is not March."""
        entries = [make_entry("cos-software", m, budget=100) for m in (1, 2, 3)]
        monthly = [calculate_monthly_data(entries, categories, YEAR, m) for m in (1, 2)]
        monthly.append(calculate_period_data(entries, categories, YEAR, [1, 2, 3]))

        with pytest.raises(NotMonthlyRollupError) as exc_info:
            summarize_quarter(monthly, ForecastModes.empty(), YEAR, 1)

        assert exc_info.value.code == "NOT_MONTHLY_ROLLUP"
        assert exc_info.value.months == (1, 2, 3)


class TestFullYearForecast:

    def test_sum_of_quarter_contributions(self, categories, make_entry):
        entries = [
            make_entry("cos-software", m, budget=100, actual=110, reforecast=95)
            for m in range(1, 13)
        ]
        modes = ForecastModes.of([(YEAR, m) for m in (1, 2, 3, 4)])

        quarters = calculate_yearly_quarters(entries, categories, modes, YEAR)
        total = compute_full_year_forecast(entries, categories, modes, YEAR)

        assert [q.quarter for q in quarters] == [1, 2, 3, 4]
        assert total == sum(q.forecast_contribution for q in quarters)
        # Four closed months at 110, eight forecast months at 95
        assert total == Decimal("1200")

    def test_empty_year_is_zero(self, categories):
        assert compute_full_year_forecast([], categories, ForecastModes.empty(), YEAR) == Decimal("0")

    def test_logs_forecast(self, categories, captured_logs):
        compute_full_year_forecast([], categories, ForecastModes.empty(), YEAR)

        messages = [r["message"] for r in captured_logs()]
        assert "full_year_forecast_computed" in messages
