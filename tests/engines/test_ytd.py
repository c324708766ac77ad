"""
Tests for the year-to-date window.

Covers:
- Final flags deciding the cutoff month
- Fallback to entry data without Final months
- Exclusion of months after the cutoff
- Labels
"""

from decimal import Decimal

from budget_engines.ytd import (
    calculate_ytd_data,
    find_last_month_with_actuals,
    ytd_label,
)
from budget_kernel.domain.forecast_modes import ForecastModes

YEAR = 2025


class TestLastMonthWithActuals:

    def test_highest_final_month_wins(self, make_entry):
        """Modes {1, 2, 4} Final give month 4 even with later actuals."""
        modes = ForecastModes.of([(YEAR, 1), (YEAR, 2), (YEAR, 4)])
        entries = [make_entry("cos-software", 9, budget=10, actual=10)]

        assert find_last_month_with_actuals(entries, modes, YEAR) == 4

    def test_falls_back_to_entry_data(self, make_entry):
        entries = [
            make_entry("cos-software", 2, budget=0, actual=5),
            make_entry("cos-software", 6, budget=10),
            make_entry("cos-software", 11, budget=0, actual=0),
        ]

        assert find_last_month_with_actuals(entries, ForecastModes.empty(), YEAR) == 6

    def test_final_months_of_other_years_ignored(self, make_entry):
        modes = ForecastModes.of([(YEAR - 1, 12)])
        entries = [make_entry("cos-software", 3, actual=1)]

        assert find_last_month_with_actuals(entries, modes, YEAR) == 3

    def test_nothing_elapsed_is_zero(self):
        assert find_last_month_with_actuals([], ForecastModes.empty(), YEAR) == 0

    def test_actual_without_budget_counts(self, make_entry):
        entries = [
            make_entry("cos-software", 4, budget=10),
            make_entry("cos-software", 7, budget=0, actual=1),
        ]

        assert find_last_month_with_actuals(entries, ForecastModes.empty(), YEAR) == 7

    def test_unconfigured_category_does_not_move_cutoff(self, categories, make_entry):
        """A budget-only entry the rollup skips leaves the fallback at 3."""
        entries = [make_entry("cos-software", m, budget=100, actual=100) for m in (1, 2, 3)]
        entries.append(make_entry("not-configured", 9, budget=100))

        cutoff = find_last_month_with_actuals(
            entries, ForecastModes.empty(), YEAR, categories
        )

        assert cutoff == 3


class TestYTDData:

    def test_months_after_cutoff_excluded(self, categories, make_entry):
        modes = ForecastModes.of([(YEAR, 1), (YEAR, 2), (YEAR, 4)])
        entries = [make_entry("cos-software", m, budget=100, actual=90) for m in range(1, 13)]

        result = calculate_ytd_data(entries, categories, modes, YEAR)

        assert result.last_month_with_actuals == 4
        assert result.data.months == (1, 2, 3, 4)
        assert result.data.net_total.budget == Decimal("400")
        assert result.data.net_total.actual == Decimal("360")
        assert result.through_label == "YTD through April"

    def test_empty_year(self, categories):
        result = calculate_ytd_data([], categories, ForecastModes.empty(), YEAR)

        assert result.last_month_with_actuals == 0
        assert result.data.months == ()
        assert result.data.month == 0
        assert result.data.net_total.budget == Decimal("0")
        assert result.through_label == "Current"

    def test_logs_calculation(self, categories, captured_logs):
        calculate_ytd_data([], categories, ForecastModes.empty(), YEAR)

        records = [r for r in captured_logs() if r["message"] == "ytd_calculated"]
        assert len(records) == 1
        assert records[0]["last_month_with_actuals"] == 0

    def test_unconfigured_category_outside_window(self, categories, make_entry):
        entries = [make_entry("cos-software", m, budget=100, actual=100) for m in (1, 2, 3)]
        entries.append(make_entry("not-configured", 9, budget=100))

        result = calculate_ytd_data(entries, categories, ForecastModes.empty(), YEAR)

        assert result.last_month_with_actuals == 3
        assert result.through_label == "YTD through March"
        assert result.data.net_total.actual == Decimal("300")


class TestLabels:

    def test_label_names_month(self):
        assert ytd_label(3) == "YTD through March"

    def test_label_without_elapsed_month(self):
        assert ytd_label(0) == "Current"
