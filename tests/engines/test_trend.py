"""
Tests for the variance trend classifier and the cumulative series.

Covers:
- Cumulative variance percent window
- Magnitude-only classification with short history
- Improving / Worsening / Stable / sign classification
- Mode-aware cumulative series
- Restriction to configured categories
"""

from decimal import Decimal

import pytest

from budget_engines.trend import (
    TrendThresholds,
    VarianceTrend,
    build_trend_series,
    classify_variance_trend,
    cumulative_variance_percents,
)
from budget_kernel.domain.forecast_modes import ForecastModes, MonthMode
from budget_kernel.exceptions import InvalidPeriodError

YEAR = 2025


class TestCumulativePercents:

    def test_window_is_last_three_months(self, make_entry):
        entries = [make_entry("cos-software", m, budget=100, actual=100) for m in range(1, 7)]

        percents = cumulative_variance_percents(entries, YEAR, 6)

        assert len(percents) == 3

    def test_short_history_window(self, make_entry):
        entries = [make_entry("cos-software", 1, budget=100, actual=108)]

        assert cumulative_variance_percents(entries, YEAR, 1) == (Decimal("-8"),)

    def test_nothing_elapsed_is_empty(self):
        assert cumulative_variance_percents([], YEAR, 0) == ()

    def test_later_months_not_counted(self, make_entry):
        entries = [
            make_entry("cos-software", 1, budget=100, actual=108),
            make_entry("cos-software", 5, budget=100, actual=500),
        ]

        assert cumulative_variance_percents(entries, YEAR, 1) == (Decimal("-8"),)

    def test_invalid_month_raises(self):
        with pytest.raises(InvalidPeriodError):
            cumulative_variance_percents([], YEAR, 13)


class TestClassification:

    def test_improving(self, make_entry):
        """-8% then cumulative -3% is a +5 point change."""
        entries = [
            make_entry("cos-software", 1, budget=100, actual=108),
            make_entry("cos-software", 2, budget=100, actual=98),
        ]

        assert classify_variance_trend(entries, YEAR, 2) is VarianceTrend.IMPROVING

    def test_stable_when_flat_and_small(self, make_entry):
        """-3% then -3% stays Stable."""
        entries = [
            make_entry("cos-software", 1, budget=100, actual=103),
            make_entry("cos-software", 2, budget=100, actual=103),
        ]

        assert classify_variance_trend(entries, YEAR, 2) is VarianceTrend.STABLE

    def test_worsening(self, make_entry):
        """+2% then cumulative -14% is a -16 point change."""
        entries = [
            make_entry("cos-software", 1, budget=100, actual=98),
            make_entry("cos-software", 2, budget=100, actual=130),
        ]

        assert classify_variance_trend(entries, YEAR, 2) is VarianceTrend.WORSENING

    def test_flat_and_large_classified_by_sign(self, make_entry):
        over = [make_entry("cos-software", m, budget=100, actual=115) for m in (1, 2)]
        under = [make_entry("cos-software", m, budget=100, actual=85) for m in (1, 2)]

        assert classify_variance_trend(over, YEAR, 2) is VarianceTrend.OVER_BUDGET
        assert classify_variance_trend(under, YEAR, 2) is VarianceTrend.UNDER_BUDGET

    def test_single_month_uses_magnitude(self, make_entry):
        small = [make_entry("cos-software", 1, budget=100, actual=103)]
        large = [make_entry("cos-software", 1, budget=100, actual=108)]

        assert classify_variance_trend(small, YEAR, 1) is VarianceTrend.STABLE
        assert classify_variance_trend(large, YEAR, 1) is VarianceTrend.OVER_BUDGET

    def test_nothing_elapsed_is_stable(self):
        assert classify_variance_trend([], YEAR, 0) is VarianceTrend.STABLE

    def test_custom_thresholds(self, make_entry):
        entries = [
            make_entry("cos-software", 1, budget=100, actual=103),
            make_entry("cos-software", 2, budget=100, actual=103),
        ]
        strict = TrendThresholds(stable_current=Decimal("1"))

        assert classify_variance_trend(entries, YEAR, 2, strict) is VarianceTrend.OVER_BUDGET


class TestTrendSeries:

    def test_series_resolves_each_month(self, make_entry):
        entries = [
            make_entry("cos-software", 1, budget=100, actual=120, reforecast=90),
            make_entry("cos-software", 2, budget=100, reforecast=80, adjustment=5),
        ]
        modes = ForecastModes.of([(YEAR, 1)])

        series = build_trend_series(entries, modes, YEAR)

        assert len(series) == 12
        first, second = series[0], series[1]
        assert first.label == "Jan"
        assert first.mode is MonthMode.FINAL
        assert first.counted == Decimal("120")
        assert first.cumulative_variance == Decimal("-20")
        assert second.mode is MonthMode.FORECAST
        assert second.counted == Decimal("80")
        assert second.adjusted == Decimal("75")
        assert second.cumulative_budget == Decimal("200")
        assert second.cumulative_adjusted == Decimal("195")
        assert series[-1].cumulative_budget == Decimal("200")


class TestConfiguredCategoriesOnly:
    """Entries the rollup skips take no part in the trend either."""

    def _entries(self, make_entry):
        entries = [make_entry("cos-software", m, budget=100, actual=100) for m in (1, 2, 3)]
        entries.append(make_entry("not-configured", 2, budget=100))
        return entries

    def test_percents_ignore_unconfigured_entries(self, categories, make_entry):
        percents = cumulative_variance_percents(
            self._entries(make_entry), YEAR, 3, categories
        )

        assert percents == (Decimal("0"), Decimal("0"), Decimal("0"))

    def test_classification_ignores_unconfigured_entries(self, categories, make_entry):
        entries = self._entries(make_entry)

        assert classify_variance_trend(entries, YEAR, 3) is VarianceTrend.WORSENING
        assert (
            classify_variance_trend(entries, YEAR, 3, categories=categories)
            is VarianceTrend.STABLE
        )

    def test_series_ignores_unconfigured_entries(self, categories, make_entry):
        series = build_trend_series(
            self._entries(make_entry), ForecastModes.empty(), YEAR, categories
        )

        assert series[-1].cumulative_budget == Decimal("300")
