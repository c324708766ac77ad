"""
Tests for budget configuration loading and bridges.

Covers:
- The packaged default configuration
- Decimal parsing and defaults for thresholds / runway
- Category tree validation
- Bridges into kernel categories and engine tunables
"""

from decimal import Decimal

import pytest
import yaml

from budget_config import get_default_configuration, load_configuration
from budget_config.bridges import (
    build_alert_thresholds,
    build_categories,
    build_runway_settings,
    build_trend_thresholds,
)
from budget_config.loader import compute_checksum, parse_configuration, parse_decimal
from budget_config.schema import RunwayDef, ThresholdsDef
from budget_kernel.domain.entries import ParentGroup
from budget_kernel.exceptions import ConfigurationError


def _minimal(**overrides):
    data = {
        "config_id": "test",
        "version": 1,
        "subgroups": [{"id": "people", "name": "People", "parent": "opex"}],
        "categories": [
            {"id": "cos-a", "name": "A", "parent": "cost-of-sales"},
            {"id": "opex-pay", "name": "Pay", "parent": "opex", "subgroup": "people"},
        ],
    }
    data.update(overrides)
    return data


class TestDefaultConfiguration:

    def setup_method(self):
        self.config = get_default_configuration()

    def test_category_tree(self):
        assert self.config.config_id == "default-budget"
        assert len(self.config.categories) == 21
        assert self.config.subgroup("comp-and-benefits").name == "Comp and Benefits"
        assert self.config.subgroup("missing") is None

    def test_contra_categories(self):
        negatives = {c.id for c in self.config.categories if c.is_negative}
        assert negatives == {"opex-capitalized-salaries", "opex-reclass-cogs"}

    def test_tunables(self):
        assert self.config.thresholds == ThresholdsDef()
        assert self.config.runway.hiring_share == Decimal("0.75")
        assert self.config.runway.runway_cap == Decimal("12")

    def test_checksum_is_stable(self):
        assert get_default_configuration().checksum == self.config.checksum
        assert len(self.config.checksum) == 64

    def test_config_trace_logged(self, captured_logs):
        get_default_configuration()

        trace = next(r for r in captured_logs() if r["message"] == "BUDGET_CONFIG_TRACE")
        assert trace["config_id"] == "default-budget"
        assert trace["category_count"] == 21


class TestLoadConfiguration:

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "budget.yaml"
        path.write_text(yaml.safe_dump(_minimal(thresholds={"alerts": {"variance_percent": 0.5}})))

        config = load_configuration(path)

        assert config.category_ids() == ("cos-a", "opex-pay")
        assert config.thresholds.alert_variance_percent == Decimal("0.5")
        assert config.thresholds.alert_danger_percent == Decimal("25")
        assert config.checksum == compute_checksum(yaml.safe_load(path.read_text()))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_configuration(tmp_path / "absent.yaml")

    def test_missing_categories(self):
        data = _minimal()
        del data["categories"]

        with pytest.raises(ConfigurationError) as exc_info:
            parse_configuration(data)

        assert exc_info.value.code == "CONFIGURATION_ERROR"

    def test_empty_categories(self):
        with pytest.raises(ConfigurationError):
            parse_configuration(_minimal(categories=[]))

    def test_bad_parent(self):
        data = _minimal(categories=[{"id": "x", "name": "X", "parent": "revenue"}])

        with pytest.raises(ConfigurationError, match="parent must be one of"):
            parse_configuration(data)

    def test_duplicate_category(self):
        category = {"id": "cos-a", "name": "A", "parent": "cost-of-sales"}

        with pytest.raises(ConfigurationError, match="Duplicate category"):
            parse_configuration(_minimal(categories=[category, category]))

    def test_unknown_subgroup(self):
        data = _minimal(categories=[
            {"id": "opex-x", "name": "X", "parent": "opex", "subgroup": "nope"},
        ])

        with pytest.raises(ConfigurationError, match="Unknown subgroup"):
            parse_configuration(data)

    def test_subgroup_parent_mismatch(self):
        data = _minimal(categories=[
            {"id": "cos-x", "name": "X", "parent": "cost-of-sales", "subgroup": "people"},
        ])

        with pytest.raises(ConfigurationError, match="belongs to opex"):
            parse_configuration(data)

    def test_invalid_runway(self):
        with pytest.raises(ConfigurationError, match="hiring_share"):
            parse_configuration(_minimal(runway={"hiring_share": "1.5"}))

    def test_non_integer_version(self):
        with pytest.raises(ConfigurationError, match="version"):
            parse_configuration(_minimal(version="one"))


class TestParseDecimal:

    def test_float_parsed_exactly(self):
        assert parse_decimal(0.1, "x") == Decimal("0.1")

    @pytest.mark.parametrize("value", ["abc", True, "NaN"])
    def test_rejected_values(self, value):
        with pytest.raises(ConfigurationError):
            parse_decimal(value, "x")


class TestBridges:

    def setup_method(self):
        self.config = parse_configuration(_minimal(
            thresholds={"trend": {"stable_band": "3"}},
            runway={"compensation_subgroup": "people", "runway_cap": "24"},
        ))

    def test_build_categories(self):
        categories = build_categories(self.config)

        assert [c.id for c in categories] == ["cos-a", "opex-pay"]
        assert categories[0].parent is ParentGroup.COST_OF_SALES
        assert categories[0].subgroup is None
        assert categories[1].subgroup.name == "People"

    def test_build_tunables(self):
        assert build_trend_thresholds(self.config).stable_band == Decimal("3")
        assert build_alert_thresholds(self.config).variance_amount == Decimal("50000")
        assert build_runway_settings(self.config).runway_cap == Decimal("24")

    def test_runway_defaults(self):
        assert parse_configuration(_minimal()).runway == RunwayDef()
