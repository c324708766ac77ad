"""
Budget configuration schema.

Defines the human-authored, reviewable configuration artifact: the category
tree, alert and trend thresholds, and the compensation runway assumptions.
YAML files are parsed into these types by the loader and converted into
kernel and engine inputs by the bridges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Self

from budget_kernel.logging_config import get_logger

logger = get_logger("config.schema")


# ---------------------------------------------------------------------------
# Category tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubgroupDef:
    """A named partition of one parent group."""

    id: str
    name: str
    parent: str  # "cost-of-sales" or "opex"


@dataclass(frozen=True)
class CategoryDef:
    """One spend category."""

    id: str
    name: str
    parent: str  # "cost-of-sales" or "opex"
    subgroup: str | None = None
    is_negative: bool = False
    description: str | None = None


# ---------------------------------------------------------------------------
# Engine tunables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ThresholdsDef:
    """Alert and variance-trend thresholds, in percent or currency units."""

    alert_variance_percent: Decimal = Decimal("15")
    alert_variance_amount: Decimal = Decimal("50000")
    alert_danger_percent: Decimal = Decimal("25")
    trend_stable_band: Decimal = Decimal("5")
    trend_change_threshold: Decimal = Decimal("2")
    trend_stable_current: Decimal = Decimal("10")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create thresholds with standard defaults."""
        logger.info("thresholds_created_with_defaults")
        return cls()


@dataclass(frozen=True)
class RunwayDef:
    """Compensation runway and hiring-capacity assumptions."""

    compensation_subgroup: str = "comp-and-benefits"
    hiring_share: Decimal = Decimal("0.75")
    average_hire_cost: Decimal = Decimal("120000")
    runway_cap: Decimal = Decimal("12")

    def __post_init__(self):
        if not Decimal("0") <= self.hiring_share <= Decimal("1"):
            raise ValueError("hiring_share must be between 0 and 1")
        if self.average_hire_cost <= 0:
            raise ValueError("average_hire_cost must be positive")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create runway assumptions with standard defaults."""
        logger.info("runway_config_created_with_defaults")
        return cls()


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetConfiguration:
    """
    The complete budget configuration.

    ``checksum`` is the SHA-256 of the canonical source data, so two
    configurations built from identical YAML compare equal.
    """

    config_id: str
    version: int
    categories: tuple[CategoryDef, ...]
    subgroups: tuple[SubgroupDef, ...] = ()
    thresholds: ThresholdsDef = field(default_factory=ThresholdsDef)
    runway: RunwayDef = field(default_factory=RunwayDef)
    description: str = ""
    checksum: str = ""

    def subgroup(self, subgroup_id: str) -> SubgroupDef | None:
        for subgroup in self.subgroups:
            if subgroup.id == subgroup_id:
                return subgroup
        return None

    def category_ids(self) -> tuple[str, ...]:
        return tuple(c.id for c in self.categories)
