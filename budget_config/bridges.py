"""
Config -> Kernel / Engine Bridges.

Functions that convert a BudgetConfiguration into kernel domain objects and
engine tunables.  These live in budget_config (the producer) because neither
the kernel nor the engines may import budget_config.

Usage:
    from budget_config import get_default_configuration
    from budget_config.bridges import build_categories

    config = get_default_configuration()
    categories = build_categories(config)
"""

from __future__ import annotations

from budget_config.schema import BudgetConfiguration
from budget_engines.alerts import AlertThresholds
from budget_engines.runway import RunwaySettings
from budget_engines.trend import TrendThresholds
from budget_kernel.domain.entries import BudgetCategory, CategorySubgroup, ParentGroup


def build_categories(config: BudgetConfiguration) -> tuple[BudgetCategory, ...]:
    """BudgetCategory objects in configured order."""
    subgroups = {
        s.id: CategorySubgroup(id=s.id, name=s.name) for s in config.subgroups
    }
    return tuple(
        BudgetCategory(
            id=c.id,
            name=c.name,
            parent=ParentGroup(c.parent),
            subgroup=subgroups[c.subgroup] if c.subgroup is not None else None,
            is_negative=c.is_negative,
            description=c.description,
        )
        for c in config.categories
    )


def build_alert_thresholds(config: BudgetConfiguration) -> AlertThresholds:
    t = config.thresholds
    return AlertThresholds(
        variance_percent=t.alert_variance_percent,
        variance_amount=t.alert_variance_amount,
        danger_percent=t.alert_danger_percent,
    )


def build_trend_thresholds(config: BudgetConfiguration) -> TrendThresholds:
    t = config.thresholds
    return TrendThresholds(
        stable_band=t.trend_stable_band,
        change_threshold=t.trend_change_threshold,
        stable_current=t.trend_stable_current,
    )


def build_runway_settings(config: BudgetConfiguration) -> RunwaySettings:
    r = config.runway
    return RunwaySettings(
        hiring_share=r.hiring_share,
        average_hire_cost=r.average_hire_cost,
        runway_cap=r.runway_cap,
    )
