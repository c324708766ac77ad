"""
BudgetSnapshot -- the complete, immutable input set for one engine pass.

The host takes a snapshot from its store and hands it to the engines; the
engines never see the store itself.  Recomputing from an identical snapshot
always yields identical output.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from budget_kernel.domain.entries import BudgetCategory, BudgetEntry, require_decimal
from budget_kernel.domain.forecast_modes import ForecastModes


@dataclass(frozen=True)
class BudgetSnapshot:
    """Entries, categories, forecast modes and yearly targets at one instant."""

    entries: tuple[BudgetEntry, ...]
    categories: tuple[BudgetCategory, ...]
    forecast_modes: ForecastModes = field(default_factory=ForecastModes)
    yearly_targets: Mapping[int, Decimal] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        for year, amount in self.yearly_targets.items():
            require_decimal(f"yearly_targets[{year}]", amount)

    @classmethod
    def build(
        cls,
        entries: Iterable[BudgetEntry],
        categories: Iterable[BudgetCategory],
        forecast_modes: ForecastModes | None = None,
        yearly_targets: Mapping[int, Decimal] | None = None,
    ) -> BudgetSnapshot:
        return cls(
            entries=tuple(entries),
            categories=tuple(categories),
            forecast_modes=forecast_modes or ForecastModes(),
            yearly_targets=MappingProxyType(dict(yearly_targets or {})),
        )

    def entries_for_year(self, year: int) -> tuple[BudgetEntry, ...]:
        return tuple(e for e in self.entries if e.year == year)

    def target_for(self, year: int) -> Decimal:
        return self.yearly_targets.get(year, Decimal("0"))
