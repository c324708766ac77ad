"""
Monthly forecast modes -- the Final / Forecast state of every month.

Responsibility:
    Immutable value object answering "is (year, month) closed?".  A Final
    month's actual figures are authoritative; any other month is a Forecast
    month whose reforecast figures stand in for actuals.

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.  Passed explicitly into
    every engine call; there is no ambient or global mode map.

Invariants enforced:
    - Absence means Forecast: only Final months are stored, so two values
      describing the same state always compare equal.
    - Immutability: ``with_mode`` / ``toggled`` return new instances.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from budget_kernel.domain.periods import MONTHS, validate_month


class MonthMode(str, Enum):
    """Operator-controlled state of a month."""

    FINAL = "final"  # Closed; actuals are authoritative
    FORECAST = "forecast"  # Still projected; reforecast stands in

    @classmethod
    def from_flag(cls, is_final: bool) -> MonthMode:
        return cls.FINAL if is_final else cls.FORECAST


@dataclass(frozen=True)
class ForecastModes:
    """(year, month) -> MonthMode, defaulting to FORECAST."""

    final_periods: frozenset[tuple[int, int]] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for year, month in self.final_periods:
            validate_month(month, year)

    @classmethod
    def empty(cls) -> ForecastModes:
        return cls()

    @classmethod
    def of(cls, periods: Iterable[tuple[int, int]]) -> ForecastModes:
        """Build from an iterable of Final (year, month) pairs."""
        return cls(frozenset(periods))

    @classmethod
    def from_nested(cls, data: Mapping[int, Mapping[int, bool]]) -> ForecastModes:
        """Build from the persisted ``{year: {month: is_final}}`` shape."""
        return cls(frozenset(
            (int(year), int(month))
            for year, months in data.items()
            for month, is_final in months.items()
            if is_final
        ))

    def to_nested(self) -> dict[int, dict[int, bool]]:
        """Persisted shape; only Final months are listed."""
        nested: dict[int, dict[int, bool]] = {}
        for year, month in sorted(self.final_periods):
            nested.setdefault(year, {})[month] = True
        return nested

    def mode_for(self, year: int, month: int) -> MonthMode:
        return MonthMode.FINAL if (year, month) in self.final_periods else MonthMode.FORECAST

    def is_final(self, year: int, month: int) -> bool:
        return (year, month) in self.final_periods

    def final_months(self, year: int) -> tuple[int, ...]:
        return tuple(m for m in MONTHS if (year, m) in self.final_periods)

    def with_mode(self, year: int, month: int, is_final: bool) -> ForecastModes:
        validate_month(month, year)
        if is_final:
            return ForecastModes(self.final_periods | {(year, month)})
        return ForecastModes(self.final_periods - {(year, month)})

    def toggled(self, year: int, month: int) -> ForecastModes:
        return self.with_mode(year, month, not self.is_final(year, month))
