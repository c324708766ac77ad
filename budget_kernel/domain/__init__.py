"""
Pure domain layer.

Immutable value objects and period helpers with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (except the injectable Clock abstraction)
- I/O
"""

from budget_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from budget_kernel.domain.entries import (
    ZERO,
    BudgetCategory,
    BudgetEntry,
    CategorySubgroup,
    ParentGroup,
)
from budget_kernel.domain.forecast_modes import ForecastModes, MonthMode
from budget_kernel.domain.periods import (
    MONTHS,
    QUARTERS,
    month_name,
    quarter_months,
    quarter_of,
)
from budget_kernel.domain.snapshot import BudgetSnapshot

__all__ = [
    "ZERO",
    "BudgetCategory",
    "BudgetEntry",
    "BudgetSnapshot",
    "CategorySubgroup",
    "Clock",
    "DeterministicClock",
    "ForecastModes",
    "MONTHS",
    "MonthMode",
    "ParentGroup",
    "QUARTERS",
    "SystemClock",
    "month_name",
    "quarter_months",
    "quarter_of",
]
