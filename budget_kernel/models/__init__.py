"""ORM models for the budget kernel."""

from budget_kernel.models.budget_entry import BudgetEntryModel
from budget_kernel.models.forecast_mode import ForecastModeModel, YearlyTargetModel

__all__ = [
    "BudgetEntryModel",
    "ForecastModeModel",
    "YearlyTargetModel",
]
