"""
budget_services -- imperative shell around the pure engines.

    BudgetStore          -- SQL-backed entries, forecast modes, yearly targets
    build_year_dashboard -- every engine output for one year
"""

from budget_services.dashboard import YearDashboard, build_year_dashboard
from budget_services.entry_store import BudgetStore

__all__ = [
    "BudgetStore",
    "YearDashboard",
    "build_year_dashboard",
]
