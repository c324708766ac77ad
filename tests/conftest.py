"""
Pytest fixtures for the budget engine test suite.

Provides:
- Structured logging configured once per session, context cleared per test
- In-memory SQLite sessions for store tests
- A small category tree and an entry factory for engine tests
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from budget_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from budget_kernel.domain.clock import DeterministicClock
from budget_kernel.domain.entries import (
    BudgetCategory,
    BudgetEntry,
    CategorySubgroup,
    ParentGroup,
)
from budget_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_YEAR = 2025

COMP = CategorySubgroup(id="comp-and-benefits", name="Comp and Benefits")
OTHER = CategorySubgroup(id="other", name="Other")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture budget_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_full_year_forecast(...)
            logs = captured_logs()
            assert any(r["message"] == "full_year_forecast_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("budget_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session():
    """A session on a fresh in-memory SQLite database."""
    init_engine_from_url("sqlite+pysqlite:///:memory:")
    create_tables()
    db_session = get_session()
    yield db_session
    db_session.close()
    drop_tables()
    reset_engine()


@pytest.fixture
def clock():
    return DeterministicClock()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def categories() -> tuple[BudgetCategory, ...]:
    """Two cost-of-sales categories and three opex categories in two subgroups."""
    return (
        BudgetCategory(id="cos-software", name="Software", parent=ParentGroup.COST_OF_SALES),
        BudgetCategory(id="cos-services", name="Services", parent=ParentGroup.COST_OF_SALES),
        BudgetCategory(id="opex-base-pay", name="Base Pay", parent=ParentGroup.OPEX, subgroup=COMP),
        BudgetCategory(
            id="opex-capitalized-salaries",
            name="Capitalized Salaries",
            parent=ParentGroup.OPEX,
            subgroup=COMP,
            is_negative=True,
        ),
        BudgetCategory(id="opex-travel", name="Travel", parent=ParentGroup.OPEX, subgroup=OTHER),
    )


def _amount(value):
    if value is None:
        return None
    return Decimal(str(value))


@pytest.fixture
def make_entry():
    """
    Factory for BudgetEntry with string / int amounts converted to Decimal.

    Usage::

        entry = make_entry("cos-software", 3, budget=100, actual=120)
    """

    def _make(
        category_id: str,
        month: int,
        budget=0,
        actual=None,
        reforecast=None,
        adjustment=0,
        year: int = TEST_YEAR,
    ) -> BudgetEntry:
        return BudgetEntry(
            category_id=category_id,
            year=year,
            month=month,
            budget_amount=_amount(budget),
            actual_amount=_amount(actual),
            reforecast_amount=_amount(reforecast),
            adjustment_amount=_amount(adjustment),
        )

    return _make
