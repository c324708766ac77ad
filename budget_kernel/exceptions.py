"""
Typed Exception Hierarchy for the Budget Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must be able to react to a failure without parsing its message:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        store.record_entry("opex-unknown", 2025, 3, budget_amount=Decimal("10"))
    except UnknownCategoryError as e:
        api_response(code=e.code, category_id=e.category_id)

===============================================================================
WHAT IS *NOT* AN ERROR
===============================================================================

Missing data is a valid state, never an exception:
  - A period with zero matching entries aggregates to zeros.
  - A month without a forecast-mode flag is a Forecast month.
  - A zero budget yields a variance percent of 0.
  - A zero burn rate yields a capped (unconstrained) runway.

Exceptions are raised only for caller precondition violations (a month of 13,
a float where a Decimal is required, two entries for one category/period) and
for malformed configuration.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BudgetKernelError (base)
    |
    +-- EntryError
    |   +-- InvalidAmountError
    |   +-- DuplicateEntryError
    |   +-- EntryNotFoundError
    |
    +-- PeriodError
    |   +-- InvalidPeriodError
    |   +-- InvalidQuarterError
    |   +-- NotMonthlyRollupError
    |
    +-- CategoryError
    |   +-- UnknownCategoryError
    |   +-- InvalidParentGroupError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                  | When Raised
----------------|-----------------------|-----------------------------------------
Entry           | INVALID_AMOUNT        | Amount is not a Decimal (float, str, ...)
                | DUPLICATE_ENTRY       | Two entries for one category/year/month
                | ENTRY_NOT_FOUND       | Entry ID doesn't exist in the store
----------------|-----------------------|-----------------------------------------
Period          | INVALID_PERIOD        | Month outside 1..12
                | INVALID_QUARTER       | Quarter outside 1..4
                | NOT_MONTHLY_ROLLUP    | Multi-month rollup given where one month is
                |                       | expected
----------------|-----------------------|-----------------------------------------
Category        | UNKNOWN_CATEGORY      | Category ID is not configured
                | INVALID_PARENT_GROUP  | Parent is not cost-of-sales or opex
----------------|-----------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR   | Malformed configuration content
"""

from typing import Any


class BudgetKernelError(Exception):
    """
    Base exception for all budget kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BUDGET_KERNEL_ERROR"


# Entry-related exceptions


class EntryError(BudgetKernelError):
    """Base exception for budget entry errors."""

    code: str = "ENTRY_ERROR"


class InvalidAmountError(EntryError):
    """An amount field was given something other than a Decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field_name: str, value: Any):
        self.field_name = field_name
        self.value_type = type(value).__name__
        super().__init__(
            f"{field_name} must be a Decimal, got {self.value_type}: {value!r}"
        )


class DuplicateEntryError(EntryError):
    """More than one entry exists for the same category and period."""

    code: str = "DUPLICATE_ENTRY"

    def __init__(self, category_id: str, year: int, month: int):
        self.category_id = category_id
        self.year = year
        self.month = month
        super().__init__(
            f"Duplicate entry for category {category_id} in {year}-{month:02d}"
        )


class EntryNotFoundError(EntryError):
    """Entry with given ID was not found."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")


# Period-related exceptions


class PeriodError(BudgetKernelError):
    """Base exception for period errors."""

    code: str = "PERIOD_ERROR"


class InvalidPeriodError(PeriodError):
    """Month number is outside 1..12."""

    code: str = "INVALID_PERIOD"

    def __init__(self, month: Any, year: Any = None):
        self.month = month
        self.year = year
        super().__init__(f"Month must be between 1 and 12, got {month!r}")


class InvalidQuarterError(PeriodError):
    """Quarter number is outside 1..4."""

    code: str = "INVALID_QUARTER"

    def __init__(self, quarter: Any):
        self.quarter = quarter
        super().__init__(f"Quarter must be between 1 and 4, got {quarter!r}")


class NotMonthlyRollupError(PeriodError):
    """A rollup covering several months was passed where one month is expected."""

    code: str = "NOT_MONTHLY_ROLLUP"

    def __init__(self, months: tuple[int, ...], year: Any = None):
        self.months = months
        self.year = year
        super().__init__(f"Expected a one-month rollup, got months {list(months)!r}")


# Category-related exceptions


class CategoryError(BudgetKernelError):
    """Base exception for category errors."""

    code: str = "CATEGORY_ERROR"


class UnknownCategoryError(CategoryError):
    """Category ID is not part of the configured category list."""

    code: str = "UNKNOWN_CATEGORY"

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Unknown category: {category_id}")


class InvalidParentGroupError(CategoryError):
    """Category parent is neither cost-of-sales nor opex."""

    code: str = "INVALID_PARENT_GROUP"

    def __init__(self, category_id: str, parent: Any):
        self.category_id = category_id
        self.parent = parent
        super().__init__(
            f"Category {category_id} has invalid parent group {parent!r}; "
            f"expected 'cost-of-sales' or 'opex'"
        )


# Configuration exceptions


class ConfigurationError(BudgetKernelError):
    """Configuration content is missing required keys or has bad values."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(f"{message} ({source})" if source else message)
