"""
Period helpers -- months, quarters and their labels.

Responsibility:
    The single definition of the fiscal calendar used by every engine:
    twelve months, four fixed quarters of three months each, and the month
    names used for "YTD through <month>" labelling.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Failure modes:
    - InvalidPeriodError for a month outside 1..12.
    - InvalidQuarterError for a quarter outside 1..4.
"""

from budget_kernel.exceptions import InvalidPeriodError, InvalidQuarterError

MONTHS: tuple[int, ...] = tuple(range(1, 13))
QUARTERS: tuple[int, ...] = (1, 2, 3, 4)

MONTH_NAMES: tuple[str, ...] = (
    "",
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def validate_month(month: int, year: int | None = None) -> int:
    """Return ``month`` unchanged, or raise InvalidPeriodError."""
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidPeriodError(month, year)
    return month


def quarter_of(month: int) -> int:
    """Quarter containing ``month``: ceil(month / 3)."""
    validate_month(month)
    return (month + 2) // 3


def quarter_months(quarter: int) -> tuple[int, int, int]:
    """The three months of ``quarter`` (Q1 = Jan, Feb, Mar)."""
    if isinstance(quarter, bool) or quarter not in QUARTERS:
        raise InvalidQuarterError(quarter)
    first = (quarter - 1) * 3 + 1
    return (first, first + 1, first + 2)


def month_name(month: int) -> str:
    """Full English month name for 1..12."""
    return MONTH_NAMES[validate_month(month)]
