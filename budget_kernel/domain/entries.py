"""
Budget domain value objects (``budget_kernel.domain.entries``).

Responsibility
--------------
Frozen dataclass value objects for the leaf facts and configuration the
engines aggregate: budget entries, categories, their parent groups and
subgroups.

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Consumed by
every engine in ``budget_engines`` and produced by the entry store and the
configuration bridges.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields are ``Decimal`` -- NEVER ``float``.  Anything else is
  a caller bug and raises ``InvalidAmountError`` at construction.
* ``month`` is 1..12; ``quarter`` is derived, never stored.
* A category has exactly one parent group and at most one subgroup.

Failure modes
-------------
* ``InvalidAmountError`` -- non-Decimal amount.
* ``InvalidPeriodError`` -- month outside 1..12.
* ``InvalidParentGroupError`` -- parent is not a ``ParentGroup``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from budget_kernel.domain.periods import quarter_of, validate_month
from budget_kernel.exceptions import InvalidAmountError, InvalidParentGroupError

ZERO = Decimal("0")


def require_decimal(field_name: str, value: object, *, optional: bool = False) -> None:
    """Raise InvalidAmountError unless ``value`` is a Decimal (or None if optional)."""
    if value is None and optional:
        return
    if not isinstance(value, Decimal):
        raise InvalidAmountError(field_name, value)


class ParentGroup(str, Enum):
    """Top-level bucket every category belongs to."""

    COST_OF_SALES = "cost-of-sales"
    OPEX = "opex"

    @property
    def display_name(self) -> str:
        return "Cost of Sales" if self is ParentGroup.COST_OF_SALES else "OpEx"


@dataclass(frozen=True)
class CategorySubgroup:
    """A named partition of a parent group (e.g. "Comp and Benefits")."""

    id: str
    name: str


@dataclass(frozen=True)
class BudgetCategory:
    """
    A spend category, supplied by configuration.

    ``is_negative`` marks contra categories (e.g. capitalized salaries).  It
    is a display concern only; aggregation sums stored signs unchanged.
    """

    id: str
    name: str
    parent: ParentGroup
    subgroup: CategorySubgroup | None = None
    is_negative: bool = False
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.parent, ParentGroup):
            raise InvalidParentGroupError(self.id, self.parent)


@dataclass(frozen=True)
class BudgetEntry:
    """
    Planned vs. realized amounts for one category in one month.

    ``actual_amount`` is None until the month's spend is known;
    ``reforecast_amount`` is the projection for a not-yet-final month;
    ``adjustment_amount`` is a manual correction netted against the counted
    figure (e.g. a capitalized-cost offset).
    """

    category_id: str
    year: int
    month: int
    budget_amount: Decimal
    actual_amount: Decimal | None = None
    reforecast_amount: Decimal | None = None
    adjustment_amount: Decimal = ZERO
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        validate_month(self.month, self.year)
        require_decimal("budget_amount", self.budget_amount)
        require_decimal("actual_amount", self.actual_amount, optional=True)
        require_decimal("reforecast_amount", self.reforecast_amount, optional=True)
        require_decimal("adjustment_amount", self.adjustment_amount)

    @property
    def quarter(self) -> int:
        return quarter_of(self.month)

    @property
    def period_key(self) -> tuple[str, int, int]:
        """Uniqueness key: one entry per (category, year, month)."""
        return (self.category_id, self.year, self.month)

    @property
    def actual_or_zero(self) -> Decimal:
        return self.actual_amount if self.actual_amount is not None else ZERO

    @property
    def reforecast_or_zero(self) -> Decimal:
        return self.reforecast_amount if self.reforecast_amount is not None else ZERO

    @property
    def has_actuals(self) -> bool:
        return self.actual_amount is not None and self.actual_amount > ZERO
