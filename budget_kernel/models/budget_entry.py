"""
Module: budget_kernel.models.budget_entry
Responsibility: ORM persistence for budget entries -- one row per category
    per month.
Architecture position: Kernel > Models.  May import from db/base.py and
    the domain value objects it converts to and from.

Invariants enforced:
    - At most one entry per (category_id, year, month): uq_budget_entry_period.
    - Amounts are Decimal, stored losslessly (DecimalString).

Failure modes:
    - IntegrityError on a second row for the same category and period.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import TrackedBase
from budget_kernel.domain.entries import BudgetEntry


class BudgetEntryModel(TrackedBase):
    """
    Persistent budget entry.

    Guarantees:
        - (category_id, year, month) is unique.
        - actual_amount / reforecast_amount are NULL until known.
    """

    __tablename__ = "budget_entries"

    __table_args__ = (
        UniqueConstraint("category_id", "year", "month", name="uq_budget_entry_period"),
        Index("idx_budget_entry_year_month", "year", "month"),
    )

    category_id: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)

    budget_amount: Mapped[Decimal] = mapped_column(nullable=False)
    actual_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    reforecast_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    adjustment_amount: Mapped[Decimal] = mapped_column(nullable=False)

    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)

    def __repr__(self) -> str:
        return f"<BudgetEntry {self.category_id} {self.year}-{self.month:02d}>"

    def to_dto(self) -> BudgetEntry:
        """Convert ORM model to frozen domain object."""
        return BudgetEntry(
            id=self.id,
            category_id=self.category_id,
            year=self.year,
            month=self.month,
            budget_amount=self.budget_amount,
            actual_amount=self.actual_amount,
            reforecast_amount=self.reforecast_amount,
            adjustment_amount=self.adjustment_amount,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: BudgetEntry) -> BudgetEntryModel:
        """Create ORM model from a domain object; timestamps must be set."""
        return cls(
            id=dto.id,
            category_id=dto.category_id,
            year=dto.year,
            month=dto.month,
            budget_amount=dto.budget_amount,
            actual_amount=dto.actual_amount,
            reforecast_amount=dto.reforecast_amount,
            adjustment_amount=dto.adjustment_amount,
            notes=dto.notes,
            created_at=dto.created_at,
            updated_at=dto.updated_at,
        )
