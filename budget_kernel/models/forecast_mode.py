"""
Module: budget_kernel.models.forecast_mode
Responsibility: ORM persistence for per-month Final / Forecast flags and the
    yearly budget targets set by the operator.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One mode row per (year, month): uq_forecast_mode_period.
    - One target row per year: uq_yearly_target_year.
    - A missing mode row means Forecast.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import TrackedBase


class ForecastModeModel(TrackedBase):
    """Final / Forecast flag for one month."""

    __tablename__ = "forecast_modes"

    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_forecast_mode_period"),
    )

    year: Mapped[int] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)
    is_final: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        mode = "final" if self.is_final else "forecast"
        return f"<ForecastMode {self.year}-{self.month:02d}: {mode}>"


class YearlyTargetModel(TrackedBase):
    """Annual budget target for one year."""

    __tablename__ = "yearly_targets"

    __table_args__ = (
        UniqueConstraint("year", name="uq_yearly_target_year"),
    )

    year: Mapped[int] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<YearlyTarget {self.year}: {self.amount}>"
