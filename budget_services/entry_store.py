"""
BudgetStore -- persistence for entries, forecast modes and yearly targets.

Responsibility:
    The collaborator that supplies raw inputs to the engines.  Records
    budget entries with create / update-in-place / delete-when-empty
    semantics, stores the operator's per-month Final flags and yearly
    targets, and hands out immutable ``BudgetSnapshot`` values.

Architecture position:
    Services -- imperative shell.  Owns all I/O; the engines only ever see
    the snapshot it returns.

Invariants enforced:
    - At most one entry per (category, year, month); enforced by lookup
      before insert and by a unique constraint.
    - Amounts are Decimal; anything else raises InvalidAmountError.
    - Timestamps come from the injected Clock.
    - Flush-only: the store never commits or rolls back; the caller (for
      example ``session_scope()``) owns the transaction.

Failure modes:
    - UnknownCategoryError when the store was given categories and the
      category id is not among them.
    - InvalidPeriodError for a month outside 1..12.
    - EntryNotFoundError from get_entry / delete_entry.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.entries import ZERO, BudgetCategory, BudgetEntry, require_decimal
from budget_kernel.domain.forecast_modes import ForecastModes, MonthMode
from budget_kernel.domain.periods import validate_month
from budget_kernel.domain.snapshot import BudgetSnapshot
from budget_kernel.exceptions import EntryNotFoundError, UnknownCategoryError
from budget_kernel.logging_config import get_logger
from budget_kernel.models import BudgetEntryModel, ForecastModeModel, YearlyTargetModel

logger = get_logger("services.entry_store")


class BudgetStore:
    """
    SQL-backed store for the engine inputs.

    Contract:
        Accepts a caller-owned SQLAlchemy ``Session``; all writes are
        flushed, never committed.  Returns frozen domain objects, never ORM
        rows.

    Non-goals:
        - Does NOT parse user-typed text; amounts arrive as Decimal.
        - Does NOT compute anything; the engines do.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        categories: Iterable[BudgetCategory] | None = None,
    ):
        self.session = session
        self._clock = clock or SystemClock()
        self._categories = tuple(categories) if categories is not None else None
        self._category_ids = (
            frozenset(c.id for c in self._categories)
            if self._categories is not None
            else None
        )

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def _find_entry(self, category_id: str, year: int, month: int) -> BudgetEntryModel | None:
        return self.session.execute(
            select(BudgetEntryModel).where(
                BudgetEntryModel.category_id == category_id,
                BudgetEntryModel.year == year,
                BudgetEntryModel.month == month,
            )
        ).scalar_one_or_none()

    def record_entry(
        self,
        category_id: str,
        year: int,
        month: int,
        *,
        budget_amount: Decimal | None = None,
        actual_amount: Decimal | None = None,
        reforecast_amount: Decimal | None = None,
        adjustment_amount: Decimal | None = None,
        notes: str | None = None,
    ) -> BudgetEntry | None:
        """
        Set the full state of one (category, year, month) entry.

        Every argument describes the new value; ``None`` (or empty notes)
        means the field is empty.  The first call with any data creates the
        entry, later calls update it in place, and a call where every field
        is empty deletes it.

        Returns:
            The stored entry, or None when the entry was (or stays) absent.
        """
        validate_month(month, year)
        if self._category_ids is not None and category_id not in self._category_ids:
            raise UnknownCategoryError(category_id)
        require_decimal("budget_amount", budget_amount, optional=True)
        require_decimal("actual_amount", actual_amount, optional=True)
        require_decimal("reforecast_amount", reforecast_amount, optional=True)
        require_decimal("adjustment_amount", adjustment_amount, optional=True)

        existing = self._find_entry(category_id, year, month)
        is_empty = (
            budget_amount is None
            and actual_amount is None
            and reforecast_amount is None
            and adjustment_amount is None
            and not notes
        )

        if is_empty:
            if existing is not None:
                self.session.delete(existing)
                self.session.flush()
                logger.info("entry_deleted", extra={
                    "entry_id": str(existing.id),
                    "category_id": category_id,
                    "year": year,
                    "month": month,
                    "reason": "all_fields_empty",
                })
            return None

        now = self._clock.now()
        if existing is None:
            existing = BudgetEntryModel(
                category_id=category_id,
                year=year,
                month=month,
                created_at=now,
            )
            self.session.add(existing)
            event = "entry_created"
        else:
            event = "entry_updated"

        existing.budget_amount = budget_amount if budget_amount is not None else ZERO
        existing.actual_amount = actual_amount
        existing.reforecast_amount = reforecast_amount
        existing.adjustment_amount = adjustment_amount if adjustment_amount is not None else ZERO
        existing.notes = notes or ""
        existing.updated_at = now
        self.session.flush()

        logger.info(event, extra={
            "entry_id": str(existing.id),
            "category_id": category_id,
            "year": year,
            "month": month,
            "budget_amount": str(existing.budget_amount),
        })
        return existing.to_dto()

    def get_entry(self, entry_id: UUID) -> BudgetEntry:
        row = self.session.get(BudgetEntryModel, entry_id)
        if row is None:
            raise EntryNotFoundError(str(entry_id))
        return row.to_dto()

    def delete_entry(self, entry_id: UUID) -> None:
        row = self.session.get(BudgetEntryModel, entry_id)
        if row is None:
            raise EntryNotFoundError(str(entry_id))
        self.session.delete(row)
        self.session.flush()
        logger.info("entry_deleted", extra={
            "entry_id": str(entry_id),
            "category_id": row.category_id,
            "year": row.year,
            "month": row.month,
            "reason": "explicit",
        })

    def list_entries(self, year: int | None = None) -> tuple[BudgetEntry, ...]:
        """Entries ordered by year, month, category id."""
        stmt = select(BudgetEntryModel).order_by(
            BudgetEntryModel.year,
            BudgetEntryModel.month,
            BudgetEntryModel.category_id,
        )
        if year is not None:
            stmt = stmt.where(BudgetEntryModel.year == year)
        return tuple(row.to_dto() for row in self.session.execute(stmt).scalars())

    # ------------------------------------------------------------------
    # Forecast modes
    # ------------------------------------------------------------------

    def set_forecast_mode(self, year: int, month: int, is_final: bool) -> ForecastModes:
        """Mark one month Final or Forecast; returns the resulting modes."""
        validate_month(month, year)
        row = self.session.execute(
            select(ForecastModeModel).where(
                ForecastModeModel.year == year,
                ForecastModeModel.month == month,
            )
        ).scalar_one_or_none()

        now = self._clock.now()
        if row is None:
            row = ForecastModeModel(year=year, month=month, created_at=now)
            self.session.add(row)
        row.is_final = is_final
        row.updated_at = now
        self.session.flush()

        logger.info("forecast_mode_set", extra={
            "year": year,
            "month": month,
            "mode": MonthMode.from_flag(is_final).value,
        })
        return self.forecast_modes()

    def toggle_forecast_mode(self, year: int, month: int) -> MonthMode:
        """Flip one month between Final and Forecast; returns the new mode."""
        is_final = not self.forecast_modes().is_final(year, month)
        self.set_forecast_mode(year, month, is_final)
        return MonthMode.from_flag(is_final)

    def forecast_modes(self) -> ForecastModes:
        rows = self.session.execute(
            select(ForecastModeModel.year, ForecastModeModel.month).where(
                ForecastModeModel.is_final.is_(True)
            )
        ).all()
        return ForecastModes.of((year, month) for year, month in rows)

    # ------------------------------------------------------------------
    # Yearly targets
    # ------------------------------------------------------------------

    def set_yearly_target(self, year: int, amount: Decimal) -> None:
        require_decimal("amount", amount)
        row = self.session.execute(
            select(YearlyTargetModel).where(YearlyTargetModel.year == year)
        ).scalar_one_or_none()

        now = self._clock.now()
        if row is None:
            row = YearlyTargetModel(year=year, created_at=now)
            self.session.add(row)
        row.amount = amount
        row.updated_at = now
        self.session.flush()

        logger.info("yearly_target_set", extra={"year": year, "amount": str(amount)})

    def yearly_targets(self) -> dict[int, Decimal]:
        rows = self.session.execute(
            select(YearlyTargetModel.year, YearlyTargetModel.amount)
        ).all()
        return {year: amount for year, amount in rows}

    # ------------------------------------------------------------------
    # Whole store
    # ------------------------------------------------------------------

    def clear_all(self) -> None:
        """Remove every entry, forecast mode and target."""
        for model in (BudgetEntryModel, ForecastModeModel, YearlyTargetModel):
            self.session.execute(delete(model))
        self.session.flush()
        logger.warning("store_cleared")

    def snapshot(self, categories: Iterable[BudgetCategory] | None = None) -> BudgetSnapshot:
        """
        Immutable copy of every engine input.

        ``categories`` defaults to the categories the store was built with.
        """
        if categories is None:
            categories = self._categories or ()
        snapshot = BudgetSnapshot.build(
            entries=self.list_entries(),
            categories=categories,
            forecast_modes=self.forecast_modes(),
            yearly_targets=self.yearly_targets(),
        )
        logger.debug("snapshot_taken", extra={
            "entry_count": len(snapshot.entries),
            "final_months": len(snapshot.forecast_modes.final_periods),
        })
        return snapshot
