"""
budget_engines.rollup -- Category rollup aggregator.

Responsibility:
    Sum leaf ``BudgetEntry`` records into category summaries, roll the
    categories into their configured subgroups, the subgroups and ungrouped
    categories into their parent group (cost of sales / opex), and both
    groups into a net total -- for one month or any window of months.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import budget_kernel.domain and budget_kernel.logging_config.
    Consumed by every other engine (tracking, ytd, forecast, kpi, runway).

Invariants enforced:
    - Variance sign convention: variance = (actual - budget) * -1
      everywhere; positive means under budget.
    - variance_percent = variance / |budget| * 100, and 0 when budget is 0.
    - Fields are summed independently at every level; contra categories
      keep their stored sign (``is_negative`` is display-only).
    - Purity: identical inputs produce identical outputs; the per-pass
      accumulator is private to this module and discarded after the pass.

Failure modes:
    - DuplicateEntryError if two entries share (category, year, month).
    - A period with no matching entries is not an error: every figure is 0.
    - Entries for unknown category ids are skipped (logged at DEBUG).

Usage:
    from budget_engines.rollup import calculate_monthly_data

    monthly = calculate_monthly_data(entries, categories, year=2025, month=3)
    print(monthly.net_total.budget, monthly.opex.total.actual)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from decimal import Decimal

from budget_engines.tracer import traced_engine
from budget_kernel.domain.entries import (
    ZERO,
    BudgetCategory,
    BudgetEntry,
    CategorySubgroup,
    ParentGroup,
)
from budget_kernel.domain.periods import MONTHS, validate_month
from budget_kernel.exceptions import DuplicateEntryError
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.rollup")

HUNDRED = Decimal("100")
SIGN_FLIP = Decimal("-1")


def signed_variance(actual: Decimal, budget: Decimal) -> Decimal:
    """(actual - budget) * -1: positive when under budget."""
    return (actual - budget) * SIGN_FLIP


def variance_percent(variance: Decimal, budget: Decimal) -> Decimal:
    """Variance as a percentage of |budget|; 0 when budget is 0."""
    if budget == ZERO:
        return ZERO
    return variance / abs(budget) * HUNDRED


@dataclass(frozen=True)
class Totals:
    """Field-by-field totals shared by categories, subgroups, groups and periods."""

    budget: Decimal = ZERO
    actual: Decimal = ZERO
    reforecast: Decimal = ZERO
    adjustments: Decimal = ZERO
    variance: Decimal = ZERO

    def __add__(self, other: Totals) -> Totals:
        if not isinstance(other, Totals):
            return NotImplemented
        return Totals(
            budget=self.budget + other.budget,
            actual=self.actual + other.actual,
            reforecast=self.reforecast + other.reforecast,
            adjustments=self.adjustments + other.adjustments,
            variance=self.variance + other.variance,
        )

    @classmethod
    def sum_of(cls, items: Iterable[Totals]) -> Totals:
        total = cls()
        for item in items:
            total = total + item
        return total

    @property
    def variance_percent(self) -> Decimal:
        return variance_percent(self.variance, self.budget)


@dataclass(frozen=True)
class CategorySummary:
    """Totals for one category over the aggregated window."""

    category_id: str
    category_name: str
    budget: Decimal
    actual: Decimal
    reforecast: Decimal
    adjustments: Decimal
    variance: Decimal
    variance_percent: Decimal
    is_negative: bool = False

    @property
    def totals(self) -> Totals:
        return Totals(
            budget=self.budget,
            actual=self.actual,
            reforecast=self.reforecast,
            adjustments=self.adjustments,
            variance=self.variance,
        )


@dataclass(frozen=True)
class SubCategoryGroup:
    """A subgroup (e.g. "Comp and Benefits") and the sum of its members."""

    id: str
    name: str
    categories: tuple[CategorySummary, ...]
    total: Totals


@dataclass(frozen=True)
class CategoryGroup:
    """
    A parent group.

    ``categories`` holds the members that belong to no subgroup; members of
    a subgroup are reachable through ``subgroups``.  ``total`` covers both.
    """

    id: str
    name: str
    categories: tuple[CategorySummary, ...]
    subgroups: tuple[SubCategoryGroup, ...]
    total: Totals

    def all_categories(self) -> Iterator[CategorySummary]:
        yield from self.categories
        for subgroup in self.subgroups:
            yield from subgroup.categories

    def find_subgroup(self, subgroup_id: str) -> SubCategoryGroup | None:
        for subgroup in self.subgroups:
            if subgroup.id == subgroup_id:
                return subgroup
        return None

    def find_category(self, category_id: str) -> CategorySummary | None:
        for summary in self.all_categories():
            if summary.category_id == category_id:
                return summary
        return None


@dataclass(frozen=True)
class PeriodData:
    """Hierarchical rollup of one year over a window of months."""

    year: int
    months: tuple[int, ...]
    cost_of_sales: CategoryGroup
    opex: CategoryGroup
    net_total: Totals

    @property
    def month(self) -> int:
        """The month of a monthly rollup (last month of the window; 0 if empty)."""
        return self.months[-1] if self.months else 0

    @property
    def groups(self) -> tuple[CategoryGroup, CategoryGroup]:
        return (self.cost_of_sales, self.opex)

    def find_subgroup(self, subgroup_id: str) -> SubCategoryGroup | None:
        for group in self.groups:
            found = group.find_subgroup(subgroup_id)
            if found is not None:
                return found
        return None

    def find_category(self, category_id: str) -> CategorySummary | None:
        for group in self.groups:
            found = group.find_category(category_id)
            if found is not None:
                return found
        return None


# A monthly rollup is a one-month PeriodData.
MonthlyData = PeriodData


@dataclass(frozen=True)
class CategoryShare:
    """A category's share of its parent group, per column, adjustments included."""

    category_id: str
    budget_percent: Decimal
    actual_percent: Decimal
    reforecast_percent: Decimal


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------


class _CategoryAccumulator:
    """Fixed-shape running sums for one category."""

    __slots__ = ("budget", "actual", "reforecast", "adjustments")

    def __init__(self) -> None:
        self.budget = ZERO
        self.actual = ZERO
        self.reforecast = ZERO
        self.adjustments = ZERO

    def add(self, entry: BudgetEntry) -> None:
        self.budget += entry.budget_amount
        self.actual += entry.actual_or_zero
        self.reforecast += entry.reforecast_or_zero
        self.adjustments += entry.adjustment_amount

    def summary(self, category: BudgetCategory) -> CategorySummary:
        variance = signed_variance(self.actual, self.budget)
        return CategorySummary(
            category_id=category.id,
            category_name=category.name,
            budget=self.budget,
            actual=self.actual,
            reforecast=self.reforecast,
            adjustments=self.adjustments,
            variance=variance,
            variance_percent=variance_percent(variance, self.budget),
            is_negative=category.is_negative,
        )


class _CategoryLedger:
    """Accumulators keyed by category id, built once per aggregation pass."""

    def __init__(self, categories: Sequence[BudgetCategory]):
        self._categories = categories
        self._buckets: dict[str, _CategoryAccumulator] = {
            category.id: _CategoryAccumulator() for category in categories
        }
        self.skipped = 0

    def post(self, entry: BudgetEntry) -> None:
        bucket = self._buckets.get(entry.category_id)
        if bucket is None:
            self.skipped += 1
            return
        bucket.add(entry)

    def summaries(self) -> dict[str, CategorySummary]:
        return {
            category.id: self._buckets[category.id].summary(category)
            for category in self._categories
        }


def entries_in_scope(
    entries: Iterable[BudgetEntry],
    year: int,
    categories: Sequence[BudgetCategory] | None = None,
) -> tuple[BudgetEntry, ...]:
    """
    Entries of ``year``, restricted to configured categories when given.

    Uses the same rule as the rollup ledger, so an entry the rollup skips
    never moves a cutoff or a trend either.
    """
    if categories is None:
        return tuple(e for e in entries if e.year == year)
    configured = frozenset(c.id for c in categories)
    return tuple(
        e for e in entries if e.year == year and e.category_id in configured
    )


def index_entries(
    entries: Iterable[BudgetEntry],
    year: int,
    months: Iterable[int],
) -> dict[tuple[str, int, int], BudgetEntry]:
    """
    Entries of ``year`` within ``months`` keyed by ``BudgetEntry.period_key``.

    Raises:
        DuplicateEntryError: If two entries share a category and month.
    """
    wanted = frozenset(months)
    indexed: dict[tuple[str, int, int], BudgetEntry] = {}
    for entry in entries:
        if entry.year != year or entry.month not in wanted:
            continue
        key = entry.period_key
        if key in indexed:
            logger.error("duplicate_entry_detected", extra={
                "category_id": entry.category_id,
                "year": year,
                "month": entry.month,
            })
            raise DuplicateEntryError(entry.category_id, year, entry.month)
        indexed[key] = entry
    return indexed


def _ordered_subgroups(categories: Iterable[BudgetCategory]) -> list[CategorySubgroup]:
    seen: dict[str, CategorySubgroup] = {}
    for category in categories:
        if category.subgroup is not None and category.subgroup.id not in seen:
            seen[category.subgroup.id] = category.subgroup
    return list(seen.values())


def _build_group(
    parent: ParentGroup,
    categories: Sequence[BudgetCategory],
    summaries: dict[str, CategorySummary],
) -> CategoryGroup:
    members = [c for c in categories if c.parent is parent]

    ungrouped = tuple(summaries[c.id] for c in members if c.subgroup is None)

    subgroups: list[SubCategoryGroup] = []
    for subgroup in _ordered_subgroups(members):
        in_subgroup = tuple(
            summaries[c.id] for c in members
            if c.subgroup is not None and c.subgroup.id == subgroup.id
        )
        subgroups.append(SubCategoryGroup(
            id=subgroup.id,
            name=subgroup.name,
            categories=in_subgroup,
            total=Totals.sum_of(s.totals for s in in_subgroup),
        ))

    total = Totals.sum_of(s.totals for s in ungrouped) + Totals.sum_of(
        sg.total for sg in subgroups
    )
    return CategoryGroup(
        id=parent.value,
        name=parent.display_name,
        categories=ungrouped,
        subgroups=tuple(subgroups),
        total=total,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@traced_engine("rollup", "1.0", fingerprint_fields=("year", "months"))
def calculate_period_data(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    year: int,
    months: Iterable[int],
) -> PeriodData:
    """
    Aggregate every entry of ``year`` whose month is in ``months``.

    Preconditions:
        Every month in ``months`` is 1..12.

    Postconditions:
        Every configured category appears exactly once (zeros if it has no
        entries).  net_total = cost_of_sales.total + opex.total, every field
        summed independently.

    Raises:
        InvalidPeriodError: If a month is outside 1..12.
        DuplicateEntryError: If two entries share (category, year, month).
    """
    window = tuple(sorted({validate_month(m, year) for m in months}))
    categories = tuple(categories)

    indexed = index_entries(entries, year, window)
    ledger = _CategoryLedger(categories)
    for entry in indexed.values():
        ledger.post(entry)

    if ledger.skipped:
        logger.debug("rollup_unknown_categories_skipped", extra={
            "year": year,
            "skipped": ledger.skipped,
        })

    summaries = ledger.summaries()
    cost_of_sales = _build_group(ParentGroup.COST_OF_SALES, categories, summaries)
    opex = _build_group(ParentGroup.OPEX, categories, summaries)

    net_total = cost_of_sales.total + opex.total

    logger.debug("period_rollup_calculated", extra={
        "year": year,
        "months": list(window),
        "entry_count": len(indexed),
        "net_budget": str(net_total.budget),
        "net_actual": str(net_total.actual),
    })

    return PeriodData(
        year=year,
        months=window,
        cost_of_sales=cost_of_sales,
        opex=opex,
        net_total=net_total,
    )


def calculate_monthly_data(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    year: int,
    month: int,
) -> MonthlyData:
    """Rollup for a single (year, month)."""
    return calculate_period_data(entries, categories, year, (month,))


def calculate_monthly_series(
    entries: Iterable[BudgetEntry],
    categories: Sequence[BudgetCategory],
    year: int,
) -> tuple[MonthlyData, ...]:
    """Twelve monthly rollups, January first."""
    entries = tuple(entries)
    return tuple(
        calculate_monthly_data(entries, categories, year, month)
        for month in MONTHS
    )


def calculate_category_shares(group: CategoryGroup) -> tuple[CategoryShare, ...]:
    """
    Each category's percentage of its parent group, per column.

    Adjustments are added to both the category and the group amounts; a
    column whose group total is 0 yields 0.
    """
    parent = group.total

    def share(part: Decimal, whole: Decimal) -> Decimal:
        return part / whole * HUNDRED if whole != ZERO else ZERO

    return tuple(
        CategoryShare(
            category_id=summary.category_id,
            budget_percent=share(
                summary.budget + summary.adjustments,
                parent.budget + parent.adjustments,
            ),
            actual_percent=share(
                summary.actual + summary.adjustments,
                parent.actual + parent.adjustments,
            ),
            reforecast_percent=share(
                summary.reforecast + summary.adjustments,
                parent.reforecast + parent.adjustments,
            ),
        )
        for summary in group.all_categories()
    )
