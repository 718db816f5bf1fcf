"""
Summary Queries

Derived numbers the UI shows: totals for a day, month or year, a breakdown
by category, and how spending compares with the budget limit of a period.

All queries are read-only and deterministic for a given reference time.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from ledger.models.ledger import BudgetPeriod, Category, Currency, Expense
from ledger.models.results import BudgetState, BudgetStatus, CategoryTotal
from ledger.store.expense_store import ExpenseStore


def same_period(moment: datetime, reference: datetime, period: BudgetPeriod) -> bool:
    """True if moment falls in the same calendar day/month/year as reference."""
    if period == BudgetPeriod.DAILY:
        return moment.date() == reference.date()
    if period == BudgetPeriod.MONTHLY:
        return (moment.year, moment.month) == (reference.year, reference.month)
    return moment.year == reference.year


def format_amount(amount: Decimal, currency: Currency) -> str:
    return f"{currency.symbol}{amount:,.2f}"


class LedgerQueries:
    """
    Read-only queries over an ExpenseStore.

    Args:
        store: The store to read
        clock: Returns "now"; injectable so tests can pin the date
    """

    def __init__(
        self,
        store: ExpenseStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._clock = clock or datetime.now

    def _reference(self, reference: Optional[datetime]) -> datetime:
        return reference if reference is not None else self._clock()

    def expenses_in_period(
        self,
        period: BudgetPeriod,
        reference: Optional[datetime] = None,
    ) -> list[Expense]:
        reference = self._reference(reference)
        return [
            expense for expense in self._store.expenses
            if same_period(expense.date, reference, period)
        ]

    def total_for_period(
        self,
        period: BudgetPeriod,
        reference: Optional[datetime] = None,
    ) -> Decimal:
        return sum(
            (e.amount for e in self.expenses_in_period(period, reference)),
            Decimal("0"),
        )

    def total_for_category_in_period(
        self,
        category: Category,
        period: BudgetPeriod,
        reference: Optional[datetime] = None,
    ) -> Decimal:
        return sum(
            (
                e.amount for e in self.expenses_in_period(period, reference)
                if e.category.id == category.id
            ),
            Decimal("0"),
        )

    def count_for_category_in_period(
        self,
        category: Category,
        period: BudgetPeriod,
        reference: Optional[datetime] = None,
    ) -> int:
        return sum(
            1 for e in self.expenses_in_period(period, reference)
            if e.category.id == category.id
        )

    def category_breakdown(
        self,
        period: BudgetPeriod,
        reference: Optional[datetime] = None,
    ) -> list[CategoryTotal]:
        """Total and count per category, in category order. Empty categories included."""
        in_period = self.expenses_in_period(period, reference)
        breakdown = []
        for category in self._store.categories:
            matching = [e for e in in_period if e.category.id == category.id]
            breakdown.append(CategoryTotal(
                category=category,
                total=sum((e.amount for e in matching), Decimal("0")),
                count=len(matching),
            ))
        return breakdown

    def budget_status(
        self,
        period: Optional[BudgetPeriod] = None,
        reference: Optional[datetime] = None,
    ) -> BudgetStatus:
        """
        Compare spending in a period with that period's limit.

        period defaults to the profile's selected reporting period.
        """
        reference = self._reference(reference)
        profile = self._store.profile
        settings = profile.budget_settings
        period = period or settings.period

        spent = self.total_for_period(period, reference)
        limit = settings.limit_for(period)

        if limit is None:
            return BudgetStatus(
                period=period,
                reference=reference,
                spent=spent,
                state=BudgetState.NO_LIMIT,
                message="No budget limit set",
            )

        difference = limit - spent
        if difference > 0:
            state = BudgetState.UNDER
            message = f"You've saved {format_amount(difference, profile.currency)} so far!"
        elif difference < 0:
            state = BudgetState.OVER
            message = (
                "You've exceeded your budget by "
                f"{format_amount(abs(difference), profile.currency)}"
            )
        else:
            state = BudgetState.MET
            message = "You've exactly met your budget"

        return BudgetStatus(
            period=period,
            reference=reference,
            spent=spent,
            limit=limit,
            difference=difference,
            state=state,
            message=message,
        )
