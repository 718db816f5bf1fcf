"""Tests for period totals, category breakdown and budget status."""

from datetime import datetime
from decimal import Decimal

import pytest

from conftest import category_named, make_expense
from ledger.models.ledger import BudgetPeriod, BudgetSettings, Currency, Profile
from ledger.models.results import BudgetState
from ledger.queries import LedgerQueries, format_amount, same_period


REFERENCE = datetime(2024, 5, 15, 18, 0)


@pytest.fixture
def queries(store):
    return LedgerQueries(store, clock=lambda: REFERENCE)


@pytest.fixture
def seeded(store):
    """Expenses spread over today, this month, this year and last year."""
    food = category_named(store, "Food")
    bills = category_named(store, "Bills")
    store.add_expense(make_expense(food, "10", when=datetime(2024, 5, 15, 8, 0)))
    store.add_expense(make_expense(bills, "40", when=datetime(2024, 5, 15, 23, 59)))
    store.add_expense(make_expense(food, "25", when=datetime(2024, 5, 2, 12, 0)))
    store.add_expense(make_expense(bills, "100", when=datetime(2024, 1, 31, 9, 0)))
    store.add_expense(make_expense(food, "999", when=datetime(2023, 5, 15, 9, 0)))
    return store


def set_budget(store, currency=Currency.USD, **limits):
    store.update_profile(Profile(
        currency=currency,
        budget_settings=BudgetSettings(**limits),
    ))


class TestPeriods:
    """Tests for calendar period matching and totals."""

    def test_same_period(self):
        a = datetime(2024, 5, 15, 0, 0)
        b = datetime(2024, 5, 15, 23, 59)
        assert same_period(a, b, BudgetPeriod.DAILY)
        assert not same_period(a, datetime(2024, 5, 16), BudgetPeriod.DAILY)
        assert same_period(a, datetime(2024, 5, 1), BudgetPeriod.MONTHLY)
        assert not same_period(a, datetime(2023, 5, 1), BudgetPeriod.MONTHLY)
        assert same_period(a, datetime(2024, 12, 31), BudgetPeriod.YEARLY)

    def test_totals_per_period(self, seeded, queries):
        assert queries.total_for_period(BudgetPeriod.DAILY) == Decimal("50")
        assert queries.total_for_period(BudgetPeriod.MONTHLY) == Decimal("75")
        assert queries.total_for_period(BudgetPeriod.YEARLY) == Decimal("175")

    def test_explicit_reference(self, seeded, queries):
        last_year = datetime(2023, 5, 15)
        assert queries.total_for_period(BudgetPeriod.DAILY, last_year) == Decimal("999")
        assert len(queries.expenses_in_period(BudgetPeriod.YEARLY, last_year)) == 1

    def test_category_in_period(self, seeded, queries):
        food = category_named(seeded, "Food")
        assert queries.total_for_category_in_period(food, BudgetPeriod.MONTHLY) == Decimal("35")
        assert queries.count_for_category_in_period(food, BudgetPeriod.YEARLY) == 2

    def test_breakdown_in_category_order(self, seeded, queries):
        breakdown = queries.category_breakdown(BudgetPeriod.YEARLY)

        assert [row.category.name for row in breakdown] == [
            c.name for c in seeded.categories
        ]
        by_name = {row.category.name: row for row in breakdown}
        assert by_name["Food"].total == Decimal("35")
        assert by_name["Bills"].total == Decimal("140")
        assert by_name["Bills"].count == 2
        assert by_name["Shopping"].total == Decimal("0")
        assert by_name["Shopping"].count == 0

    def test_format_amount(self):
        assert format_amount(Decimal("1234.5"), Currency.TWD) == "NT$1,234.50"


class TestBudgetStatus:
    """Tests for budget_status and its messages."""

    def test_no_limit(self, seeded, queries):
        status = queries.budget_status()
        assert status.state == BudgetState.NO_LIMIT
        assert status.message == "No budget limit set"
        assert status.limit is None
        assert status.spent == Decimal("75")

    def test_under_budget(self, seeded, queries):
        set_budget(seeded, monthly_limit=Decimal("100"))
        status = queries.budget_status()
        assert status.period == BudgetPeriod.MONTHLY
        assert status.state == BudgetState.UNDER
        assert status.difference == Decimal("25")
        assert status.message == "You've saved $25.00 so far!"

    def test_over_budget(self, seeded, queries):
        set_budget(seeded, currency=Currency.EUR, daily_limit=Decimal("20"), period=BudgetPeriod.DAILY)
        status = queries.budget_status()
        assert status.state == BudgetState.OVER
        assert status.difference == Decimal("-30")
        assert status.message == "You've exceeded your budget by €30.00"

    def test_exactly_met(self, seeded, queries):
        set_budget(seeded, yearly_limit=Decimal("175"))
        status = queries.budget_status(BudgetPeriod.YEARLY)
        assert status.state == BudgetState.MET
        assert status.message == "You've exactly met your budget"

    def test_explicit_period_overrides_profile(self, seeded, queries):
        set_budget(seeded, monthly_limit=Decimal("100"), daily_limit=Decimal("60"))
        status = queries.budget_status(BudgetPeriod.DAILY)
        assert status.limit == Decimal("60")
        assert status.reference == REFERENCE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
