"""Shared fixtures for Pocket Ledger tests."""

from datetime import datetime
from decimal import Decimal

import pytest

from ledger.config import ExchangeRateSettings
from ledger.models.ledger import Category, Expense
from ledger.services.storage import InMemoryReceiptStorage, InMemorySlotStorage
from ledger.store import ExpenseStore


@pytest.fixture
def slot_storage():
    return InMemorySlotStorage()


@pytest.fixture
def receipt_storage():
    return InMemoryReceiptStorage()


@pytest.fixture
def store(slot_storage, receipt_storage):
    return ExpenseStore(slot_storage, receipt_storage=receipt_storage)


@pytest.fixture
def rate_settings():
    return ExchangeRateSettings(
        api_key="test-key",
        base_url="https://rates.example.test/v6",
        base_currency="USD",
        timeout_seconds=2.0,
    )


def category_named(store: ExpenseStore, name: str) -> Category:
    return next(c for c in store.categories if c.name == name)


def make_expense(
    category: Category,
    amount: str = "10.00",
    name: str = "Coffee",
    when: datetime = datetime(2024, 5, 15, 9, 30),
) -> Expense:
    return Expense(name=name, amount=Decimal(amount), date=when, category=category)
