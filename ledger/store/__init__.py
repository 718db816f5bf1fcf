"""Expense store package."""

from ledger.store.expense_store import ExpenseStore, StoreSubscriber
from ledger.store.category_ops import (
    CategoryOperationError,
    ProtectedCategoryError,
    delete_category_moving_to_others,
    reassign_expenses,
    rename_category,
)

__all__ = [
    "ExpenseStore",
    "StoreSubscriber",
    "CategoryOperationError",
    "ProtectedCategoryError",
    "delete_category_moving_to_others",
    "reassign_expenses",
    "rename_category",
]
