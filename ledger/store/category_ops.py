"""
Cascading Category Operations

Expenses embed a snapshot of their category, so renaming or deleting a
category means rewriting every expense that carries the old snapshot.
These helpers do that rewrite explicitly and then change the category.

The protected "Others" category can be neither renamed nor deleted here.
"""

import structlog

from ledger.models.audit import AuditEventBuilder
from ledger.models.ledger import OTHERS_CATEGORY_NAME, Category
from ledger.store.expense_store import ExpenseStore


logger = structlog.get_logger(__name__)


class CategoryOperationError(Exception):
    """Base exception for category operations."""
    pass


class ProtectedCategoryError(CategoryOperationError):
    """Attempted to rename or delete the catch-all category."""

    def __init__(self, category: Category):
        self.category = category
        super().__init__(f"Category '{category.name}' is protected")


def reassign_expenses(
    store: ExpenseStore,
    source: Category,
    target: Category,
) -> int:
    """
    Point every expense of `source` at `target`.

    Returns the number of expenses rewritten.
    """
    with store.lock:
        moved = [
            expense.model_copy(update={"category": target})
            for expense in store.expenses_for_category(source)
        ]
        count = store.update_expenses(moved)

    if count:
        store.publish(AuditEventBuilder.expenses_reassigned(source.id, target.id, count))
    return count


def delete_category_moving_to_others(store: ExpenseStore, category: Category) -> int:
    """
    Move the category's expenses to "Others", then delete the category.

    Returns the number of expenses moved.

    Raises:
        ProtectedCategoryError: If category is "Others" itself
    """
    if category.is_protected:
        raise ProtectedCategoryError(category)

    with store.lock:
        others = store.others_category()
        moved = 0
        if others is None:
            logger.warning(
                "others_category_missing",
                category_id=str(category.id),
                orphaned=len(store.expenses_for_category(category)),
            )
        else:
            moved = reassign_expenses(store, category, others)
        store.delete_category(category)

    return moved


def rename_category(store: ExpenseStore, category: Category, new_name: str) -> Category:
    """
    Rename a category and every expense snapshot of it.

    Returns the updated category.

    Raises:
        ValueError: If new_name is blank or the reserved "Others" name
        ProtectedCategoryError: If category is "Others"
    """
    new_name = new_name.strip()
    if not new_name:
        raise ValueError("Category name cannot be empty")
    if new_name == OTHERS_CATEGORY_NAME:
        raise ValueError(f"'{OTHERS_CATEGORY_NAME}' is reserved for the catch-all category")
    if category.is_protected:
        raise ProtectedCategoryError(category)

    updated = category.model_copy(update={"name": new_name})
    with store.lock:
        reassign_expenses(store, category, updated)
        store.update_category(updated)
    return updated
