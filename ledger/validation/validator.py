"""
Ledger Integrity Validation

The store accepts whatever it is given: it never checks that an expense's
category still exists, and ids are supplied by callers. This validator
looks at a store and reports what is off.

CHECKS:
- Expenses whose category id is not in the category set (warning)
- No "Others" category to fall back to (error)
- Duplicate expense or category ids (error)
- Expense snapshots whose name/emoji differ from the live category (info)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the caller can decide.
"""

from collections import Counter

import structlog

from ledger.models.ledger import OTHERS_CATEGORY_NAME
from ledger.models.results import ValidationIssue, ValidationResult
from ledger.store.expense_store import ExpenseStore


logger = structlog.get_logger(__name__)


class LedgerValidator:
    """Runs integrity checks against a snapshot of an ExpenseStore."""

    def __init__(self, store: ExpenseStore):
        self._store = store

    def validate(self) -> ValidationResult:
        with self._store.lock:
            expenses = self._store.expenses
            categories = self._store.categories

        issues: list[ValidationIssue] = []
        issues.extend(self._check_others(categories))
        issues.extend(self._check_duplicates(
            "expense.id", [str(e.id) for e in expenses]
        ))
        issues.extend(self._check_duplicates(
            "category.id", [str(c.id) for c in categories]
        ))
        issues.extend(self._check_category_references(expenses, categories))

        result = ValidationResult(issues=issues)
        if result.issues:
            logger.info(
                "ledger_validation_issues",
                error_count=result.error_count,
                issue_count=len(result.issues),
            )
        return result

    def _check_others(self, categories) -> list[ValidationIssue]:
        if any(c.name == OTHERS_CATEGORY_NAME for c in categories):
            return []
        return [ValidationIssue(
            field="categories",
            issue_type="missing_others",
            message=f"No '{OTHERS_CATEGORY_NAME}' category; deleted categories cannot hand over their expenses",
            severity="error",
            suggested_fix=f"Add a category named '{OTHERS_CATEGORY_NAME}'",
        )]

    def _check_duplicates(self, field: str, ids: list[str]) -> list[ValidationIssue]:
        return [
            ValidationIssue(
                field=field,
                issue_type="duplicate_id",
                message=f"Id {dup} appears {count} times",
                severity="error",
                entity_id=dup,
            )
            for dup, count in Counter(ids).items()
            if count > 1
        ]

    def _check_category_references(self, expenses, categories) -> list[ValidationIssue]:
        live = {c.id: c for c in categories}
        issues = []
        for expense in expenses:
            current = live.get(expense.category.id)
            if current is None:
                issues.append(ValidationIssue(
                    field="expense.category",
                    issue_type="orphaned_category",
                    message=(
                        f"Expense '{expense.name}' refers to category "
                        f"'{expense.category.name}' which no longer exists"
                    ),
                    severity="warning",
                    entity_id=str(expense.id),
                    suggested_fix=f"Move it to '{OTHERS_CATEGORY_NAME}'",
                ))
            elif (current.name, current.emoji) != (expense.category.name, expense.category.emoji):
                issues.append(ValidationIssue(
                    field="expense.category",
                    issue_type="stale_category_snapshot",
                    message=(
                        f"Expense '{expense.name}' shows category as "
                        f"'{expense.category.name}', currently '{current.name}'"
                    ),
                    severity="info",
                    entity_id=str(expense.id),
                ))
        return issues
