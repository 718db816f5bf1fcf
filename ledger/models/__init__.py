"""
Data Models Package

This package contains all Pydantic models used in Pocket Ledger.
All data the store keeps or persists must conform to these schemas.
"""

from ledger.models.ledger import (
    DEFAULT_CATEGORY_SEED,
    FALLBACK_RATES,
    OTHERS_CATEGORY_NAME,
    BudgetPeriod,
    BudgetSettings,
    Category,
    Currency,
    Expense,
    Profile,
)
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from ledger.models.results import (
    BudgetState,
    BudgetStatus,
    CategoryTotal,
    LoadReport,
    SlotLoadResult,
    SlotLoadStatus,
    SlotName,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger models
    "DEFAULT_CATEGORY_SEED",
    "FALLBACK_RATES",
    "OTHERS_CATEGORY_NAME",
    "BudgetPeriod",
    "BudgetSettings",
    "Category",
    "Currency",
    "Expense",
    "Profile",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Results
    "BudgetState",
    "BudgetStatus",
    "CategoryTotal",
    "LoadReport",
    "SlotLoadResult",
    "SlotLoadStatus",
    "SlotName",
    "ValidationIssue",
    "ValidationResult",
]
