"""
Audit Models for Pocket Ledger

Every mutation of the store produces an audit event. The same event object
is what store subscribers receive, so the UI layer and the audit log see
exactly the same stream.

DESIGN DECISION: Events are immutable records. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"
    EXPENSES_REASSIGNED = "expenses_reassigned"

    # Profile
    PROFILE_UPDATED = "profile_updated"
    BUDGET_UPDATED = "budget_updated"
    CURRENCY_CHANGED = "currency_changed"

    # Store lifecycle
    STORE_LOADED = "store_loaded"
    STORE_RESET = "store_reset"
    SLOT_LOAD_FALLBACK = "slot_load_fallback"
    SLOT_SAVE_FAILED = "slot_save_failed"

    # Exchange rates
    RATES_REFRESHED = "rates_refreshed"
    RATES_REFRESH_FAILED = "rates_refresh_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'category', 'profile')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, name, amount)
        event = AuditEventBuilder.currency_changed("USD", "TWD", 12)
    """

    @staticmethod
    def expense_added(expense_id: UUID, name: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense added: {name}",
            details={"name": name, "amount": amount},
        )

    @staticmethod
    def expense_updated(expense_id: UUID, name: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense updated: {name}",
            details={"name": name, "amount": amount},
        )

    @staticmethod
    def expense_deleted(expense_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense deleted: {expense_id}",
        )

    @staticmethod
    def category_added(category_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            entity_type="category",
            entity_id=category_id,
            description=f"Category added: {name}",
            details={"name": name},
        )

    @staticmethod
    def category_updated(category_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_UPDATED,
            entity_type="category",
            entity_id=category_id,
            description=f"Category updated: {name}",
            details={"name": name},
        )

    @staticmethod
    def category_deleted(category_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_DELETED,
            entity_type="category",
            entity_id=category_id,
            description=f"Category deleted: {name}",
            details={"name": name},
        )

    @staticmethod
    def expenses_reassigned(
        source_id: UUID,
        target_id: UUID,
        count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_REASSIGNED,
            entity_type="category",
            entity_id=source_id,
            description=f"{count} expense(s) moved to category {target_id}",
            details={"target_category_id": str(target_id), "count": count},
        )

    @staticmethod
    def profile_updated(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="profile",
            description=f"Profile updated: {name}",
        )

    @staticmethod
    def budget_updated(period: str, limits: dict[str, Optional[str]]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="profile",
            description=f"Budget settings updated (period: {period})",
            details={"period": period, **limits},
        )

    @staticmethod
    def currency_changed(old: str, new: str, expense_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_CHANGED,
            entity_type="profile",
            description=f"Currency changed from {old} to {new}",
            details={
                "from_currency": old,
                "to_currency": new,
                "expenses_converted": expense_count,
            },
        )

    @staticmethod
    def store_loaded(statuses: dict[str, str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOADED,
            severity=AuditSeverity.DEBUG,
            description="Store loaded from storage",
            details=statuses,
        )

    @staticmethod
    def store_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_RESET,
            severity=AuditSeverity.WARNING,
            description="Store reset to defaults",
        )

    @staticmethod
    def slot_load_fallback(slot: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SLOT_LOAD_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="slot",
            description=f"Slot '{slot}' could not be loaded, defaults used",
            details={"slot": slot},
            error_message=error_message,
        )

    @staticmethod
    def slot_save_failed(slot: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SLOT_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="slot",
            description=f"Slot '{slot}' could not be saved",
            details={"slot": slot},
            error_message=error_message,
        )

    @staticmethod
    def rates_refreshed(base_currency: str, rate_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATES_REFRESHED,
            entity_type="rates",
            description=f"Fetched {rate_count} rates relative to {base_currency}",
            details={"base_currency": base_currency, "rate_count": rate_count},
        )

    @staticmethod
    def rates_refresh_failed(kind: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATES_REFRESH_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="rates",
            description=f"Exchange rate refresh failed ({kind})",
            details={"kind": kind},
            error_message=error_message,
        )
