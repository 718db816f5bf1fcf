"""
Result Models

Values handed back to callers: how each slot was loaded, budget summaries
and integrity reports.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ledger.models.ledger import BudgetPeriod, Category


# =============================================================================
# LOADING
# =============================================================================

class SlotName(str, Enum):
    """Named persisted blobs. One top-level collection or singleton each."""
    EXPENSES = "expenses"
    CATEGORIES = "categories"
    PROFILE = "profile"


class SlotLoadStatus(str, Enum):
    """
    How a slot was obtained at load time.

    MISSING and FALLBACK both leave the slot at its default value; only
    FALLBACK means something was there and could not be read.
    """
    LOADED = "loaded"
    MISSING = "missing"
    FALLBACK = "fallback"


class SlotLoadResult(BaseModel):
    slot: SlotName
    status: SlotLoadStatus
    error_message: Optional[str] = None


class LoadReport(BaseModel):
    """Per-slot outcome of ExpenseStore.load()."""

    loaded_at: datetime = Field(default_factory=datetime.utcnow)
    results: dict[SlotName, SlotLoadResult] = Field(default_factory=dict)

    def status(self, slot: SlotName) -> SlotLoadStatus:
        return self.results[slot].status

    @property
    def used_defaults(self) -> bool:
        return any(r.status != SlotLoadStatus.LOADED for r in self.results.values())

    @property
    def had_errors(self) -> bool:
        return any(r.status == SlotLoadStatus.FALLBACK for r in self.results.values())


# =============================================================================
# SUMMARIES
# =============================================================================

class BudgetState(str, Enum):
    NO_LIMIT = "no_limit"
    UNDER = "under"
    OVER = "over"
    MET = "met"


class BudgetStatus(BaseModel):
    """
    Budget versus actual for one period.

    difference is limit minus spent; positive means money left over.
    """

    period: BudgetPeriod
    reference: datetime
    spent: Decimal
    limit: Optional[Decimal] = None
    difference: Optional[Decimal] = None
    state: BudgetState
    message: str


class CategoryTotal(BaseModel):
    category: Category
    total: Decimal
    count: int = Field(ge=0)


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationIssue(BaseModel):
    """A single integrity issue found in the store."""

    field: str = Field(
        ...,
        description="Area of the data with the issue (e.g., 'expense.category')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'orphaned_category', 'duplicate_id')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    entity_id: Optional[str] = None
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Outcome of LedgerValidator.validate()."""

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All issues found"
    )

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def issues_of_type(self, issue_type: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.issue_type == issue_type]
