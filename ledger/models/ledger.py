"""
Core Data Models for Pocket Ledger

These models define the schemas of everything the store keeps and persists.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to self-describing JSON for the storage slots

DESIGN DECISION: An expense embeds a snapshot of its category instead of a
foreign key. Renaming or deleting a category therefore needs an explicit
rewrite of every expense that carries the old snapshot
(see ledger.store.category_ops).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


OTHERS_CATEGORY_NAME = "Others"

DEFAULT_CATEGORY_SEED: tuple[tuple[str, str], ...] = (
    ("Food", "🍔"),
    ("Transport", "🚗"),
    ("Shopping", "🛍"),
    ("Entertainment", "🎮"),
    ("Bills", "📱"),
    (OTHERS_CATEGORY_NAME, "📦"),
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class BudgetPeriod(str, Enum):
    """
    Reporting period.

    Decides which budget limit is the active one for summaries.
    """
    DAILY = "Daily"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class Currency(str, Enum):
    """
    Supported currencies.

    Each carries a static fallback rate relative to USD that is used
    whenever the live rate table does not cover it.
    """
    USD = "USD"
    TWD = "TWD"
    EUR = "EUR"
    JPY = "JPY"
    GBP = "GBP"

    @property
    def symbol(self) -> str:
        return _CURRENCY_SYMBOLS[self]

    @property
    def full_name(self) -> str:
        return _CURRENCY_NAMES[self]

    @property
    def fallback_rate(self) -> Decimal:
        return FALLBACK_RATES[self]


_CURRENCY_SYMBOLS = {
    Currency.USD: "$",
    Currency.TWD: "NT$",
    Currency.EUR: "€",
    Currency.JPY: "¥",
    Currency.GBP: "£",
}

_CURRENCY_NAMES = {
    Currency.USD: "US Dollar",
    Currency.TWD: "New Taiwan Dollar",
    Currency.EUR: "Euro",
    Currency.JPY: "Japanese Yen",
    Currency.GBP: "British Pound",
}

# Units of each currency per 1 USD
FALLBACK_RATES: dict[Currency, Decimal] = {
    Currency.USD: Decimal("1"),
    Currency.TWD: Decimal("31"),
    Currency.EUR: Decimal("0.91"),
    Currency.JPY: Decimal("148"),
    Currency.GBP: Decimal("0.79"),
}


# =============================================================================
# CATEGORY & EXPENSE
# =============================================================================

class Category(BaseModel):
    """
    Expense category.

    The category named "Others" is the catch-all: it can be neither deleted
    nor renamed through the category helpers.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique category ID"
    )
    name: str = Field(
        ...,
        max_length=100,
        description="Display name"
    )
    emoji: str = Field(
        default="",
        max_length=16,
        description="Single display glyph"
    )

    @property
    def is_protected(self) -> bool:
        return self.name == OTHERS_CATEGORY_NAME

    @classmethod
    def default_categories(cls) -> list["Category"]:
        """Fresh copy of the seed set, each with a new id."""
        return [cls(name=name, emoji=emoji) for name, emoji in DEFAULT_CATEGORY_SEED]


class Expense(BaseModel):
    """
    A single recorded expense.

    The amount is in the profile's current currency. Records are replaced
    wholesale on update; use ``model_copy(update=...)`` to derive one.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    name: str = Field(
        ...,
        max_length=200,
        description="Free-text description"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in the profile currency"
    )
    date: datetime = Field(
        default_factory=datetime.now,
        description="When the expense happened"
    )
    category: Category = Field(
        ...,
        description="Snapshot of the category at creation/update time"
    )


# =============================================================================
# PROFILE & BUDGET
# =============================================================================

class BudgetSettings(BaseModel):
    """
    Optional spending limits per horizon.

    A limit of None means no limit is set for that horizon.
    """

    daily_limit: Optional[Decimal] = Field(default=None, ge=0)
    monthly_limit: Optional[Decimal] = Field(default=None, ge=0)
    yearly_limit: Optional[Decimal] = Field(default=None, ge=0)
    period: BudgetPeriod = Field(
        default=BudgetPeriod.MONTHLY,
        description="Period whose limit drives the summary display"
    )

    def limit_for(self, period: BudgetPeriod) -> Optional[Decimal]:
        if period == BudgetPeriod.DAILY:
            return self.daily_limit
        if period == BudgetPeriod.MONTHLY:
            return self.monthly_limit
        return self.yearly_limit

    @property
    def active_limit(self) -> Optional[Decimal]:
        return self.limit_for(self.period)

    @property
    def has_limits(self) -> bool:
        return any(
            limit is not None
            for limit in (self.daily_limit, self.monthly_limit, self.yearly_limit)
        )


class Profile(BaseModel):
    """
    The single user profile of an installation.

    Image blobs are stored base64-encoded in the profile slot.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    name: str = Field(
        default="User",
        max_length=100
    )
    image_data: Optional[bytes] = None
    background_image_data: Optional[bytes] = None
    currency: Currency = Currency.USD
    budget_settings: BudgetSettings = Field(default_factory=BudgetSettings)

    @field_validator('name')
    @classmethod
    def default_blank_name(cls, v: str) -> str:
        return v or "User"
