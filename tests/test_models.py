"""
Tests for Pocket Ledger models

Test strategy:
1. Unit tests for individual components (models, store, queries)
2. Integration tests for flows (with in-memory storage and stubbed HTTP)
3. No real API calls in tests
"""

import json
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from ledger.models.ledger import (
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
from ledger.models.results import ValidationIssue, ValidationResult


class TestCategoryModel:
    """Tests for Category."""

    def test_default_categories(self):
        """Test the seed set names, emojis and order."""
        defaults = Category.default_categories()
        assert [(c.name, c.emoji) for c in defaults] == [
            ("Food", "🍔"),
            ("Transport", "🚗"),
            ("Shopping", "🛍"),
            ("Entertainment", "🎮"),
            ("Bills", "📱"),
            ("Others", "📦"),
        ]

    def test_default_categories_get_fresh_ids(self):
        """Test each seeding produces new ids."""
        first = {c.id for c in Category.default_categories()}
        second = {c.id for c in Category.default_categories()}
        assert len(first) == 6
        assert first.isdisjoint(second)

    def test_only_others_is_protected(self):
        """Test the catch-all category is the protected one."""
        protected = [c.name for c in Category.default_categories() if c.is_protected]
        assert protected == [OTHERS_CATEGORY_NAME]

    def test_category_is_immutable(self):
        """Test categories are frozen value objects."""
        category = Category(name="Food", emoji="🍔")
        with pytest.raises(ValidationError):
            category.name = "Drinks"

    def test_category_strips_whitespace(self):
        category = Category(name="  Pets  ", emoji="🐶")
        assert category.name == "Pets"


class TestExpenseModel:
    """Tests for Expense."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        food = Category(name="Food", emoji="🍔")
        expense = Expense(
            name="Lunch",
            amount=Decimal("12.50"),
            date=datetime(2024, 5, 1, 12, 0),
            category=food,
        )
        assert expense.amount == Decimal("12.50")
        assert expense.category.id == food.id
        assert expense.id is not None

    def test_expense_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Expense(
                name="Refund",
                amount=Decimal("-1"),
                category=Category(name="Food"),
            )

    def test_expense_json_round_trip(self):
        """Test an expense survives JSON encoding with its category snapshot."""
        expense = Expense(
            name="Taxi",
            amount=Decimal("7.25"),
            date=datetime(2024, 1, 2, 3, 4, 5),
            category=Category(name="Transport", emoji="🚗"),
        )
        restored = Expense.model_validate_json(expense.model_dump_json())
        assert restored == expense

    def test_model_copy_keeps_id(self):
        """Test deriving an updated record keeps the identity."""
        expense = Expense(name="Taxi", amount=Decimal("7"), category=Category(name="Transport"))
        updated = expense.model_copy(update={"amount": Decimal("9")})
        assert updated.id == expense.id
        assert updated.amount == Decimal("9")
        assert expense.amount == Decimal("7")


class TestBudgetSettings:
    """Tests for BudgetSettings."""

    def test_defaults(self):
        settings = BudgetSettings()
        assert settings.period == BudgetPeriod.MONTHLY
        assert settings.active_limit is None
        assert settings.has_limits is False

    def test_active_limit_follows_period(self):
        """Test the selected period picks the limit."""
        settings = BudgetSettings(
            daily_limit=Decimal("20"),
            monthly_limit=Decimal("500"),
            period=BudgetPeriod.DAILY,
        )
        assert settings.active_limit == Decimal("20")
        assert settings.limit_for(BudgetPeriod.MONTHLY) == Decimal("500")
        assert settings.limit_for(BudgetPeriod.YEARLY) is None
        assert settings.has_limits is True

    def test_period_serialized_values(self):
        """Test the period enum keeps its display values."""
        assert [p.value for p in BudgetPeriod] == ["Daily", "Monthly", "Yearly"]


class TestProfile:
    """Tests for Profile."""

    def test_default_profile(self):
        profile = Profile()
        assert profile.name == "User"
        assert profile.image_data is None
        assert profile.background_image_data is None
        assert profile.currency == Currency.USD
        assert profile.budget_settings == BudgetSettings()

    def test_blank_name_becomes_user(self):
        assert Profile(name="   ").name == "User"

    def test_image_bytes_round_trip(self):
        """Test binary image blobs survive the JSON slot encoding."""
        profile = Profile(
            name="Ada",
            image_data=b"\x89PNG\r\n\x1a\n\x00\xff",
            currency=Currency.EUR,
            budget_settings=BudgetSettings(yearly_limit=Decimal("1200.50")),
        )
        encoded = profile.model_dump_json()
        assert isinstance(json.loads(encoded)["image_data"], str)

        restored = Profile.model_validate_json(encoded)
        assert restored.image_data == profile.image_data
        assert restored.currency == Currency.EUR
        assert restored.budget_settings.yearly_limit == Decimal("1200.50")
        assert restored.budget_settings.daily_limit is None


class TestCurrency:
    """Tests for the Currency enum."""

    def test_fallback_rates(self):
        assert Currency.USD.fallback_rate == Decimal("1")
        assert Currency.TWD.fallback_rate == Decimal("31")
        assert Currency.JPY.fallback_rate == Decimal("148")

    def test_symbols_and_names(self):
        assert Currency.TWD.symbol == "NT$"
        assert Currency.GBP.full_name == "British Pound"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        expense_id = uuid4()
        event = AuditEventBuilder.expense_added(expense_id, "Lunch", "12.50")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == str(expense_id)
        assert log_dict["details"]["amount"] == "12.50"

    def test_slot_failures_are_flagged(self):
        """Test slot failure events carry severity and error."""
        event = AuditEventBuilder.slot_save_failed("profile", "disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"
        assert event.details["slot"] == "profile"

    def test_currency_changed_details(self):
        event = AuditEventBuilder.currency_changed("USD", "TWD", 3)
        assert event.details == {
            "from_currency": "USD",
            "to_currency": "TWD",
            "expenses_converted": 3,
        }


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="categories",
                    issue_type="missing_others",
                    message="No Others",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="expense.category",
                    issue_type="orphaned_category",
                    message="Orphan",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.is_valid is True
        assert len(result.issues_of_type("orphaned_category")) == 1

    def test_validation_issue_rejects_unknown_severity(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
