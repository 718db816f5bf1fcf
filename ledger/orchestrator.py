"""
Main Orchestrator for Pocket Ledger

This module ties together all the components:
1. Picks the slot and receipt backends from configuration
2. Builds the one ExpenseStore the app uses and attaches the audit logger
3. Builds the CurrencyService bound to that store
4. Defines the currency settings flow (refresh rates, then apply)
5. Defines the category flow (add, rename, delete to "Others")

DESIGN DECISION: Presentation code receives these objects and calls them
directly. Nothing here is a global; call create_app_components() once.
"""

from typing import Optional

import structlog

from ledger.audit import AuditLogger, configure_logging
from ledger.config import Settings, get_settings
from ledger.models.ledger import OTHERS_CATEGORY_NAME, Category, Currency
from ledger.services.currency import CurrencyService, CurrencyServiceError
from ledger.services.storage import (
    FileReceiptStorage,
    GoogleSheetsClient,
    GoogleSheetsSlotStorage,
    InMemoryReceiptStorage,
    InMemorySlotStorage,
    JsonFileSlotStorage,
    ReceiptStorageInterface,
    SlotStorageInterface,
)
from ledger.store import (
    ExpenseStore,
    ProtectedCategoryError,
    delete_category_moving_to_others,
    rename_category,
)


logger = structlog.get_logger(__name__)


class CurrencySettingsFlow:
    """
    Orchestrates the currency settings screen.

    Flow:
    1. Open → refresh rates (a failure is shown, stale/fallback rates stay usable)
    2. Pick a currency → show the rate each would use
    3. Apply → convert every stored amount and switch the profile currency
    """

    def __init__(self, store: ExpenseStore, currency_service: CurrencyService):
        self._store = store
        self._currency_service = currency_service

    async def refresh_rates(self) -> tuple[bool, str]:
        """
        Fetch the latest rates.

        Returns:
            (ok, message) - message is ready to show to the user
        """
        try:
            rates = await self._currency_service.fetch_latest_rates()
        except CurrencyServiceError as e:
            return False, f"Failed to fetch latest rates: {e.message}"
        return True, f"Rates updated ({len(rates)} currencies)"

    def rate_lines(self) -> list[tuple[Currency, str, bool]]:
        """(currency, rate description, is_current) for every supported currency."""
        current = self._store.profile.currency
        return [
            (currency, self._currency_service.describe_rate(currency), currency == current)
            for currency in Currency
        ]

    def apply(self, new_currency: Currency) -> bool:
        """Returns False when new_currency is already the active one."""
        return self._currency_service.apply_currency_change(new_currency)


class CategoryFlow:
    """
    Orchestrates the category screens.

    Flow:
    1. Add → a new, empty category (the reserved name is refused)
    2. Rename → the category and every expense snapshot of it
    3. Delete → its expenses move to "Others", then the category goes

    Every step returns (ok, message); helper errors become the message.
    """

    def __init__(self, store: ExpenseStore):
        self._store = store

    def add(self, name: str, emoji: str = "") -> tuple[bool, str]:
        name = name.strip()
        if not name:
            return False, "Category name cannot be empty"
        if name == OTHERS_CATEGORY_NAME:
            return False, f"'{OTHERS_CATEGORY_NAME}' already exists"
        try:
            category = Category(name=name, emoji=emoji)
        except ValueError as e:
            return False, f"Invalid category: {e}"
        self._store.add_category(category)
        label = f"{category.emoji} {category.name}".strip()
        return True, f"Added {label}"

    def rename(self, category: Category, new_name: str) -> tuple[bool, str]:
        try:
            updated = rename_category(self._store, category, new_name)
        except (ProtectedCategoryError, ValueError) as e:
            logger.info("category_rename_refused", category_id=str(category.id), reason=str(e))
            return False, str(e)
        return True, f"Renamed '{category.name}' to '{updated.name}'"

    def delete(self, category: Category) -> tuple[bool, str]:
        """All expenses in the category are moved to 'Others' first."""
        try:
            moved = delete_category_moving_to_others(self._store, category)
        except ProtectedCategoryError as e:
            return False, str(e)
        return True, f"Deleted '{category.name}'; {moved} expense(s) moved to '{OTHERS_CATEGORY_NAME}'"


def _build_slot_storage(settings: Settings) -> SlotStorageInterface:
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemorySlotStorage()
    if storage_settings.backend == "sheets":
        return GoogleSheetsSlotStorage(GoogleSheetsClient(settings.google_sheets))
    return JsonFileSlotStorage(storage_settings.data_dir)


def _build_receipt_storage(settings: Settings) -> ReceiptStorageInterface:
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemoryReceiptStorage()
    return FileReceiptStorage(storage_settings.receipts_dir)


def create_app_components(
    settings: Optional[Settings] = None,
    configure_logs: bool = True,
) -> tuple[ExpenseStore, CurrencyService, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to get_settings())
        configure_logs: Configure structlog from AppSettings

    Returns:
        (store, currency_service, audit_logger)
    """
    settings = settings or get_settings()

    if configure_logs:
        app_settings = settings.app
        configure_logging(
            log_level="DEBUG" if app_settings.debug_mode else app_settings.log_level,
            json_output=not app_settings.debug_mode,
        )

    try:
        slot_storage = _build_slot_storage(settings)
        receipt_storage = _build_receipt_storage(settings)
    except Exception as e:
        # Storage not configured - continue in memory
        logger.warning("storage_not_configured", error=str(e))
        slot_storage = InMemorySlotStorage()
        receipt_storage = InMemoryReceiptStorage()

    audit_logger = AuditLogger()
    store = ExpenseStore(
        slot_storage,
        receipt_storage=receipt_storage,
        subscribers=[audit_logger.log],
    )

    currency_service = CurrencyService(store=store, settings=settings.exchange_rate)

    return store, currency_service, audit_logger
