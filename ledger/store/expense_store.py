"""
Expense Store

The canonical in-memory state of the ledger: expenses, categories and the
profile. Every mutating call writes a full snapshot of all three slots
before it returns and then notifies subscribers.

DESIGN DECISION: The store is a plain object built once at start-up and
passed to whoever needs it. There is no module-level singleton.

FAILURE POLICY:
- Load: each slot falls back to its default on its own; the reason is
  logged and recorded in the LoadReport, never raised.
- Save: a slot that fails to encode or write is logged and skipped; the
  calling flow is never aborted.
"""

import threading
from decimal import Decimal
from typing import Callable, Iterable, Optional
from uuid import UUID

import structlog
from pydantic import TypeAdapter

from ledger.models.audit import AuditEvent, AuditEventBuilder
from ledger.models.ledger import (
    OTHERS_CATEGORY_NAME,
    BudgetSettings,
    Category,
    Expense,
    Profile,
)
from ledger.models.results import (
    LoadReport,
    SlotLoadResult,
    SlotLoadStatus,
    SlotName,
)
from ledger.services.storage.interface import (
    ReceiptStorageInterface,
    SlotStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

_EXPENSES_ADAPTER = TypeAdapter(list[Expense])
_CATEGORIES_ADAPTER = TypeAdapter(list[Category])

StoreSubscriber = Callable[[AuditEvent], None]


class ExpenseStore:
    """
    In-memory ledger with write-through persistence.

    Accessors return copies; mutate only through the methods below.
    """

    def __init__(
        self,
        slot_storage: SlotStorageInterface,
        receipt_storage: Optional[ReceiptStorageInterface] = None,
        subscribers: Optional[Iterable[StoreSubscriber]] = None,
        load: bool = True,
    ):
        """
        Initialize the store.

        Args:
            slot_storage: Backend for the three data slots
            receipt_storage: Optional backend for receipt images
            subscribers: Callbacks to register before loading, so they
                         also see load-time fallback events
            load: Read the slots now (False starts from defaults)
        """
        self._storage = slot_storage
        self._receipts = receipt_storage
        self._lock = threading.RLock()
        self._subscribers: list[StoreSubscriber] = list(subscribers or [])

        self._expenses: list[Expense] = []
        self._categories: list[Category] = Category.default_categories()
        self._profile = Profile()
        self.last_load_report: Optional[LoadReport] = None

        if load:
            self.load()

    # =========================================================================
    # STATE ACCESS
    # =========================================================================

    @property
    def expenses(self) -> list[Expense]:
        with self._lock:
            return list(self._expenses)

    @property
    def categories(self) -> list[Category]:
        with self._lock:
            return list(self._categories)

    @property
    def profile(self) -> Profile:
        with self._lock:
            return self._profile.model_copy(deep=True)

    @property
    def lock(self) -> threading.RLock:
        """Held by every mutation; take it to read a consistent snapshot."""
        return self._lock

    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        with self._lock:
            return next((e for e in self._expenses if e.id == expense_id), None)

    def get_category(self, category_id: UUID) -> Optional[Category]:
        with self._lock:
            return next((c for c in self._categories if c.id == category_id), None)

    def others_category(self) -> Optional[Category]:
        """The catch-all category, looked up by name."""
        with self._lock:
            return next(
                (c for c in self._categories if c.name == OTHERS_CATEGORY_NAME),
                None,
            )

    def expenses_for_category(self, category: Category) -> list[Expense]:
        with self._lock:
            return [e for e in self._expenses if e.category.id == category.id]

    # =========================================================================
    # SUBSCRIPTIONS
    # =========================================================================

    def subscribe(self, callback: StoreSubscriber) -> Callable[[], None]:
        """
        Register a callback for every store event.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: AuditEvent) -> None:
        """Send an event to subscribers on behalf of a collaborator."""
        self._emit(event)

    def _emit(self, event: AuditEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    "store_subscriber_failed",
                    event_type=event.event_type.value,
                    error=str(e),
                )

    # =========================================================================
    # EXPENSES
    # =========================================================================

    def add_expense(self, expense: Expense) -> None:
        """Append an expense. The caller supplies a fresh id."""
        with self._lock:
            self._expenses.append(expense)
            self.synchronize()
            self._emit(AuditEventBuilder.expense_added(
                expense.id, expense.name, str(expense.amount)
            ))

    def delete_expense(self, expense_id: UUID) -> bool:
        """
        Remove the first expense with this id, and its receipt if any.

        Returns False (and writes nothing) if no expense matched.
        """
        with self._lock:
            index = self._index_of_expense(expense_id)
            if index is None:
                return False
            del self._expenses[index]
            self.synchronize()
            self._delete_receipt_quietly(expense_id)
            self._emit(AuditEventBuilder.expense_deleted(expense_id))
            return True

    def update_expense(self, expense: Expense) -> bool:
        """
        Replace the first expense whose id matches.

        Returns False (and writes nothing) if no expense matched.
        """
        with self._lock:
            index = self._index_of_expense(expense.id)
            if index is None:
                return False
            self._expenses[index] = expense
            self.synchronize()
            self._emit(AuditEventBuilder.expense_updated(
                expense.id, expense.name, str(expense.amount)
            ))
            return True

    def update_expenses(self, expenses: Iterable[Expense]) -> int:
        """
        Replace several expenses by id with a single persistence pass.

        Unknown ids are skipped. Returns the number of expenses replaced.
        """
        with self._lock:
            replaced = 0
            for expense in expenses:
                index = self._index_of_expense(expense.id)
                if index is not None:
                    self._expenses[index] = expense
                    replaced += 1
            if replaced:
                self.synchronize()
            return replaced

    def _index_of_expense(self, expense_id: UUID) -> Optional[int]:
        for index, existing in enumerate(self._expenses):
            if existing.id == expense_id:
                return index
        return None

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def add_category(self, category: Category) -> None:
        with self._lock:
            self._categories.append(category)
            self.synchronize()
            self._emit(AuditEventBuilder.category_added(category.id, category.name))

    def delete_category(self, category: Category) -> bool:
        """
        Remove the category with this id.

        Expenses that embed it are NOT touched; reassign them first
        (see ledger.store.category_ops).
        """
        with self._lock:
            index = self._index_of_category(category.id)
            if index is None:
                return False
            removed = self._categories.pop(index)
            self.synchronize()
            self._emit(AuditEventBuilder.category_deleted(removed.id, removed.name))
            return True

    def update_category(self, category: Category) -> bool:
        """Replace the category with this id. Embedded snapshots are NOT touched."""
        with self._lock:
            index = self._index_of_category(category.id)
            if index is None:
                return False
            self._categories[index] = category
            self.synchronize()
            self._emit(AuditEventBuilder.category_updated(category.id, category.name))
            return True

    def _index_of_category(self, category_id: UUID) -> Optional[int]:
        for index, existing in enumerate(self._categories):
            if existing.id == category_id:
                return index
        return None

    # =========================================================================
    # PROFILE
    # =========================================================================

    def update_profile(self, profile: Profile) -> None:
        with self._lock:
            self._profile = profile.model_copy(deep=True)
            self.synchronize()
            self._emit(AuditEventBuilder.profile_updated(profile.name))

    def update_budget_settings(self, settings: BudgetSettings) -> None:
        with self._lock:
            self._profile.budget_settings = settings.model_copy()
            self.synchronize()
            self._emit(AuditEventBuilder.budget_updated(
                settings.period.value,
                {
                    "daily_limit": _opt_str(settings.daily_limit),
                    "monthly_limit": _opt_str(settings.monthly_limit),
                    "yearly_limit": _opt_str(settings.yearly_limit),
                },
            ))

    def commit_bulk_update(
        self,
        expenses: list[Expense],
        profile: Profile,
        event: Optional[AuditEvent] = None,
    ) -> None:
        """
        Swap in a complete new expense list and profile, then persist once.

        Used by rewrites that must land together, such as a currency change.
        """
        with self._lock:
            self._expenses = list(expenses)
            self._profile = profile.model_copy(deep=True)
            self.synchronize()
            if event is not None:
                self._emit(event)

    # =========================================================================
    # AGGREGATES
    # =========================================================================

    def total_for_category(self, category: Category) -> Decimal:
        """Sum of amounts of expenses whose category id equals category.id."""
        with self._lock:
            return sum(
                (e.amount for e in self._expenses if e.category.id == category.id),
                Decimal("0"),
            )

    def total_expenses(self) -> Decimal:
        with self._lock:
            return sum((e.amount for e in self._expenses), Decimal("0"))

    # =========================================================================
    # RECEIPTS
    # =========================================================================

    def save_receipt_image(self, expense_id: UUID, data: bytes) -> bool:
        """Store a receipt image. Returns False if no receipt store or the write failed."""
        if self._receipts is None:
            return False
        try:
            self._receipts.save_receipt(expense_id, data)
            return True
        except StorageError as e:
            logger.error("receipt_save_failed", expense_id=str(expense_id), error=str(e))
            return False

    def get_receipt_image(self, expense_id: UUID) -> Optional[bytes]:
        if self._receipts is None:
            return None
        try:
            return self._receipts.get_receipt(expense_id)
        except StorageError as e:
            logger.error("receipt_read_failed", expense_id=str(expense_id), error=str(e))
            return None

    def _delete_receipt_quietly(self, expense_id: UUID) -> None:
        if self._receipts is None:
            return
        try:
            self._receipts.delete_receipt(expense_id)
        except StorageError as e:
            logger.warning("receipt_delete_failed", expense_id=str(expense_id), error=str(e))

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def reset_to_default(self) -> None:
        """Empty expenses, default categories, fresh default profile."""
        with self._lock:
            self._expenses = []
            self._categories = Category.default_categories()
            self._profile = Profile()
            self.synchronize()
            self._emit(AuditEventBuilder.store_reset())

    def synchronize(self) -> None:
        """
        Write all three slots unconditionally.

        Each slot is encoded and written on its own; a failure is logged
        and does not stop the other slots from being written.
        """
        with self._lock:
            blobs = (
                (SlotName.EXPENSES, lambda: _EXPENSES_ADAPTER.dump_json(self._expenses)),
                (SlotName.CATEGORIES, lambda: _CATEGORIES_ADAPTER.dump_json(self._categories)),
                (SlotName.PROFILE, lambda: self._profile.model_dump_json().encode("utf-8")),
            )
            for slot, encode in blobs:
                try:
                    self._storage.write_slot(slot, encode())
                except Exception as e:
                    logger.error("slot_save_failed", slot=slot.value, error=str(e))
                    self._emit(AuditEventBuilder.slot_save_failed(slot.value, str(e)))

    def load(self) -> LoadReport:
        """
        Read all three slots, each falling back to its default on its own.

        Fallbacks: expenses -> empty list, categories -> default seed,
        profile -> default profile.
        """
        with self._lock:
            report = LoadReport()

            expenses = self._load_slot(
                SlotName.EXPENSES, _EXPENSES_ADAPTER.validate_json, report
            )
            self._expenses = expenses if expenses is not None else []

            categories = self._load_slot(
                SlotName.CATEGORIES, _CATEGORIES_ADAPTER.validate_json, report
            )
            self._categories = (
                categories if categories is not None else Category.default_categories()
            )

            profile = self._load_slot(
                SlotName.PROFILE, Profile.model_validate_json, report
            )
            self._profile = profile if profile is not None else Profile()

            self.last_load_report = report
            self._emit(AuditEventBuilder.store_loaded(
                {slot.value: result.status.value for slot, result in report.results.items()}
            ))
            return report

    def _load_slot(self, slot: SlotName, decode, report: LoadReport):
        try:
            raw = self._storage.read_slot(slot)
            if raw is None:
                report.results[slot] = SlotLoadResult(slot=slot, status=SlotLoadStatus.MISSING)
                return None
            value = decode(raw)
        except Exception as e:
            logger.warning("slot_load_failed", slot=slot.value, error=str(e))
            report.results[slot] = SlotLoadResult(
                slot=slot,
                status=SlotLoadStatus.FALLBACK,
                error_message=str(e),
            )
            self._emit(AuditEventBuilder.slot_load_fallback(slot.value, str(e)))
            return None

        report.results[slot] = SlotLoadResult(slot=slot, status=SlotLoadStatus.LOADED)
        return value


def _opt_str(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None
