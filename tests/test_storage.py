"""Tests for slot and receipt storage backends."""

from uuid import uuid4

import pytest

from ledger.models.results import SlotName
from ledger.services.storage import (
    FileReceiptStorage,
    GoogleSheetsSlotStorage,
    InMemoryReceiptStorage,
    InMemorySlotStorage,
    JsonFileSlotStorage,
    SlotReadError,
    SlotWriteError,
)
from ledger.services.storage.google_sheets import MAX_CELL_CHARS, SLOT_COLUMNS
from ledger.store import ExpenseStore


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the slot backend."""

    def __init__(self):
        self.rows = [list(SLOT_COLUMNS)]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append(list(row))

    def update_cell(self, row, col, value):
        self.rows[row - 1][col - 1] = value

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:

    def __init__(self, sheet=None, error=None):
        self.sheet = sheet or FakeWorksheet()
        self.error = error

    def get_slots_sheet(self):
        if self.error:
            raise self.error
        return self.sheet


class TestJsonFileSlotStorage:
    """Tests for JsonFileSlotStorage."""

    def test_missing_slot_is_none(self, tmp_path):
        storage = JsonFileSlotStorage(tmp_path / "ledger")
        assert storage.read_slot(SlotName.EXPENSES) is None

    def test_write_then_read(self, tmp_path):
        storage = JsonFileSlotStorage(tmp_path / "ledger")
        storage.write_slot(SlotName.PROFILE, b'{"name": "Ada"}')

        assert storage.read_slot(SlotName.PROFILE) == b'{"name": "Ada"}'
        assert storage.slot_path(SlotName.PROFILE) == tmp_path / "ledger" / "profile.json"

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        storage = JsonFileSlotStorage(tmp_path)
        storage.write_slot(SlotName.EXPENSES, b"[]")
        storage.write_slot(SlotName.EXPENSES, b'[{"x": 1}]')

        assert storage.read_slot(SlotName.EXPENSES) == b'[{"x": 1}]'
        assert sorted(p.name for p in tmp_path.iterdir()) == ["expenses.json"]

    def test_delete_slot(self, tmp_path):
        storage = JsonFileSlotStorage(tmp_path)
        storage.write_slot(SlotName.CATEGORIES, b"[]")
        storage.delete_slot(SlotName.CATEGORIES)
        storage.delete_slot(SlotName.CATEGORIES)
        assert storage.read_slot(SlotName.CATEGORIES) is None

    def test_unreadable_slot_raises(self, tmp_path):
        storage = JsonFileSlotStorage(tmp_path)
        storage.slot_path(SlotName.PROFILE).mkdir()
        with pytest.raises(SlotReadError):
            storage.read_slot(SlotName.PROFILE)

    def test_unwritable_dir_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        storage = JsonFileSlotStorage(blocker / "ledger")
        with pytest.raises(SlotWriteError):
            storage.write_slot(SlotName.PROFILE, b"{}")

    def test_store_round_trip_on_disk(self, tmp_path):
        """Test a store reopened on the same directory sees its data."""
        store = ExpenseStore(JsonFileSlotStorage(tmp_path))
        store.update_profile(store.profile.model_copy(update={"name": "Ada"}))

        reopened = ExpenseStore(JsonFileSlotStorage(tmp_path))

        assert reopened.profile.name == "Ada"
        assert reopened.categories == store.categories


class TestInMemorySlotStorage:

    def test_initial_contents_and_write_count(self):
        storage = InMemorySlotStorage({SlotName.PROFILE: b"{}"})
        assert storage.read_slot(SlotName.PROFILE) == b"{}"
        storage.write_slot(SlotName.PROFILE, b'{"name": "Ada"}')
        storage.delete_slot(SlotName.PROFILE)
        assert storage.read_slot(SlotName.PROFILE) is None
        assert storage.write_count == 1


class TestReceiptStorage:
    """Tests for receipt image stores."""

    def test_file_receipts(self, tmp_path):
        storage = FileReceiptStorage(tmp_path / "receipts")
        expense_id = uuid4()

        assert storage.get_receipt(expense_id) is None
        storage.save_receipt(expense_id, b"\xff\xd8jpeg")

        assert storage.receipt_path(expense_id).name == f"{expense_id}.jpg"
        assert storage.get_receipt(expense_id) == b"\xff\xd8jpeg"
        assert storage.delete_receipt(expense_id) is True
        assert storage.delete_receipt(expense_id) is False

    def test_in_memory_receipts(self):
        storage = InMemoryReceiptStorage()
        expense_id = uuid4()
        storage.save_receipt(expense_id, b"img")
        assert storage.get_receipt(expense_id) == b"img"
        assert storage.delete_receipt(expense_id) is True
        assert storage.get_receipt(expense_id) is None


class TestGoogleSheetsSlotStorage:
    """Tests for the Sheets backend against a fake worksheet."""

    def test_missing_slot_is_none(self):
        storage = GoogleSheetsSlotStorage(client=FakeSheetsClient())
        assert storage.read_slot(SlotName.EXPENSES) is None

    def test_write_appends_then_updates(self):
        client = FakeSheetsClient()
        storage = GoogleSheetsSlotStorage(client=client)

        storage.write_slot(SlotName.PROFILE, b'{"name": "Ada"}')
        storage.write_slot(SlotName.PROFILE, b'{"name": "Grace"}')

        assert len(client.sheet.rows) == 2
        assert client.sheet.rows[1][0] == "profile"
        assert storage.read_slot(SlotName.PROFILE) == b'{"name": "Grace"}'

    def test_slots_are_separate_rows(self):
        client = FakeSheetsClient()
        storage = GoogleSheetsSlotStorage(client=client)
        storage.write_slot(SlotName.EXPENSES, b"[]")
        storage.write_slot(SlotName.CATEGORIES, b'[{"name": "Food"}]')

        assert storage.read_slot(SlotName.EXPENSES) == b"[]"
        assert storage.read_slot(SlotName.CATEGORIES) == b'[{"name": "Food"}]'

    def test_delete_slot(self):
        client = FakeSheetsClient()
        storage = GoogleSheetsSlotStorage(client=client)
        storage.write_slot(SlotName.EXPENSES, b"[]")
        storage.delete_slot(SlotName.EXPENSES)
        assert storage.read_slot(SlotName.EXPENSES) is None
        assert client.sheet.rows == [SLOT_COLUMNS]

    def test_oversized_payload_rejected(self):
        storage = GoogleSheetsSlotStorage(client=FakeSheetsClient())
        with pytest.raises(SlotWriteError):
            storage.write_slot(SlotName.EXPENSES, b"x" * (MAX_CELL_CHARS + 1))

    def test_connection_failure_is_read_error(self):
        storage = GoogleSheetsSlotStorage(client=FakeSheetsClient(error=RuntimeError("offline")))
        with pytest.raises(SlotReadError):
            storage.read_slot(SlotName.PROFILE)

    def test_store_on_sheets(self):
        """Test the store works end to end on the Sheets backend."""
        client = FakeSheetsClient()
        store = ExpenseStore(GoogleSheetsSlotStorage(client=client))
        store.update_profile(store.profile.model_copy(update={"name": "Ada"}))

        reopened = ExpenseStore(GoogleSheetsSlotStorage(client=client))

        assert reopened.profile.name == "Ada"
        assert len(client.sheet.rows) == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
