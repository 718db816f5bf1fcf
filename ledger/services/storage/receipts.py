"""Receipt image stores: one blob per expense id."""

from pathlib import Path
from typing import Optional, Union
from uuid import UUID

import structlog

from ledger.services.storage.interface import (
    ReceiptStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class FileReceiptStorage(ReceiptStorageInterface):
    """Receipts as <receipts_dir>/<expense-uuid>.jpg."""

    def __init__(self, receipts_dir: Union[str, Path]):
        self._receipts_dir = Path(receipts_dir)

    def receipt_path(self, expense_id: UUID) -> Path:
        return self._receipts_dir / f"{expense_id}.jpg"

    def save_receipt(self, expense_id: UUID, data: bytes) -> None:
        try:
            self._receipts_dir.mkdir(parents=True, exist_ok=True)
            self.receipt_path(expense_id).write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to save receipt for {expense_id}: {e}") from e
        logger.debug("receipt_saved", expense_id=str(expense_id), size_bytes=len(data))

    def get_receipt(self, expense_id: UUID) -> Optional[bytes]:
        try:
            return self.receipt_path(expense_id).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read receipt for {expense_id}: {e}") from e

    def delete_receipt(self, expense_id: UUID) -> bool:
        try:
            self.receipt_path(expense_id).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete receipt for {expense_id}: {e}") from e


class InMemoryReceiptStorage(ReceiptStorageInterface):

    def __init__(self):
        self._receipts: dict[UUID, bytes] = {}

    def save_receipt(self, expense_id: UUID, data: bytes) -> None:
        self._receipts[expense_id] = bytes(data)

    def get_receipt(self, expense_id: UUID) -> Optional[bytes]:
        return self._receipts.get(expense_id)

    def delete_receipt(self, expense_id: UUID) -> bool:
        return self._receipts.pop(expense_id, None) is not None
