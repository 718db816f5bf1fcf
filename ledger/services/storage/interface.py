"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Keep slots on local disk, in memory, or in Google Sheets
2. Use in-memory storage for testing
3. Keep the store decoupled from storage implementation

The slot interface is intentionally a flat key-value store of byte blobs.
Encoding and decoding the blobs is the store's job, not the backend's.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ledger.models.results import SlotName


class SlotStorageInterface(ABC):
    """
    Abstract interface for the three named data slots.

    Implementations raise StorageError subclasses; the store decides
    what to do with them.
    """

    @abstractmethod
    def read_slot(self, slot: SlotName) -> Optional[bytes]:
        """
        Read a slot's raw blob.

        Returns:
            The stored bytes, or None if the slot was never written

        Raises:
            SlotReadError: If the backend failed to read
        """
        pass

    @abstractmethod
    def write_slot(self, slot: SlotName, data: bytes) -> None:
        """
        Replace a slot's blob.

        Raises:
            SlotWriteError: If the backend failed to write
        """
        pass

    @abstractmethod
    def delete_slot(self, slot: SlotName) -> None:
        """Remove a slot. Removing an absent slot is not an error."""
        pass


class ReceiptStorageInterface(ABC):
    """
    Abstract interface for receipt images.

    One image per expense, keyed by expense id, independent of the slots.
    A missing receipt is a normal state, not an error.
    """

    @abstractmethod
    def save_receipt(self, expense_id: UUID, data: bytes) -> None:
        pass

    @abstractmethod
    def get_receipt(self, expense_id: UUID) -> Optional[bytes]:
        pass

    @abstractmethod
    def delete_receipt(self, expense_id: UUID) -> bool:
        """Returns True if a receipt was removed."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SlotReadError(StorageError):
    """Backend could not read a slot."""
    pass


class SlotWriteError(StorageError):
    """Backend could not write a slot."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
