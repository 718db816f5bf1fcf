"""
Storage Services Package

Provides abstract interfaces and concrete implementations for slot and
receipt storage. Local JSON files are the default backend.
"""

from ledger.services.storage.interface import (
    ReceiptStorageInterface,
    SlotReadError,
    SlotStorageInterface,
    SlotWriteError,
    StorageConnectionError,
    StorageError,
)
from ledger.services.storage.file_storage import (
    InMemorySlotStorage,
    JsonFileSlotStorage,
)
from ledger.services.storage.receipts import (
    FileReceiptStorage,
    InMemoryReceiptStorage,
)
from ledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsSlotStorage,
)

__all__ = [
    # Interfaces
    "ReceiptStorageInterface",
    "SlotStorageInterface",
    # Exceptions
    "SlotReadError",
    "SlotWriteError",
    "StorageConnectionError",
    "StorageError",
    # Local implementations
    "InMemorySlotStorage",
    "JsonFileSlotStorage",
    "FileReceiptStorage",
    "InMemoryReceiptStorage",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsSlotStorage",
]
