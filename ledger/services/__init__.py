"""
Services package.

Currency services live in ledger.services.currency and are imported from
there directly, since they depend on the store which depends on storage.
"""

from ledger.services.storage import (
    FileReceiptStorage,
    GoogleSheetsClient,
    GoogleSheetsSlotStorage,
    InMemoryReceiptStorage,
    InMemorySlotStorage,
    JsonFileSlotStorage,
    ReceiptStorageInterface,
    SlotReadError,
    SlotStorageInterface,
    SlotWriteError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "FileReceiptStorage",
    "GoogleSheetsClient",
    "GoogleSheetsSlotStorage",
    "InMemoryReceiptStorage",
    "InMemorySlotStorage",
    "JsonFileSlotStorage",
    "ReceiptStorageInterface",
    "SlotReadError",
    "SlotStorageInterface",
    "SlotWriteError",
    "StorageConnectionError",
    "StorageError",
]
