"""
Local Slot Storage

JsonFileSlotStorage keeps each slot as <data_dir>/<slot>.json. Writes go to
a temporary file in the same directory which then replaces the target, so a
crash mid-write leaves either the old or the new blob, never half of one.
The three slots are still written independently of each other.

InMemorySlotStorage is the dict-backed variant used by tests and by
throwaway sessions.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from ledger.models.results import SlotName
from ledger.services.storage.interface import (
    SlotReadError,
    SlotStorageInterface,
    SlotWriteError,
)


logger = structlog.get_logger(__name__)


class JsonFileSlotStorage(SlotStorageInterface):
    """Slots as JSON files in one directory."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def slot_path(self, slot: SlotName) -> Path:
        return self._data_dir / f"{slot.value}.json"

    def read_slot(self, slot: SlotName) -> Optional[bytes]:
        path = self.slot_path(slot)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            logger.debug("slot_file_missing", slot=slot.value, path=str(path))
            return None
        except OSError as e:
            raise SlotReadError(f"Failed to read slot {slot.value}: {e}") from e

    def write_slot(self, slot: SlotName, data: bytes) -> None:
        path = self.slot_path(slot)
        tmp_path = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="wb",
                delete=False,
                dir=self._data_dir,
                prefix=f".{slot.value}.",
                suffix=".tmp",
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise SlotWriteError(f"Failed to write slot {slot.value}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def delete_slot(self, slot: SlotName) -> None:
        try:
            self.slot_path(slot).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise SlotWriteError(f"Failed to delete slot {slot.value}: {e}") from e


class InMemorySlotStorage(SlotStorageInterface):
    """Slots kept in a dict for the lifetime of the object."""

    def __init__(self, initial: Optional[dict[SlotName, bytes]] = None):
        self._slots: dict[SlotName, bytes] = dict(initial or {})
        self.write_count = 0

    def read_slot(self, slot: SlotName) -> Optional[bytes]:
        return self._slots.get(slot)

    def write_slot(self, slot: SlotName, data: bytes) -> None:
        self._slots[slot] = bytes(data)
        self.write_count += 1

    def delete_slot(self, slot: SlotName) -> None:
        self._slots.pop(slot, None)
