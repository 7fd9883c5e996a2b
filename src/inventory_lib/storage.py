"""
Local key-value persistence for the inventory snapshot.

The store is a flat string-to-string map. The snapshot occupies two keys:
the JSON encoded inventory lines and the name of the file they came from.
A missing key means "no data yet", not an error.
"""

import json
import logging
import os
from typing import Protocol

from src.inventory_lib.constants import (
    DEFAULT_FILENAME,
    DEFAULT_STORE_PATH,
    FILENAME_KEY,
    STORAGE_KEY,
    STORE_PATH_ENV,
)
from src.inventory_lib.types import Inventory, InventoryLine, create_empty_inventory

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The store could not be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, used by tests and the headless CLI."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """
    Store backed by a single JSON object on disk.

    The file is re-read on every access so that separate Streamlit sessions
    pointed at the same path see each other's writes.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(f"Corrupt store {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Corrupt store {self.path}: expected an object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def _read_for_write(self) -> dict[str, str]:
        """Current contents, with a corrupt file treated as empty so the write repairs it."""
        try:
            return self._read()
        except StorageError as e:
            if isinstance(e.__cause__, OSError):
                raise
            logger.error(f"Overwriting unreadable store: {e}")
            return {}

    def set(self, key: str, value: str) -> None:
        data = self._read_for_write()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read_for_write()
        if key in data:
            del data[key]
            self._write(data)


def default_store_path() -> str:
    """Resolves the store location from the environment at call time."""
    return os.path.expanduser(os.environ.get(STORE_PATH_ENV, DEFAULT_STORE_PATH))


def save_snapshot(
    store: KeyValueStore, inventory: Inventory, file_name: str | None = None
) -> None:
    """
    Persists the inventory, and the source file name when given.

    Raises:
        StorageError: If the store rejects the write.
    """
    store.set(STORAGE_KEY, json.dumps(inventory.lines()))
    if file_name:
        store.set(FILENAME_KEY, file_name)
    logger.info(f"Saved {len(inventory)} parts to store")


def _normalize_line(raw: dict) -> InventoryLine:
    """Fills fields that older snapshots may lack."""
    line: InventoryLine = {
        "lcsc_id": str(raw.get("lcsc_id", "")),
        "manufacture_id": str(raw.get("manufacture_id", "")),
        "manufacturer": str(raw.get("manufacturer", "")),
        "package": str(raw.get("package", "")),
        "quantity": int(raw.get("quantity", 0)),
        "description": str(raw.get("description", "")),
        "unit_price": float(raw.get("unit_price", 0.0)),
        "total_cost": 0.0,
        "price_history": [],
        "pending_qty": int(raw.get("pending_qty", 0)),
    }
    line["total_cost"] = float(
        raw.get("total_cost", line["quantity"] * line["unit_price"])
    )
    line["price_history"] = [
        {"quantity": int(h["quantity"]), "unit_price": float(h["unit_price"])}
        for h in raw.get("price_history", [])
    ]
    return line


def load_snapshot(store: KeyValueStore) -> tuple[Inventory, str]:
    """
    Reads the stored snapshot.

    Unreadable or corrupt data is logged and treated as an empty snapshot.

    Returns:
        A tuple of (Inventory, source file name).
    """
    try:
        raw = store.get(STORAGE_KEY)
        file_name = store.get(FILENAME_KEY) or DEFAULT_FILENAME
    except StorageError as e:
        logger.error(f"Failed to load from store: {e}")
        return create_empty_inventory(), DEFAULT_FILENAME

    if not raw:
        return create_empty_inventory(), file_name

    try:
        lines = [_normalize_line(item) for item in json.loads(raw)]
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.error(f"Failed to load from store: {e}")
        return create_empty_inventory(), DEFAULT_FILENAME

    logger.info(f"Loaded {len(lines)} parts from store")
    return Inventory.from_lines(lines), file_name


def clear_snapshot(store: KeyValueStore) -> None:
    """
    Removes both snapshot keys.

    Raises:
        StorageError: If the store rejects the delete.
    """
    store.delete(STORAGE_KEY)
    store.delete(FILENAME_KEY)
    logger.info("Cleared stored inventory")
