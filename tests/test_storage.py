import json
import os

import pytest

from conftest import make_row
from src.inventory_lib import (
    JsonFileStore,
    MemoryStore,
    StorageError,
    aggregate_rows,
    clear_snapshot,
    default_store_path,
    load_snapshot,
    save_snapshot,
)
from src.inventory_lib.constants import (
    DEFAULT_FILENAME,
    FILENAME_KEY,
    STORAGE_KEY,
    STORE_PATH_ENV,
)


@pytest.fixture
def inventory():
    return aggregate_rows([make_row("C1", 100, 0.01), make_row("C1", 50, 0.02)])


def test_empty_store_means_no_data():
    inv, name = load_snapshot(MemoryStore())
    assert len(inv) == 0
    assert name == DEFAULT_FILENAME


def test_snapshot_round_trip(inventory):
    store = MemoryStore()
    save_snapshot(store, inventory, "order.csv")

    loaded, name = load_snapshot(store)

    assert name == "order.csv"
    assert loaded == inventory
    assert loaded["C1"]["price_history"][1] == {"quantity": 50, "unit_price": 0.02}


def test_save_without_name_keeps_previous_name(inventory):
    store = MemoryStore({FILENAME_KEY: "old.csv"})
    save_snapshot(store, inventory)
    assert store.get(FILENAME_KEY) == "old.csv"


def test_corrupt_snapshot_loads_empty(caplog):
    store = MemoryStore({STORAGE_KEY: "{not json", FILENAME_KEY: "x.csv"})
    inv, name = load_snapshot(store)

    assert len(inv) == 0
    assert name == DEFAULT_FILENAME
    assert "Failed to load" in caplog.text


def test_older_snapshot_fields_are_filled():
    store = MemoryStore(
        {STORAGE_KEY: json.dumps([{"lcsc_id": "C1", "quantity": 4, "unit_price": 0.5}])}
    )
    inv, _ = load_snapshot(store)

    assert inv["C1"]["total_cost"] == pytest.approx(2.0)
    assert inv["C1"]["pending_qty"] == 0
    assert inv["C1"]["price_history"] == []


def test_clear_snapshot(inventory):
    store = MemoryStore()
    save_snapshot(store, inventory, "order.csv")
    clear_snapshot(store)

    assert store.get(STORAGE_KEY) is None
    assert store.get(FILENAME_KEY) is None


def test_json_file_store(tmp_path, inventory):
    path = str(tmp_path / "nested" / "store.json")
    store = JsonFileStore(path)

    assert store.get(STORAGE_KEY) is None
    save_snapshot(store, inventory, "order.csv")
    assert os.path.exists(path)

    # A second handle on the same file sees the write
    loaded, name = load_snapshot(JsonFileStore(path))
    assert name == "order.csv"
    assert loaded["C1"]["quantity"] == 150

    store.delete(FILENAME_KEY)
    store.delete("never-set")
    assert JsonFileStore(path).get(FILENAME_KEY) is None


def test_json_file_store_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2", encoding="utf-8")

    with pytest.raises(StorageError):
        JsonFileStore(str(path)).get(STORAGE_KEY)

    # Startup still works
    inv, _ = load_snapshot(JsonFileStore(str(path)))
    assert len(inv) == 0


def test_json_file_store_write_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStore(str(blocker / "store.json"))

    with pytest.raises(StorageError):
        store.set(STORAGE_KEY, "[]")


def test_default_store_path(monkeypatch, tmp_path):
    monkeypatch.setenv(STORE_PATH_ENV, str(tmp_path / "s.json"))
    assert default_store_path() == str(tmp_path / "s.json")

    monkeypatch.delenv(STORE_PATH_ENV)
    assert default_store_path().endswith(os.path.join(".lcsc_inventory", "store.json"))
