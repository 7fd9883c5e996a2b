import json
import os

import pytest
from streamlit.testing.v1 import AppTest

from conftest import BOM_CSV, INVENTORY_CSV, inventory_csv
from src.inventory_lib import JsonFileStore, parse_inventory_csv, aggregate_rows, save_snapshot
from src.inventory_lib.constants import STORAGE_KEY, STORE_PATH_ENV

APP_PATH = os.path.join(os.path.dirname(__file__), "..", "app.py")


# --- Fixtures ---
@pytest.fixture
def store_path(tmp_path, monkeypatch):
    path = str(tmp_path / "store.json")
    monkeypatch.setenv(STORE_PATH_ENV, path)
    return path


@pytest.fixture
def app(store_path):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.run()
    return at


def paste(app, action, text):
    """Drives the paste-text import path and processes it."""
    app.radio(key="input_method").set_value("Paste Text").run()
    app.radio(key="action").set_value(action).run()
    app.text_area(key="csv_text").set_value(text).run()
    app.button(key="process").click().run()


# --- Tests ---
def test_smoke_check(app):
    assert not app.exception
    assert app.title[0].value == "📦 LCSC Inventory Manager"
    assert app.metric[0].value == "0"


def test_paste_import(app, store_path):
    paste(app, "Import CSV", INVENTORY_CSV)

    assert not app.exception
    session = app.session_state["session"]
    assert list(session.inventory.keys()) == ["C25804", "C14663"]
    assert app.metric[0].value == "2"
    assert any("Aggregated to 2 unique parts" in s.value for s in app.success)

    df = app.dataframe[0].value
    assert "C14663" in df["LCSC Part"].values

    with open(store_path, encoding="utf-8") as f:
        assert len(json.loads(json.load(f)[STORAGE_KEY])) == 2


def test_stored_inventory_is_loaded_on_start(store_path):
    save_snapshot(
        JsonFileStore(store_path),
        aggregate_rows(parse_inventory_csv(inventory_csv(("C1", 100, 0.1)))),
        "c1.csv",
    )
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.run()

    assert not at.exception
    assert at.metric[0].value == "1"
    assert any("c1.csv" in h.value for h in at.subheader)


def test_bom_findings_and_apply_flow(app, store_path):
    paste(app, "Import CSV", INVENTORY_CSV)
    paste(app, "Load BOM", BOM_CSV)

    assert not app.exception
    errors = [e.value for e in app.error]
    assert "C99/UNKNOWN missing 10 components (not in inventory)" in errors
    assert "C14663/CL10B104KB8NNNC lacks 10 components" in errors

    # Apply asks first
    app.button(key="apply_bom").click().run()
    session = app.session_state["session"]
    assert not session.is_modified_from_storage
    assert app.session_state["pending_confirm"] == "apply_bom"

    app.button(key="confirm_yes").click().run()
    session = app.session_state["session"]
    assert session.is_modified_from_storage
    assert session.inventory["C14663"]["quantity"] == 0
    assert session.inventory["C25804"]["quantity"] == 170

    # The file on disk still holds the original
    with open(store_path, encoding="utf-8") as f:
        stored = json.loads(json.load(f)[STORAGE_KEY])
    assert {line["lcsc_id"]: line["quantity"] for line in stored} == {
        "C25804": 200,
        "C14663": 50,
    }

    app.button(key="reload_original").click().run()
    app.button(key="confirm_yes").click().run()
    assert app.session_state["session"].inventory["C25804"]["quantity"] == 200


def test_cancel_keeps_data(app):
    paste(app, "Import CSV", INVENTORY_CSV)

    app.button(key="clear_all").click().run()
    app.button(key="confirm_no").click().run()

    assert app.session_state["pending_confirm"] is None
    assert len(app.session_state["session"].inventory) == 2


def test_multiplier_scales_findings(app):
    paste(app, "Import CSV", inventory_csv(("C1", 100, 0.1)))
    paste(app, "Load BOM", "LCSC Part,Manfufacture ID,Qty\nC1,MPN-C1,30\n")
    assert not app.error

    app.number_input(key="multiplier_input").set_value(4).run()

    assert app.session_state["session"].multiplier == 4
    assert [e.value for e in app.error] == [
        "C1/MPN-C1 lacks 20 components (multiplier: ×4)"
    ]
