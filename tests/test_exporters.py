import datetime

import pytest
from hypothesis import given, strategies as st

from conftest import make_row
from src.inventory_lib import (
    aggregate_rows,
    export_filename,
    generate_inventory_csv,
    parse_csv_text,
    parse_inventory_csv,
)

HEADER = (
    "LCSC Part Number,Manufacture Part Number,Manufacturer,Package,"
    "Quantity,Description,Unit Price($)"
)


def test_export_format():
    rows = [make_row("C1", 100, 0.0125), make_row("C2", 0, 1.0), make_row("C3", 3, 2.5)]
    rows[0]["description"] = 'Res 10k, 1% "thick"'
    data = generate_inventory_csv(aggregate_rows(rows).lines())

    assert data.startswith(b"\xef\xbb\xbf")
    lines = data.decode("utf-8-sig").split("\n")

    assert lines[0] == HEADER
    assert lines[1] == 'C1,MPN-C1,ACME,0603,100,"Res 10k, 1% ""thick""",0.0125'
    # C2 is out of stock and skipped
    assert lines[2] == "C3,MPN-C3,ACME,0603,3,Part C3,2.5000"
    assert lines[3] == ""


def test_export_quotes_newlines():
    row = make_row("C1", 1, 1.0)
    row["description"] = "line one\nline two"
    text = generate_inventory_csv(aggregate_rows([row]).lines()).decode("utf-8-sig")

    assert parse_csv_text(text)[0]["Description"] == "line one\nline two"


def test_export_filename():
    now = datetime.datetime(2025, 2, 3, 14, 5)

    assert export_filename("order.csv", now) == "order_140503022025.csv"
    assert export_filename("ORDER.CSV", now) == "ORDER_140503022025.csv"
    assert export_filename("parts.v2.csv", now) == "parts.v2_140503022025.csv"
    assert export_filename("inventory", now) == "inventory_140503022025.csv"
    assert export_filename("", now) == "inventory_140503022025.csv"


texts = st.text(
    alphabet=st.characters(exclude_categories=("Cs", "Cc")) | st.sampled_from(',"\n'),
    max_size=20,
)


@given(
    st.lists(
        st.tuples(
            st.integers(min_value=0, max_value=10_000),
            st.integers(min_value=0, max_value=1_000_000),
            texts,
        ),
        max_size=15,
    )
)
def test_export_round_trip(entries):
    """
    PROPERTY: Exporting then re-importing reproduces every in-stock
    (part id, quantity, unit price) triple.
    """
    rows = []
    for i, (qty, price_ticks, description) in enumerate(entries):
        row = make_row(f"C{i}", qty, price_ticks / 10_000)
        row["description"] = description
        rows.append(row)

    inv = aggregate_rows(rows)
    text = generate_inventory_csv(inv.lines()).decode("utf-8-sig")
    reimported = aggregate_rows(parse_inventory_csv(text))

    expected = {k: v for k, v in inv.items() if v["quantity"] > 0}
    assert set(reimported.keys()) == set(expected.keys())
    for key, line in expected.items():
        assert reimported[key]["quantity"] == line["quantity"]
        assert reimported[key]["unit_price"] == pytest.approx(line["unit_price"], abs=1e-9)
