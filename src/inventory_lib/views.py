"""
Read-only queries over the inventory for display.

Sorting, searching, and totals take their configuration as explicit
arguments so they can be tested without any UI state.
"""

from typing import Any

from src.inventory_lib.constants import COLUMN_LABELS, SEARCH_FIELDS, SORT_FIELDS
from src.inventory_lib.types import Inventory, InventoryLine, PriceEntry


def next_sort(
    current_field: str | None, ascending: bool, field: str
) -> tuple[str, bool]:
    """
    Computes the sort state after the user selects a column.

    Selecting the active column flips the direction; selecting a new one
    sorts it ascending.

    Returns:
        A (field, ascending) tuple.
    """
    if field == current_field:
        return field, not ascending
    return field, True


def sort_lines(
    lines: list[InventoryLine], field: str | None, ascending: bool = True
) -> list[InventoryLine]:
    """
    Stable sort by a single field.

    Numeric fields compare by value, text fields case-insensitively.
    A field of None leaves the order untouched.

    Raises:
        ValueError: If the field is not sortable.
    """
    if field is None:
        return list(lines)
    if field not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {field!r}")

    if SORT_FIELDS[field]:

        def sort_key(line: InventoryLine) -> Any:
            return line[field]  # type: ignore[literal-required]

    else:

        def sort_key(line: InventoryLine) -> Any:
            return str(line[field]).lower()  # type: ignore[literal-required]

    # reverse=True keeps equal elements in their original order
    return sorted(lines, key=sort_key, reverse=not ascending)


def filter_lines(lines: list[InventoryLine], query: str) -> list[InventoryLine]:
    """
    Case-insensitive substring search over ids, manufacturer and description.

    An empty or whitespace-only query returns every line.
    """
    needle = query.strip().lower()
    if not needle:
        return list(lines)

    return [
        line
        for line in lines
        if any(needle in str(line[f]).lower() for f in SEARCH_FIELDS)  # type: ignore[literal-required]
    ]


def total_inventory_value(inventory: Inventory) -> float:
    """Sum of the cached total cost of every line."""
    return sum(line["total_cost"] for line in inventory.values())


def total_usage_cost(inventory: Inventory, multiplier: int = 1) -> float:
    """Cost of the pending usage, scaled by the multiplier."""
    return sum(
        line["pending_qty"] * multiplier * line["unit_price"]
        for line in inventory.values()
    )


def format_price_history(history: list[PriceEntry]) -> str:
    """Renders the price lineage as '100 @ $0.0100, 50 @ $0.0200'."""
    return ", ".join(f"{h['quantity']} @ ${h['unit_price']:.4f}" for h in history)


def lines_to_table(lines: list[InventoryLine]) -> list[dict[str, Any]]:
    """
    Flattens lines into display rows keyed by column label.

    Returns:
        A list of dicts suitable for `st.dataframe`.
    """
    table = []
    for line in lines:
        table.append(
            {
                COLUMN_LABELS["lcsc_id"]: line["lcsc_id"],
                COLUMN_LABELS["manufacturer"]: line["manufacturer"],
                COLUMN_LABELS["manufacture_id"]: line["manufacture_id"],
                COLUMN_LABELS["package"]: line["package"],
                COLUMN_LABELS["quantity"]: line["quantity"],
                COLUMN_LABELS["pending_qty"]: line["pending_qty"],
                COLUMN_LABELS["unit_price"]: round(line["unit_price"], 4),
                COLUMN_LABELS["total_cost"]: round(line["total_cost"], 2),
                COLUMN_LABELS["description"]: line["description"],
                COLUMN_LABELS["price_history"]: format_price_history(
                    line["price_history"]
                ),
            }
        )
    return table
