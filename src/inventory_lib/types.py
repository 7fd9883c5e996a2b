"""
Type definitions and shared data structures for the inventory library.

This module contains the TypedDicts and the keyed Inventory container used
throughout the import, reconciliation, and export pipeline.
"""

import copy
from collections import UserDict
from typing import Literal, TypedDict


class PriceEntry(TypedDict):
    """
    One import batch that contributed to an aggregated line.

    Attributes:
        quantity: Units contributed by the batch.
        unit_price: Price per unit paid for the batch.
    """

    quantity: int
    unit_price: float


class InventoryRow(TypedDict):
    """A single supplier CSV row after mapping, before aggregation."""

    lcsc_id: str
    manufacture_id: str
    manufacturer: str
    package: str
    quantity: int
    description: str
    unit_price: float


class InventoryLine(InventoryRow):
    """
    Aggregated stock for one part id.

    Attributes:
        total_cost: Cached quantity * unit_price.
        price_history: Import batches, oldest first.
        pending_qty: Usage from a loaded BOM that has not been applied yet
                     (before multiplier scaling).
    """

    total_cost: float
    price_history: list[PriceEntry]
    pending_qty: int


class BomRequest(TypedDict):
    """One line of a BOM usage file."""

    lcsc_id: str
    manufacture_id: str
    quantity: int


class UnmatchedPart(TypedDict):
    """A BOM request whose part id is not in the inventory."""

    lcsc_id: str
    manufacture_id: str
    quantity: int


class Finding(TypedDict):
    """
    Advisory reconciliation result. Never blocks further action.

    Attributes:
        kind: 'missing' for parts absent from inventory, 'shortage' when
              scaled usage exceeds stock.
        amount: Scaled missing quantity, or the deficit for shortages.
        reason: Human readable message.
    """

    kind: Literal["missing", "shortage"]
    lcsc_id: str
    manufacture_id: str
    amount: int
    reason: str


class ImportStats(TypedDict):
    """Tracking metrics for a single CSV import."""

    rows_read: int
    unique_parts: int


class Inventory(UserDict):
    """
    Part id keyed collection of InventoryLine.

    Insertion order is the first-seen order of the part ids, so iterating
    the inventory yields the same order the lines were imported in.
    """

    def __init__(self, data=None):
        super().__init__(data)
        if self.data is None:
            self.data = {}

    def lines(self) -> list[InventoryLine]:
        """Returns the lines in first-seen order."""
        return list(self.data.values())

    def copy(self) -> "Inventory":
        """Deep copy, so callers can mutate lines without touching the source."""
        return Inventory(copy.deepcopy(self.data))

    @classmethod
    def from_lines(cls, lines: list[InventoryLine]) -> "Inventory":
        """Builds an inventory from an ordered list; later duplicates win."""
        inventory = cls()
        for line in lines:
            inventory[line["lcsc_id"]] = line
        return inventory


def create_empty_inventory() -> Inventory:
    """Factory function to return new Inventory instance."""
    return Inventory()


def new_line(row: InventoryRow) -> InventoryLine:
    """Initializes an aggregated line from its first contributing row."""
    return {
        **row,
        "total_cost": row["quantity"] * row["unit_price"],
        "price_history": [
            {"quantity": row["quantity"], "unit_price": row["unit_price"]}
        ],
        "pending_qty": 0,
    }
