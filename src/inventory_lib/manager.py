"""
Reconciliation engine: aggregation, BOM reconciliation, and usage commits.

This module acts as the "Controller" for the inventory library. It handles:
- Aggregating raw supplier rows into weighted-average priced lines.
- Merging a second import into an existing inventory.
- Reconciling BOM usage against stock and deriving findings.
- Committing usage by subtracting it from on-hand quantities.

Every function here is pure: inputs are never mutated, a new Inventory is
returned instead. None of them depend on view state (sort, search).
"""

import logging
from typing import TypedDict

from src.inventory_lib.types import (
    BomRequest,
    Finding,
    Inventory,
    InventoryLine,
    InventoryRow,
    UnmatchedPart,
    create_empty_inventory,
    new_line,
)

logger = logging.getLogger(__name__)


class ReconcileResult(TypedDict):
    """
    Outcome of a single BOM import.

    Attributes:
        inventory: Copy of the inventory with pending usage updated.
        unmatched: The unmatched parts list after this import.
        processed: Number of BOM rows processed.
        new_missing: Rows of this import whose part is absent from inventory.
        has_unapplied_changes: True when any request was processed.
    """

    inventory: Inventory
    unmatched: list[UnmatchedPart]
    processed: int
    new_missing: int
    has_unapplied_changes: bool


def _weighted_price(total_cost: float, quantity: int) -> float:
    """Unit price of a combined line. Zero quantity means zero price."""
    if quantity == 0:
        return 0.0
    return total_cost / quantity


def aggregate_rows(rows: list[InventoryRow]) -> Inventory:
    """
    Groups raw rows by part id into weighted-average priced lines.

    The first row seen for an id sets its descriptive fields. Every row adds
    one entry to the line's price history.

    Args:
        rows: Mapped supplier rows in file order.

    Returns:
        An Inventory in first-seen order.
    """
    inventory = create_empty_inventory()

    for row in rows:
        key = row["lcsc_id"]
        existing = inventory.get(key)

        if existing is None:
            inventory[key] = new_line(row)
            continue

        quantity = existing["quantity"] + row["quantity"]
        total_cost = existing["total_cost"] + row["quantity"] * row["unit_price"]

        existing["quantity"] = quantity
        existing["unit_price"] = _weighted_price(total_cost, quantity)
        existing["total_cost"] = total_cost
        existing["price_history"].append(
            {"quantity": row["quantity"], "unit_price": row["unit_price"]}
        )

    return inventory


def merge_inventories(base: Inventory, incoming: Inventory) -> Inventory:
    """
    Combines a freshly aggregated import into an existing inventory.

    Lines already in `base` keep their position and pending usage; their
    quantity and cost are summed and the price histories concatenated.
    Unseen lines are appended in their own order.

    Args:
        base: The current inventory.
        incoming: The aggregated import to fold in.

    Returns:
        A new Inventory.
    """
    combined = base.copy()

    for key, line in incoming.copy().items():
        existing = combined.get(key)
        if existing is None:
            combined[key] = line
            continue

        quantity = existing["quantity"] + line["quantity"]
        total_cost = existing["total_cost"] + line["total_cost"]

        existing["quantity"] = quantity
        existing["unit_price"] = _weighted_price(total_cost, quantity)
        existing["total_cost"] = total_cost
        existing["price_history"].extend(line["price_history"])

    return combined


def reconcile_bom(
    inventory: Inventory,
    unmatched: list[UnmatchedPart],
    requests: list[BomRequest],
    combine: bool = False,
) -> ReconcileResult:
    """
    Applies a BOM usage list against the inventory.

    Rows are walked in file order. Replace mode overwrites the pending usage
    of each referenced line, so the last row for a part wins, and replaces
    the unmatched list with one entry per missing row. Combine mode adds to
    the pending usage and folds missing rows into the unmatched list per
    part id. Lines the BOM does not reference keep their pending usage in
    either mode.

    Args:
        inventory: The current working inventory.
        unmatched: The unmatched parts from earlier BOM imports.
        requests: Mapped BOM rows in file order.
        combine: Accumulate onto existing usage instead of overwriting.

    Returns:
        A ReconcileResult with the updated copies.
    """
    updated = inventory.copy()
    missing: list[UnmatchedPart] = []

    for req in requests:
        line = updated.get(req["lcsc_id"])
        if line is None:
            missing.append(
                {
                    "lcsc_id": req["lcsc_id"],
                    "manufacture_id": req["manufacture_id"],
                    "quantity": req["quantity"],
                }
            )
        elif combine:
            line["pending_qty"] += req["quantity"]
        else:
            line["pending_qty"] = req["quantity"]

    if combine:
        merged = [{**part} for part in unmatched]
        index = {part["lcsc_id"]: part for part in merged}
        for part in missing:
            if part["lcsc_id"] in index:
                index[part["lcsc_id"]]["quantity"] += part["quantity"]
            else:
                merged.append(part)
                index[part["lcsc_id"]] = part
        new_unmatched = merged
    else:
        new_unmatched = missing

    logger.info(
        f"Reconciled {len(requests)} BOM rows, {len(missing)} missing from inventory"
    )

    return {
        "inventory": updated,
        "unmatched": new_unmatched,
        "processed": len(requests),
        "new_missing": len(missing),
        "has_unapplied_changes": len(requests) > 0,
    }


def compute_findings(
    inventory: Inventory, unmatched: list[UnmatchedPart], multiplier: int = 1
) -> list[Finding]:
    """
    Derives advisory findings for the current state.

    Emits one 'missing' finding per unmatched part and one 'shortage'
    finding per line whose scaled usage exceeds its stock.

    Args:
        inventory: The working inventory.
        unmatched: Parts referenced by a BOM but absent from inventory.
        multiplier: Number of builds the BOM usage is scaled by.

    Returns:
        Missing findings first, then shortages in inventory order.
    """
    findings: list[Finding] = []

    for part in unmatched:
        amount = part["quantity"] * multiplier
        findings.append(
            {
                "kind": "missing",
                "lcsc_id": part["lcsc_id"],
                "manufacture_id": part["manufacture_id"],
                "amount": amount,
                "reason": (
                    f"{part['lcsc_id']}/{part['manufacture_id']} missing "
                    f"{amount} components (not in inventory)"
                ),
            }
        )

    for line in inventory.values():
        if line["pending_qty"] <= 0:
            continue

        usage = line["pending_qty"] * multiplier
        if usage > line["quantity"]:
            deficit = usage - line["quantity"]
            note = f" (multiplier: ×{multiplier})" if multiplier != 1 else ""
            findings.append(
                {
                    "kind": "shortage",
                    "lcsc_id": line["lcsc_id"],
                    "manufacture_id": line["manufacture_id"],
                    "amount": deficit,
                    "reason": (
                        f"{line['lcsc_id']}/{line['manufacture_id']} lacks "
                        f"{deficit} components{note}"
                    ),
                }
            )

    return findings


def has_pending_usage(inventory: Inventory) -> bool:
    """True if any line carries non-zero pending usage."""
    return any(line["pending_qty"] > 0 for line in inventory.values())


def apply_usage(inventory: Inventory, multiplier: int = 1) -> Inventory:
    """
    Commits pending usage by subtracting it from on-hand quantities.

    Quantities are floored at zero; a shortage finding is the warning for
    that case. Pending usage is reset on every line.

    Args:
        inventory: The working inventory.
        multiplier: Number of builds the BOM usage is scaled by.

    Returns:
        A new Inventory with usage deducted.
    """
    updated = inventory.copy()

    for line in updated.values():
        if line["pending_qty"] > 0:
            used = line["pending_qty"] * multiplier
            line["quantity"] = max(0, line["quantity"] - used)
            line["total_cost"] = line["quantity"] * line["unit_price"]
        line["pending_qty"] = 0

    return updated


def clear_usage(inventory: Inventory) -> Inventory:
    """Returns a copy with pending usage reset on every line."""
    updated = inventory.copy()
    for line in updated.values():
        line["pending_qty"] = 0
    return updated


def set_pending_qty(inventory: Inventory, part_id: str, quantity: int) -> Inventory:
    """
    Overrides the pending usage of a single line.

    Raises:
        KeyError: If the part id is not in the inventory.
    """
    updated = inventory.copy()
    line: InventoryLine = updated[part_id]
    line["pending_qty"] = max(0, quantity)
    return updated
