"""
File ingestion and row mapping for supplier exports and BOM usage files.

Mapping is total: every row produces a record, with missing or malformed
cells coerced to defaults. Data quality problems surface later as
reconciliation findings, never as import errors.
"""

import logging
from typing import Any, Mapping

from src.inventory_lib.constants import BOM_HEADERS, INVENTORY_HEADERS
from src.inventory_lib.types import BomRequest, ImportStats, InventoryRow
from src.inventory_lib.utils import (
    coerce_float,
    coerce_int,
    coerce_str,
    parse_csv_text,
)

logger = logging.getLogger(__name__)


def map_inventory_row(row: Mapping[str, Any]) -> InventoryRow:
    """
    Maps one supplier CSV record onto an InventoryRow.

    Args:
        row: Field-name keyed record as produced by the CSV reader.

    Returns:
        A fully populated InventoryRow.
    """
    h = INVENTORY_HEADERS
    return {
        "lcsc_id": coerce_str(row.get(h["lcsc_id"])),
        "manufacture_id": coerce_str(row.get(h["manufacture_id"])),
        "manufacturer": coerce_str(row.get(h["manufacturer"])),
        "package": coerce_str(row.get(h["package"])),
        "quantity": coerce_int(row.get(h["quantity"])),
        "description": coerce_str(row.get(h["description"])),
        "unit_price": coerce_float(row.get(h["unit_price"])),
    }


def map_bom_row(row: Mapping[str, Any]) -> BomRequest:
    """Maps one BOM usage record onto a BomRequest."""
    h = BOM_HEADERS
    return {
        "lcsc_id": coerce_str(row.get(h["lcsc_id"])),
        "manufacture_id": coerce_str(row.get(h["manufacture_id"])),
        "quantity": coerce_int(row.get(h["quantity"])),
    }


def parse_inventory_csv(text: str) -> list[InventoryRow]:
    """
    Parses a supplier order export into mapped rows (not yet aggregated).

    Args:
        text: Decoded CSV content with a header row.

    Returns:
        The mapped rows in file order.
    """
    rows = [map_inventory_row(r) for r in parse_csv_text(text)]
    logger.debug(f"Parsed {len(rows)} inventory rows")
    return rows


def parse_bom_csv(text: str) -> list[BomRequest]:
    """Parses a BOM usage file into requests, in file order."""
    requests = [map_bom_row(r) for r in parse_csv_text(text)]
    logger.debug(f"Parsed {len(requests)} BOM rows")
    return requests


def summarize_import(rows: list[InventoryRow]) -> ImportStats:
    """Counts rows and distinct part ids of an import."""
    return {
        "rows_read": len(rows),
        "unique_parts": len({r["lcsc_id"] for r in rows}),
    }
