"""
CSV export of the working inventory.

The export uses the supplier's own column names so that it can be imported
again later, closing the loop between sessions.
"""

import csv
import datetime
import io
import os

from src.inventory_lib.constants import (
    EXPORT_FIELDS,
    EXPORT_PRICE_DECIMALS,
    EXPORT_TIMESTAMP_FORMAT,
    INVENTORY_HEADERS,
)
from src.inventory_lib.types import InventoryLine


def generate_inventory_csv(lines: list[InventoryLine]) -> bytes:
    """
    Generates the inventory export file.

    Only lines with stock left are written. Fields containing commas,
    quotes, or newlines are quoted with inner quotes doubled.

    Args:
        lines: The inventory lines, in display order.

    Returns:
        bytes: The CSV content encoded as utf-8-sig.
    """
    csv_buf = io.StringIO()
    writer = csv.writer(csv_buf, lineterminator="\n")
    writer.writerow([INVENTORY_HEADERS[f] for f in EXPORT_FIELDS])

    for line in lines:
        if line["quantity"] <= 0:
            continue
        writer.writerow(
            [
                line["lcsc_id"],
                line["manufacture_id"],
                line["manufacturer"],
                line["package"],
                line["quantity"],
                line["description"],
                f"{line['unit_price']:.{EXPORT_PRICE_DECIMALS}f}",
            ]
        )

    # encode "utf-8-sig" to ensure Excel opens it correctly with special characters
    return csv_buf.getvalue().encode("utf-8-sig")


def export_filename(
    source_name: str, now: datetime.datetime | None = None
) -> str:
    """
    Derives the export file name from the imported file's name.

    Example:
        'order.csv' at 14:05 on 3 Feb 2025 -> 'order_140503022025.csv'
    """
    if now is None:
        now = datetime.datetime.now()

    base = os.path.basename(source_name) or "inventory"
    stem, ext = os.path.splitext(base)
    if ext.lower() != ".csv":
        stem = base
    return f"{stem}_{now.strftime(EXPORT_TIMESTAMP_FORMAT)}.csv"
