"""
LCSC Inventory Library (Package Entry Point).

Exposes the core logic and data structures for supplier CSV ingestion,
BOM reconciliation, persistence, and export.
"""

from .exporters import export_filename, generate_inventory_csv
from .manager import (
    ReconcileResult,
    aggregate_rows,
    apply_usage,
    clear_usage,
    compute_findings,
    has_pending_usage,
    merge_inventories,
    reconcile_bom,
    set_pending_qty,
)
from .parser import (
    map_bom_row,
    map_inventory_row,
    parse_bom_csv,
    parse_inventory_csv,
    summarize_import,
)
from .session import CONFIRM_PROMPTS, CommandResult, ExportResult, InventorySession
from .storage import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    StorageError,
    clear_snapshot,
    default_store_path,
    load_snapshot,
    save_snapshot,
)
from .types import (
    BomRequest,
    Finding,
    ImportStats,
    Inventory,
    InventoryLine,
    InventoryRow,
    PriceEntry,
    UnmatchedPart,
    create_empty_inventory,
)
from .utils import coerce_float, coerce_int, coerce_str, decode_upload, parse_csv_text
from .views import (
    filter_lines,
    format_price_history,
    lines_to_table,
    next_sort,
    sort_lines,
    total_inventory_value,
    total_usage_cost,
)

__all__ = [
    # types
    "PriceEntry",
    "InventoryRow",
    "InventoryLine",
    "BomRequest",
    "UnmatchedPart",
    "Finding",
    "ImportStats",
    "Inventory",
    "create_empty_inventory",
    # parser
    "map_inventory_row",
    "map_bom_row",
    "parse_inventory_csv",
    "parse_bom_csv",
    "summarize_import",
    # manager
    "ReconcileResult",
    "aggregate_rows",
    "merge_inventories",
    "reconcile_bom",
    "compute_findings",
    "has_pending_usage",
    "apply_usage",
    "clear_usage",
    "set_pending_qty",
    # views
    "next_sort",
    "sort_lines",
    "filter_lines",
    "total_inventory_value",
    "total_usage_cost",
    "format_price_history",
    "lines_to_table",
    # storage
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "StorageError",
    "default_store_path",
    "save_snapshot",
    "load_snapshot",
    "clear_snapshot",
    # exporters
    "generate_inventory_csv",
    "export_filename",
    # session
    "InventorySession",
    "CommandResult",
    "ExportResult",
    "CONFIRM_PROMPTS",
    # utils
    "coerce_str",
    "coerce_int",
    "coerce_float",
    "decode_upload",
    "parse_csv_text",
]
