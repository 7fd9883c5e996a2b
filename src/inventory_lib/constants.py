"""
Static configuration for the inventory library.

This module serves as the central repository for:
1.  **CSV Headers:** Column names of the supplier order export and the BOM
    usage file. These must match the supplier spelling exactly.
2.  **Storage Keys:** Names under which the snapshot lives in the store.
3.  **View Config:** Which inventory fields can be sorted, and how.
"""

# --- Supplier Inventory Export ---

INVENTORY_HEADERS = {
    "lcsc_id": "LCSC Part Number",
    "manufacture_id": "Manufacture Part Number",
    "manufacturer": "Manufacturer",
    "package": "Package",
    "quantity": "Quantity",
    "description": "Description",
    "unit_price": "Unit Price($)",
}

# Column order of the export file. Same names as the import so the export
# can be re-imported.
EXPORT_FIELDS = [
    "lcsc_id",
    "manufacture_id",
    "manufacturer",
    "package",
    "quantity",
    "description",
    "unit_price",
]

EXPORT_PRICE_DECIMALS = 4

# HHmmDDMMYYYY
EXPORT_TIMESTAMP_FORMAT = "%H%M%d%m%Y"

# --- BOM Usage File ---

# "Manfufacture ID" is the literal header written by the BOM tooling.
BOM_HEADERS = {
    "lcsc_id": "LCSC Part",
    "manufacture_id": "Manfufacture ID",
    "quantity": "Qty",
}

# --- Persistence ---

STORAGE_KEY = "lcsc-inventory-data"
FILENAME_KEY = "lcsc-inventory-filename"
DEFAULT_FILENAME = "inventory.csv"

STORE_PATH_ENV = "LCSC_INVENTORY_STORE"
DEFAULT_STORE_PATH = "~/.lcsc_inventory/store.json"

# --- Views ---

# Sortable fields and whether they compare numerically.
SORT_FIELDS = {
    "lcsc_id": False,
    "manufacturer": False,
    "manufacture_id": False,
    "package": False,
    "quantity": True,
    "unit_price": True,
    "total_cost": True,
    "pending_qty": True,
    "description": False,
}

SEARCH_FIELDS = ("lcsc_id", "manufacture_id", "manufacturer", "description")

# Display labels for the inventory table.
COLUMN_LABELS = {
    "lcsc_id": "LCSC Part",
    "manufacturer": "Manufacturer",
    "manufacture_id": "Manufacture Part",
    "package": "Package",
    "quantity": "Quantity",
    "pending_qty": "Used",
    "unit_price": "Unit Price ($)",
    "total_cost": "Total ($)",
    "description": "Description",
    "price_history": "Price History",
}
