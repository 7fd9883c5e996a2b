"""
Working-session state and the user-facing command set.

An InventorySession holds the working inventory next to a handle on the
persistent store. Each command reads the current state, computes a new one
with the engine in `manager`, replaces it wholesale, and reports back with a
CommandResult. Commands never raise: storage failures are logged and
reported as warnings while the in-memory change is kept.

Once usage has been applied the working inventory diverges from the stored
one. From then on edits are kept in memory only, so the stored original
stays recoverable through `reload_original`.
"""

import datetime
import logging
from typing import Any, Literal, TypedDict

from src.inventory_lib.constants import DEFAULT_FILENAME
from src.inventory_lib.exporters import export_filename, generate_inventory_csv
from src.inventory_lib.manager import (
    aggregate_rows,
    apply_usage,
    clear_usage,
    compute_findings,
    has_pending_usage,
    merge_inventories,
    reconcile_bom,
    set_pending_qty,
)
from src.inventory_lib.parser import parse_bom_csv, parse_inventory_csv
from src.inventory_lib.storage import (
    KeyValueStore,
    StorageError,
    clear_snapshot,
    load_snapshot,
    save_snapshot,
)
from src.inventory_lib.types import (
    Finding,
    Inventory,
    InventoryRow,
    UnmatchedPart,
    create_empty_inventory,
)
from src.inventory_lib.utils import coerce_int
from src.inventory_lib.views import total_inventory_value, total_usage_cost

logger = logging.getLogger(__name__)

SAVE_FAILED = "Failed to save data locally. Changes may be lost."

# Commands that need an explicit yes from the user before running.
CONFIRM_PROMPTS = {
    "apply_bom": (
        "Apply BOM usage (×{multiplier})? This will subtract used quantities "
        "from the working copy. The original inventory remains in the store."
    ),
    "clear_bom": "Clear BOM usage data?",
    "clear_all": "Are you sure you want to clear all inventory data?",
    "reload_original": (
        "Reload original inventory from the store? Any applied changes will be lost."
    ),
}


class CommandResult(TypedDict):
    """
    User-visible outcome of a command.

    Attributes:
        level: 'success', 'info' for logical no-ops, or 'warning'.
        message: Text to show the user.
    """

    level: Literal["success", "info", "warning"]
    message: str


class ExportResult(TypedDict):
    result: CommandResult
    data: bytes | None
    file_name: str | None


def _result(level: Literal["success", "info", "warning"], message: str) -> CommandResult:
    return {"level": level, "message": message}


class InventorySession:
    """
    The working copy of the inventory plus its BOM reconciliation state.

    Attributes:
        store: Persistent key-value store holding the original snapshot.
        inventory: The working inventory.
        file_name: Name of the file the inventory was imported from.
        unmatched: BOM parts not found in the inventory.
        multiplier: Number of builds BOM usage is scaled by.
        has_unapplied_changes: A BOM or usage edit is waiting to be applied.
        is_modified_from_storage: Usage was applied; the working inventory
                                  no longer matches the store.
    """

    def __init__(
        self,
        store: KeyValueStore,
        inventory: Inventory | None = None,
        file_name: str = DEFAULT_FILENAME,
    ):
        self.store = store
        self.inventory = inventory if inventory is not None else create_empty_inventory()
        self.file_name = file_name
        self.unmatched: list[UnmatchedPart] = []
        self.multiplier = 1
        self.has_unapplied_changes = False
        self.is_modified_from_storage = False

    @classmethod
    def from_store(cls, store: KeyValueStore) -> "InventorySession":
        """Starts a session from whatever the store holds (possibly nothing)."""
        inventory, file_name = load_snapshot(store)
        session = cls(store, inventory, file_name)
        session.has_unapplied_changes = has_pending_usage(inventory)
        return session

    # --- Persistence ---

    def _persist(self, file_name: str | None = None) -> bool:
        try:
            save_snapshot(self.store, self.inventory, file_name)
        except StorageError as e:
            logger.error(f"Failed to save to store: {e}")
            return False
        return True

    def _persist_unless_modified(self) -> bool:
        if self.is_modified_from_storage:
            return True
        return self._persist()

    @staticmethod
    def _with_save_status(result: CommandResult, saved: bool) -> CommandResult:
        if saved:
            return result
        return _result("warning", f"{result['message']}\n\n{SAVE_FAILED}")

    # --- Derived state ---

    @property
    def findings(self) -> list[Finding]:
        return compute_findings(self.inventory, self.unmatched, self.multiplier)

    @property
    def total_value(self) -> float:
        return total_inventory_value(self.inventory)

    @property
    def usage_cost(self) -> float:
        return total_usage_cost(self.inventory, self.multiplier)

    def requires_confirmation(self, command: str) -> bool:
        """Whether `command` must be confirmed before it runs."""
        if command == "apply_bom":
            return has_pending_usage(self.inventory)
        return command in CONFIRM_PROMPTS

    def confirmation_prompt(self, command: str) -> str:
        return CONFIRM_PROMPTS[command].format(multiplier=self.multiplier)

    # --- Commands ---

    def import_inventory(
        self, text: str, file_name: str | None = None, combine: bool = False
    ) -> CommandResult:
        """
        Imports a supplier CSV, replacing or combining with the inventory.

        Args:
            text: Decoded CSV content.
            file_name: Name of the uploaded file.
            combine: Merge into the current inventory instead of replacing it.
        """
        return self.import_rows(parse_inventory_csv(text), file_name, combine)

    def import_rows(
        self,
        rows: list[InventoryRow],
        file_name: str | None = None,
        combine: bool = False,
    ) -> CommandResult:
        """Same as import_inventory, for rows that are already parsed."""
        aggregated = aggregate_rows(rows)

        if combine and len(self.inventory) > 0:
            self.inventory = merge_inventories(self.inventory, aggregated)
            self.is_modified_from_storage = False
            saved = self._persist()
            result = _result(
                "success",
                f"Combined successfully! Added {len(aggregated)} parts. "
                f"New total: {len(self.inventory)} unique parts.",
            )
        else:
            self.inventory = aggregated
            self.is_modified_from_storage = False
            if file_name:
                self.file_name = file_name
            saved = self._persist(file_name)
            result = _result(
                "success",
                f"Loaded successfully! Imported {len(rows)} rows. "
                f"Aggregated to {len(aggregated)} unique parts.",
            )

        return self._with_save_status(result, saved)

    def load_bom(self, text: str, combine: bool = False) -> CommandResult:
        """
        Reconciles a BOM usage file against the working inventory.

        Args:
            text: Decoded CSV content.
            combine: Add to the usage of earlier BOMs instead of replacing it.
        """
        if len(self.inventory) == 0:
            return _result("info", "Import an inventory before loading a BOM.")

        requests = parse_bom_csv(text)
        outcome = reconcile_bom(self.inventory, self.unmatched, requests, combine)

        self.inventory = outcome["inventory"]
        self.unmatched = outcome["unmatched"]
        self.has_unapplied_changes = (
            self.has_unapplied_changes or outcome["has_unapplied_changes"]
        )

        if combine:
            message = (
                f"BOM Combined! Added {outcome['processed']} parts to existing "
                f"BOM requirements."
            )
        else:
            message = f"BOM Loaded! Processed {outcome['processed']} parts from BOM."

        level: Literal["success", "warning"] = "success"
        if outcome["new_missing"] > 0:
            level = "warning"
            message += (
                f" Warning: {outcome['new_missing']} parts not found in inventory."
            )

        saved = self._persist_unless_modified()
        return self._with_save_status(_result(level, message), saved)

    def edit_pending_quantity(self, part_id: str, value: Any) -> CommandResult:
        """Overrides the pending usage of one line with a user-entered value."""
        if part_id not in self.inventory:
            return _result("info", f"{part_id} is not in the inventory.")

        quantity = coerce_int(value)
        self.inventory = set_pending_qty(self.inventory, part_id, quantity)
        self.has_unapplied_changes = True

        saved = self._persist_unless_modified()
        return self._with_save_status(
            _result("success", f"Usage of {part_id} set to {quantity}."), saved
        )

    def set_multiplier(self, value: Any) -> CommandResult:
        """Sets the build count; anything below 1 or unparseable becomes 1."""
        self.multiplier = coerce_int(value, minimum=1)
        return _result("success", f"Multiplier set to ×{self.multiplier}.")

    def apply_bom(self) -> CommandResult:
        """Subtracts scaled usage from the working copy, leaving the store alone."""
        if not has_pending_usage(self.inventory):
            return _result("info", "No BOM changes to apply.")

        self.inventory = apply_usage(self.inventory, self.multiplier)
        self.unmatched = []
        self.has_unapplied_changes = False
        self.is_modified_from_storage = True
        logger.info(f"Applied BOM usage (×{self.multiplier}) to working copy")

        return _result(
            "success",
            "BOM usage applied! Quantities updated in working copy. "
            "Original inventory is safe in the store; reload it to restore.",
        )

    def clear_bom(self) -> CommandResult:
        """Drops all pending usage and unmatched parts."""
        self.inventory = clear_usage(self.inventory)
        self.unmatched = []
        self.has_unapplied_changes = False

        saved = self._persist_unless_modified()
        return self._with_save_status(_result("success", "BOM usage cleared."), saved)

    def clear_all(self) -> CommandResult:
        """Deletes the stored snapshot and empties the session."""
        self.inventory = create_empty_inventory()
        self.file_name = DEFAULT_FILENAME
        self.unmatched = []
        self.has_unapplied_changes = False
        self.is_modified_from_storage = False

        try:
            clear_snapshot(self.store)
        except StorageError as e:
            logger.error(f"Failed to clear store: {e}")
            return _result(
                "warning", f"Data cleared in memory, but the store could not be cleared: {e}"
            )
        return _result("success", "All data cleared.")

    def reload_original(self) -> CommandResult:
        """Discards the working copy in favour of the stored snapshot."""
        self.inventory, self.file_name = load_snapshot(self.store)
        self.unmatched = []
        self.has_unapplied_changes = has_pending_usage(self.inventory)
        self.is_modified_from_storage = False
        return _result("success", "Original Reloaded.")

    def export(self, now: datetime.datetime | None = None) -> ExportResult:
        """
        Builds the export CSV of every line still in stock.

        Args:
            now: Timestamp for the file name; defaults to the current time.
        """
        if len(self.inventory) == 0:
            return {
                "result": _result("info", "No data to export."),
                "data": None,
                "file_name": None,
            }

        data = generate_inventory_csv(self.inventory.lines())
        name = export_filename(self.file_name, now)

        message = "Exported successfully!"
        if self.is_modified_from_storage:
            message += (
                " Note: Exported data includes applied BOM changes. "
                "Original inventory remains in the store."
            )
        return {"result": _result("success", message), "data": data, "file_name": name}
