import pytest

from src.inventory_lib import (
    InventoryRow,
    InventorySession,
    MemoryStore,
    StorageError,
)

INVENTORY_CSV = """LCSC Part Number,Manufacture Part Number,Manufacturer,Package,Quantity,Description,Unit Price($)
C25804,0603WAF1002T5E,UNI-ROYAL(Uniroyal Elec),0603,100,"10kΩ ±1% 100mW, thick film",0.0012
C14663,CL10B104KB8NNNC,Samsung Electro-Mechanics,0603,50,100nF 50V X7R,0.0021
C25804,0603WAF1002T5E,UNI-ROYAL(Uniroyal Elec),0603,100,"10kΩ ±1% 100mW, thick film",0.0016
"""

BOM_CSV = """LCSC Part,Manfufacture ID,Qty
C25804,0603WAF1002T5E,30
C14663,CL10B104KB8NNNC,60
C99,UNKNOWN,10
"""


def make_row(lcsc_id: str, quantity: int, unit_price: float) -> InventoryRow:
    """Build a minimal mapped supplier row.

    Args:
        lcsc_id: The part id.
        quantity: Units in the batch.
        unit_price: Price per unit.

    Returns:
        InventoryRow: A row with placeholder descriptive fields.
    """
    return {
        "lcsc_id": lcsc_id,
        "manufacture_id": f"MPN-{lcsc_id}",
        "manufacturer": "ACME",
        "package": "0603",
        "quantity": quantity,
        "description": f"Part {lcsc_id}",
        "unit_price": unit_price,
    }


def bom_csv(*lines: tuple[str, int]) -> str:
    """Renders (part id, qty) pairs as BOM file text."""
    body = "".join(f"{pid},MPN-{pid},{qty}\n" for pid, qty in lines)
    return "LCSC Part,Manfufacture ID,Qty\n" + body


def inventory_csv(*lines: tuple[str, int, float]) -> str:
    """Renders (part id, qty, price) triples as supplier export text."""
    header = (
        "LCSC Part Number,Manufacture Part Number,Manufacturer,Package,"
        "Quantity,Description,Unit Price($)\n"
    )
    body = "".join(
        f"{pid},MPN-{pid},ACME,0603,{qty},Part {pid},{price}\n"
        for pid, qty, price in lines
    )
    return header + body


class FailingStore(MemoryStore):
    """Store whose writes always fail, like a full browser quota."""

    def set(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded")

    def delete(self, key: str) -> None:
        raise StorageError("quota exceeded")


@pytest.fixture
def store():
    """Returns an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def session(store):
    """Returns a session holding the sample inventory (C25804, C14663).

    Args:
        store: The in-memory store fixture.

    Returns:
        InventorySession: A session with the sample export already imported.
    """
    s = InventorySession(store)
    s.import_inventory(INVENTORY_CSV, file_name="order.csv")
    return s
