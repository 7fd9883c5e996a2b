"""
Headless BOM check.

Aggregates an LCSC order export, combines one or more BOMs against it, and
prints what is missing or short. With --apply the usage is subtracted and
the updated stock is written as a re-importable CSV.
"""

import argparse
import logging
import os
import sys

from src.inventory_lib import (
    InventorySession,
    MemoryStore,
    parse_inventory_csv,
    summarize_import,
)


def read_text(path: str) -> str:
    if not os.path.exists(path):
        print(f"❌ Missing file: '{path}'.")
        sys.exit(1)
    with open(path, "r", encoding="utf-8-sig", errors="replace") as f:
        return f.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("inventory", help="LCSC order export CSV")
    parser.add_argument("boms", nargs="*", help="BOM usage CSVs (combined)")
    parser.add_argument("--multiplier", type=int, default=1, help="Number of builds")
    parser.add_argument(
        "--apply", action="store_true", help="Subtract usage and write the export"
    )
    parser.add_argument("--out", default="output", help="Export directory")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 1. Ingest
    session = InventorySession(MemoryStore())
    rows = parse_inventory_csv(read_text(args.inventory))
    stats = summarize_import(rows)
    session.import_rows(rows, file_name=os.path.basename(args.inventory))
    print(f"📂 {args.inventory}: {stats['rows_read']} rows, {stats['unique_parts']} parts")

    for path in args.boms:
        result = session.load_bom(read_text(path), combine=True)
        print(f"   {os.path.basename(path)}: {result['message']}")

    session.set_multiplier(args.multiplier)

    # 2. Verify
    print(f"\n--- Check (×{session.multiplier}) ---")
    findings = session.findings
    if findings:
        print(f"⚠️  {len(findings)} issues:")
        for finding in findings:
            print(f"   ! {finding['reason']}")
    else:
        print("✅ Everything in stock.")

    print(f"Inventory value: ${session.total_value:.2f}")
    print(f"Usage cost:      ${session.usage_cost:.2f}")

    if not args.apply:
        return 0

    # 3. Apply & export
    print(f"\n{session.apply_bom()['message']}")
    export = session.export()
    if export["data"] is None:
        print(export["result"]["message"])
        return 0

    os.makedirs(args.out, exist_ok=True)
    out_path = os.path.join(args.out, export["file_name"])
    try:
        with open(out_path, "wb") as f:
            f.write(export["data"])
        print(f"✅ CSV: {out_path}")
    except PermissionError:
        print(f"\n❌ Error: Close {out_path} first.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
