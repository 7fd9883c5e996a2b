"""
Utility functions for CSV decoding and best-effort value coercion.

Supplier exports are messy. Nothing in here raises on bad data: unparseable
numbers become zero and missing text becomes the empty string, leaving data
quality concerns to the reconciliation findings.
"""

import csv
import io
import math
import re
from typing import Any

# Leading integer, e.g. "12", "+3", "12 pcs"
INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")
# Leading decimal, e.g. "0.0123", ".5", "1e-3"
FLOAT_PATTERN = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def coerce_str(value: Any) -> str:
    """Trims a raw cell value; None becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip()


def coerce_int(value: Any, minimum: int = 0) -> int:
    """
    Reads the leading integer of a raw cell value.

    Thousands separators are dropped first ("1,000" -> 1000).

    Args:
        value: The raw cell value (string, number, or None).
        minimum: Floor applied to the result.

    Returns:
        The parsed integer, clamped to `minimum`. Unparseable input returns
        `minimum`.
    """
    if isinstance(value, bool) or value is None:
        return minimum
    if isinstance(value, float) and not math.isfinite(value):
        return minimum
    if isinstance(value, (int, float)):
        return max(minimum, int(value))

    match = INT_PATTERN.match(str(value).replace(",", ""))
    if not match:
        return minimum
    try:
        return max(minimum, int(match.group(1)))
    except ValueError:
        # Exceeds the int digit limit
        return minimum


def coerce_float(value: Any) -> float:
    """
    Reads the leading decimal number of a raw cell value.

    Returns:
        A non-negative float. Unparseable or negative input returns 0.0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    else:
        match = FLOAT_PATTERN.match(str(value).replace(",", ""))
        if not match:
            return 0.0
        number = float(match.group(1))

    # Rejects NaN and inf as well as negatives
    if not (0.0 <= number < float("inf")):
        return 0.0
    return number


def decode_upload(content: bytes) -> str:
    """Decodes uploaded file bytes, dropping a UTF-8 BOM if present."""
    return content.decode("utf-8-sig", errors="replace")


def parse_csv_text(text: str) -> list[dict[str, str]]:
    """
    Parses delimited text with a header row.

    Blank lines are skipped. Header names are trimmed; cells beyond the
    header width are dropped.

    Args:
        text: The full CSV content.

    Returns:
        One field-name-to-value mapping per data row.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.DictReader(io.StringIO(text, newline=""))
    rows = []
    for row in reader:
        clean = {str(k).strip(): v for k, v in row.items() if k is not None}
        if not any(coerce_str(v) for v in clean.values()):
            continue
        rows.append(clean)
    return rows
