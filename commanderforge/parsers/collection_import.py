"""
Parser for collection export formats.

Supports:
- Simple format: "4 Lightning Bolt" or "4x Lightning Bolt"
- Set-tagged format: "4 Lightning Bolt (LEB)" or "4 Lightning Bolt (LEB) 163"
- CSV format: "Card Name",Quantity,Set (MTGGoldfish / Moxfield style)
"""

import csv
import re
from io import StringIO
from typing import Literal

from commanderforge.models.card import OwnedCardRef
from commanderforge.models.collection import Collection

# Pattern: "4 Lightning Bolt", "4x Lightning Bolt", "4 Lightning Bolt (LEB) 163"
# Groups: (quantity, card_name, set_code, collector_number)
SIMPLE_PATTERN = re.compile(
    r"^(\d+)x?\s+(.+?)(?:\s+\(([A-Za-z0-9]+)\)(?:\s+(\S+))?)?$",
    re.IGNORECASE,
)

NAME_COLUMNS = ("card name", "name", "card")
QUANTITY_COLUMNS = ("quantity", "count", "qty")
SET_COLUMNS = ("set", "set code", "edition")

EntryCounts = dict[tuple[str, str | None], int]


def _merge(entries: EntryCounts, name: str, set_code: str | None, qty: int) -> None:
    key = (name, set_code)
    entries[key] = entries.get(key, 0) + qty


def _to_refs(entries: EntryCounts) -> list[OwnedCardRef]:
    return [OwnedCardRef(name, set_code, qty) for (name, set_code), qty in entries.items()]


def parse_simple_format(text: str) -> list[OwnedCardRef]:
    """
    Parse "quantity card_name [(SET) [number]]" lines.

    Unparseable lines are skipped. Duplicate name/set pairs are summed.
    """
    entries: EntryCounts = {}

    for line in text.strip().split("\n"):
        line = line.strip()
        if not line:
            continue

        match = SIMPLE_PATTERN.match(line)
        if match:
            quantity = int(match.group(1))
            name = match.group(2).strip()
            set_code = match.group(3).upper() if match.group(3) else None
            if name and quantity > 0:
                _merge(entries, name, set_code, quantity)

    return _to_refs(entries)


def _find_column(fieldnames: list[str], candidates: tuple[str, ...]) -> str | None:
    for col in fieldnames:
        if col.strip().lower() in candidates:
            return col
    return None


def parse_csv_format(text: str) -> list[OwnedCardRef]:
    """
    Parse CSV collection export format.

    Expected columns (flexible ordering, case-insensitive):
        - Card Name / Name / Card
        - Quantity / Count / Qty (defaults to 1)
        - Set / Set Code / Edition (optional)
    """
    entries: EntryCounts = {}

    reader = csv.DictReader(StringIO(text.strip()))
    if not reader.fieldnames:
        return []

    fieldnames = list(reader.fieldnames)
    name_col = _find_column(fieldnames, NAME_COLUMNS)
    qty_col = _find_column(fieldnames, QUANTITY_COLUMNS)
    set_col = _find_column(fieldnames, SET_COLUMNS)

    if not name_col:
        return []

    for row in reader:
        name = (row.get(name_col) or "").strip()
        if not name:
            continue

        qty_str = (row.get(qty_col) or "1") if qty_col else "1"
        try:
            quantity = int(qty_str) if qty_str.strip() else 1
        except ValueError:
            quantity = 1

        set_code = (row.get(set_col) or "").strip().upper() if set_col else ""

        if quantity > 0:
            _merge(entries, name, set_code or None, quantity)

    return _to_refs(entries)


def detect_format(text: str) -> Literal["simple", "csv"]:
    """
    Auto-detect the format of collection text.

    Returns "csv" if the first line looks like a CSV header, else "simple".
    """
    text = text.strip()
    if not text:
        return "simple"

    first_line = text.split("\n")[0].strip().lower()
    if "," in first_line and any(h in first_line for h in ("name", "quantity", "count")):
        return "csv"
    return "simple"


def parse_collection_text(
    text: str, format_hint: Literal["auto", "simple", "csv"] = "auto"
) -> list[OwnedCardRef]:
    """
    Parse collection text in any supported format.

    Args:
        text: Raw collection text (pasted from export)
        format_hint: Format to use, or "auto" to detect

    Returns:
        Owned card references in file order.
    """
    if not text or not text.strip():
        return []

    if format_hint == "auto":
        format_hint = detect_format(text)

    if format_hint == "csv":
        return parse_csv_format(text)
    return parse_simple_format(text)


def parse_collection(text: str) -> Collection:
    """Parse collection text into an in-memory Collection."""
    return Collection(entries=parse_collection_text(text))
