"""CSV parsing, grouping and field conversions."""

from __future__ import annotations

import csv
import logging
import re
from pathlib import Path
from typing import Any, Iterable

from catalog.importer.models import InventoryRow, ProductRow

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = (
    "Handle",
    "Title",
    "Body (HTML)",
    "Variant Price",
    "Variant Grams",
    "Vendor",
    "Type",
    "Status",
    "Variant SKU",
    "Option1 Value",
    "Option2 Value",
    "Option3 Value",
    "Variant Compare At Price",
    "Image Src",
    "Tags",
)
INVENTORY_COLUMNS = ("SKU", "Quantity")

GRAMS_PER_OUNCE = 28.3495
SLUG_RE = re.compile(r"[^a-z0-9]+")


class CsvFormatError(ValueError):
    """The CSV cannot be used for an import at all."""


def _read_csv(path: str | Path, required: Iterable[str]) -> list[dict[str, str]]:
    with Path(path).open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        header = reader.fieldnames or []
        missing = [column for column in required if column not in header]
        if missing:
            raise CsvFormatError(f"{Path(path).name} is missing columns: {', '.join(missing)}")
        return list(reader)


def read_product_rows(path: str | Path) -> list[ProductRow]:
    return [ProductRow.from_csv(record) for record in _read_csv(path, PRODUCT_COLUMNS)]


def read_inventory_rows(path: str | Path) -> list[InventoryRow]:
    rows = []
    for record in _read_csv(path, INVENTORY_COLUMNS):
        rows.append(InventoryRow(sku=(record.get("SKU") or "").strip(), quantity=_to_int(record.get("Quantity"))))
    return rows


def group_rows(rows: Iterable[ProductRow]) -> dict[str, list[ProductRow]]:
    """Group rows by handle, keeping first-seen handle order and every row."""
    groups: dict[str, list[ProductRow]] = {}
    for row in rows:
        groups.setdefault(row.handle, []).append(row)
    logger.info("Found %s unique products in CSV", len(groups))
    return groups


def price_to_cents(value: Any) -> int | None:
    if value in (None, ""):
        return None
    try:
        return round(float(value) * 100)
    except (TypeError, ValueError):
        logger.warning("Unparseable price %r", value)
        return None


def grams_to_ounces(value: Any) -> float:
    try:
        grams = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    return round(grams / GRAMS_PER_OUNCE, 2)


def slugify(value: str) -> str:
    return SLUG_RE.sub("-", value.lower()).strip("-")


def sku_prefix(sku: str) -> str:
    return sku.split("-", 1)[0]


def _to_int(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0
