"""Create / unarchive / skip decisions for one product handle."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from catalog.db.store import CatalogStore
from catalog.importer.models import ImportStats, ProductRow
from catalog.importer.rows import grams_to_ounces, price_to_cents, sku_prefix

logger = logging.getLogger(__name__)


def _descriptive_fields(row: ProductRow) -> dict[str, Any]:
    return {
        "name": row.title,
        "description": row.body_html,
        "base_price_cents": price_to_cents(row.price) or 0,
        "weight_oz": grams_to_ounces(row.weight),
        "vendor": row.vendor,
        "product_type": row.type,
        "published": row.status == "active",
        "featured": False,
    }


def has_skus(rows: Sequence[ProductRow]) -> bool:
    return any(row.variant_sku for row in rows)


class ProductResolver:
    def __init__(self, store: CatalogStore) -> None:
        self.store = store

    def resolve(self, rows: Sequence[ProductRow], stats: ImportStats) -> dict[str, Any] | None:
        """Return the product to fill with variants, or None when the group is skipped."""
        first = rows[0]
        handle = first.handle

        if self.store.find_product(handle, archived=False):
            logger.info("Skipping existing product: %s", first.title)
            stats.products_skipped += 1
            stats.warnings.append(f"Product already exists: {first.title}")
            return None

        archived = self.store.find_product(handle, archived=True)
        if not has_skus(rows):
            logger.info("Skipping %s: no row has a Variant SKU", handle)
            stats.products_skipped += 1
            stats.warnings.append(f"Skipped {first.title}: missing SKUs")
            return None

        if archived:
            return self._unarchive(archived, first, stats)
        return self._create(rows, stats)

    def _unarchive(self, product: dict[str, Any], row: ProductRow, stats: ImportStats) -> dict[str, Any]:
        logger.info("Found archived product, unarchiving and updating: %s", row.title)
        self.store.update_product(product["id"], archived=False, **_descriptive_fields(row))
        self.store.clear_collections(product["id"])
        product = self.store.get_product(product["id"])
        stats.products_created += 1
        stats.created_products.append(f"{product['name']} (unarchived)")
        stats.warnings.append(f"Unarchived and updated: {row.title}")
        return product

    def _create(self, rows: Sequence[ProductRow], stats: ImportStats) -> dict[str, Any]:
        first = rows[0]
        first_sku = next(row.variant_sku for row in rows if row.variant_sku)
        product = self.store.create_product(
            {
                **_descriptive_fields(first),
                "slug": first.handle,
                "sku_prefix": sku_prefix(first_sku),
                "archived": False,
                "inventory_level": "none",
                "product_stock_quantity": 0,
            }
        )
        removed = self.store.delete_default_variants(product["id"])
        if removed:
            logger.info("Removed %s auto-created default variant(s) for %s", removed, product["name"])
        logger.info("Created product: %s", product["name"])
        stats.products_created += 1
        stats.created_products.append(product["name"])
        return product
