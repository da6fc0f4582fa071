"""Variant reconciliation for one product."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from catalog.db.store import CatalogStore
from catalog.importer.models import ImportStats, ProductRow
from catalog.importer.rows import grams_to_ounces, price_to_cents, slugify

logger = logging.getLogger(__name__)


def variant_options(row: ProductRow) -> list[str]:
    return [value for value in (row.option1, row.option2, row.option3) if value]


def variant_values(row: ProductRow) -> dict[str, Any]:
    options = variant_options(row)
    return {
        "sku": row.variant_sku,
        "size": row.option1 or None,
        "color": row.option2 or None,
        "material": row.option3 or None,
        "variant_key": "-".join(slugify(value) for value in options) or slugify(row.variant_sku),
        "variant_name": " / ".join(options) or row.variant_sku,
        "price_cents": price_to_cents(row.price) or 0,
        "compare_at_price_cents": price_to_cents(row.compare_at_price),
        "cost_cents": 0,
        "stock_quantity": 0,
        "weight_oz": grams_to_ounces(row.weight),
        "available": True,
        "is_default": False,
    }


class VariantReconciler:
    def __init__(self, store: CatalogStore) -> None:
        self.store = store

    def reconcile(self, product: dict[str, Any], rows: Sequence[ProductRow], stats: ImportStats) -> int:
        """Create one variant per new SKU in row order; returns how many were created."""
        known = self.store.existing_skus(row.variant_sku for row in rows)
        created = 0
        for row in rows:
            if not row.variant_sku:
                size = row.option1 or "unknown size"
                logger.warning("Row for %s (%s) has no Variant SKU", product["name"], size)
                stats.variants_skipped += 1
                stats.warnings.append(f"Skipped variant without SKU: {product['name']} ({size})")
                continue
            if row.variant_sku in known:
                logger.info("Skipping existing variant: %s", row.variant_sku)
                stats.variants_skipped += 1
                continue
            self.store.create_variant(product["id"], variant_values(row))
            known.add(row.variant_sku)
            created += 1
            stats.variants_created += 1

        if created:
            self.store.delete_default_variants(product["id"])
        if self.store.variant_count(product["id"]) == 0:
            logger.warning("Product %s has no variants after import", product["name"])
            stats.warnings.append(f"CRITICAL: {product['name']} has no variants")
        self._backfill_base_price(product)
        return created

    def _backfill_base_price(self, product: dict[str, Any]) -> None:
        if product["base_price_cents"]:
            return
        min_price = self.store.min_variant_price(product["id"])
        if min_price:
            self.store.update_product(product["id"], base_price_cents=min_price)
            product["base_price_cents"] = min_price
