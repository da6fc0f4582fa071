"""Stock sync from a secondary SKU/quantity CSV."""

from __future__ import annotations

import logging
from typing import Iterable

from catalog.db.store import CatalogStore
from catalog.importer.models import InventoryRow

logger = logging.getLogger(__name__)


class InventoryUpdater:
    def __init__(self, store: CatalogStore) -> None:
        self.store = store

    def apply(self, rows: Iterable[InventoryRow]) -> int:
        """Set stock for every known SKU; unknown SKUs are ignored. Returns rows applied."""
        logger.info("Updating inventory from CSV")
        updated = 0
        switched: set[int] = set()
        for row in rows:
            if not row.sku:
                continue
            variant = self.store.find_variant_by_sku(row.sku)
            if variant is None:
                continue
            self.store.update_variant(variant["id"], stock_quantity=row.quantity)
            updated += 1
            product_id = variant["product_id"]
            if product_id in switched:
                continue
            product = self.store.get_product(product_id)
            if product and product["inventory_level"] != "variant":
                self.store.update_product(product_id, inventory_level="variant")
                self.store.delete_default_variants(product_id)
            switched.add(product_id)
        logger.info("Inventory updated for %s variants", updated)
        return updated
