"""Bulk catalog import orchestration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

from catalog.db.store import CatalogStore
from catalog.importer.collections import CollectionTagger
from catalog.importer.images import ImageIngestionPool, image_urls
from catalog.importer.inventory import InventoryUpdater
from catalog.importer.models import ImportStats, ProductRow, SharedStats
from catalog.importer.products import ProductResolver
from catalog.importer.progress import ImportTracker
from catalog.importer.rows import group_rows, read_inventory_rows, read_product_rows
from catalog.importer.settings import ImportSettings
from catalog.importer.variants import VariantReconciler

logger = logging.getLogger(__name__)


class CatalogImporter:
    def __init__(
        self,
        store: CatalogStore,
        blob_store,
        *,
        settings: ImportSettings | None = None,
        image_pool: ImageIngestionPool | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or ImportSettings()
        self.image_pool = image_pool or ImageIngestionPool(store, blob_store, settings=self.settings)
        self.resolver = ProductResolver(store)
        self.variants = VariantReconciler(store)

    async def close(self) -> None:
        await self.image_pool.close()

    async def run(
        self,
        import_id: int,
        products_csv_path: str | Path,
        inventory_csv_path: str | Path | None = None,
    ) -> ImportStats:
        """Run one import job end to end; the CSV files are always removed afterwards."""
        tracker = ImportTracker(self.store, import_id)
        stats = ImportStats()
        try:
            tracker.mark_processing()
            logger.info("Starting import #%s", import_id)

            groups = group_rows(read_product_rows(products_csv_path))
            shared = SharedStats(stats)
            tagger = CollectionTagger(self.store, cache={})
            total = len(groups)
            for processed, (handle, rows) in enumerate(groups.items(), start=1):
                try:
                    product = await self.process_group(rows, tagger, shared)
                except Exception as exc:
                    logger.exception("Failed to process product %s", handle)
                    stats.warnings.append(f"ERROR processing {handle}: {exc}")
                    step = f"Skipped {handle} due to error"
                else:
                    step = f"Imported {product['name']}" if product else f"Processed {processed} of {total}"
                tracker.update_progress(processed, total, step)

            if inventory_csv_path and Path(inventory_csv_path).exists():
                InventoryUpdater(self.store).apply(read_inventory_rows(inventory_csv_path))

            stats.collections_total = self.store.collection_count()
            tracker.complete(stats)
        except Exception as exc:
            logger.exception("Import #%s failed", import_id)
            tracker.fail_unless_finished(str(exc))
        finally:
            remove_inputs(products_csv_path, inventory_csv_path)
        return stats

    async def process_group(
        self,
        rows: Sequence[ProductRow],
        tagger: CollectionTagger,
        shared: SharedStats,
    ) -> dict[str, Any] | None:
        stats = shared.stats
        product = self.resolver.resolve(rows, stats)
        if product is None:
            return None
        tagger.attach(product, rows[0].tags, stats)
        self.variants.reconcile(product, rows, stats)
        urls = image_urls(rows, self.settings.skip_image_patterns)
        await self.image_pool.ingest(product, urls, shared)
        return product


def remove_inputs(*paths: str | Path | None) -> None:
    for path in paths:
        if not path:
            continue
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove %s: %s", path, exc)
