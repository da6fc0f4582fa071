"""Import job entry point."""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

from catalog.db.session import create_engine_from_env
from catalog.db.store import CatalogStore
from catalog.importer import CatalogImporter, ImportSettings, ImportStats
from catalog.importer.pipeline import remove_inputs
from catalog.importer.progress import ImportTracker
from catalog.utils.blob_store import S3BlobStore

logger = logging.getLogger(__name__)


async def run_import(
    import_id: int,
    products_csv_path: str | Path,
    inventory_csv_path: str | Path | None = None,
    *,
    store: CatalogStore | None = None,
    blob_store=None,
    settings: ImportSettings | None = None,
) -> ImportStats:
    load_dotenv()
    store = store or CatalogStore(create_engine_from_env())
    try:
        importer = CatalogImporter(
            store,
            blob_store or S3BlobStore.from_env(),
            settings=settings or ImportSettings.from_env(),
        )
    except Exception as exc:
        logger.exception("Import #%s could not start", import_id)
        try:
            ImportTracker(store, import_id).fail_unless_finished(f"Import could not start: {exc!r}")
        finally:
            remove_inputs(products_csv_path, inventory_csv_path)
        return ImportStats()

    logger.info("Running import #%s from %s", import_id, Path(products_csv_path).name)
    try:
        return await importer.run(import_id, products_csv_path, inventory_csv_path)
    finally:
        await importer.close()
