"""FastAPI application for starting and polling catalog imports."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from pydantic import BaseModel

from catalog.db.session import create_engine_from_env
from catalog.db.store import CatalogStore
from catalog.importer.progress import ImportTracker, serialize_job
from catalog.importer.settings import ImportSettings

logger = logging.getLogger(__name__)

app = FastAPI(title="Catalog Import API")


class ImportResponse(BaseModel):
    data: dict[str, Any]
    message: str | None = None


class ImportListResponse(BaseModel):
    data: list[dict[str, Any]]


def get_store() -> CatalogStore:
    return CatalogStore(create_engine_from_env())


def get_settings() -> ImportSettings:
    return ImportSettings.from_env()


def enqueue_import(import_id: int, products_path: str, inventory_path: str | None) -> None:
    from catalog.jobs.celery_app import process_import

    process_import.delay(import_id, products_path, inventory_path)


def _save_upload(upload: UploadFile, prefix: str, upload_dir: Path) -> str:
    upload_dir.mkdir(parents=True, exist_ok=True)
    name = Path(upload.filename or "upload.csv").name
    path = upload_dir / f"{prefix}_{int(time.time())}_{name}"
    with path.open("wb") as handle:
        handle.write(upload.file.read())
    return str(path)


@app.post("/imports", response_model=ImportResponse, status_code=201)
async def create_import(
    products_file: UploadFile | None = File(None),
    inventory_file: UploadFile | None = File(None),
    store: CatalogStore = Depends(get_store),
    settings: ImportSettings = Depends(get_settings),
) -> ImportResponse:
    if products_file is None or not products_file.filename:
        raise HTTPException(status_code=422, detail="Products CSV file is required")
    products_path = _save_upload(products_file, "products", settings.upload_dir)
    inventory_path = None
    if inventory_file is not None and inventory_file.filename:
        inventory_path = _save_upload(inventory_file, "inventory", settings.upload_dir)
    import_id = store.create_import(
        filename=products_file.filename,
        inventory_filename=inventory_file.filename if inventory_path else None,
    )
    enqueue_import(import_id, products_path, inventory_path)
    logger.info("Import #%s queued", import_id)
    return ImportResponse(data=serialize_job(store.get_import(import_id)), message="Import started successfully")


@app.get("/imports", response_model=ImportListResponse)
async def list_imports(store: CatalogStore = Depends(get_store)) -> ImportListResponse:
    return ImportListResponse(data=[serialize_job(job) for job in store.list_imports(limit=50)])


@app.get("/imports/{import_id}", response_model=ImportResponse)
async def show_import(
    import_id: int,
    store: CatalogStore = Depends(get_store),
    settings: ImportSettings = Depends(get_settings),
) -> ImportResponse:
    if store.get_import(import_id) is None:
        raise HTTPException(status_code=404, detail="Import not found")
    ImportTracker(store, import_id).mark_stale(settings.stale_after_minutes)
    return ImportResponse(data=serialize_job(store.get_import(import_id), full=True))
