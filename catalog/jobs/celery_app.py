"""Celery configuration for background imports."""

from __future__ import annotations

import os

from celery import Celery

from catalog.utils.dates import timezone_name

broker_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")
backend_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")

celery_app = Celery("catalog", broker=broker_url, backend=backend_url, include=["catalog.jobs.imports"])
celery_app.conf.timezone = timezone_name()


@celery_app.task(name="catalog.jobs.process_import")
def process_import(import_id: int, products_csv_path: str, inventory_csv_path: str | None = None) -> dict:
    """One job = one run; retries are left to whoever enqueues the task again."""
    import asyncio

    from catalog.jobs.imports import run_import

    stats = asyncio.run(run_import(import_id, products_csv_path, inventory_csv_path))
    return stats.as_dict()
