"""Import job state machine and progress bookkeeping."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from catalog.db.store import CatalogStore
from catalog.importer.models import ImportStats
from catalog.utils.dates import seconds_between, utcnow

logger = logging.getLogger(__name__)

PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
FAILED = "failed"
TERMINAL_STATUSES = {COMPLETED, FAILED}
STALE_MESSAGE = "Import stopped before completion. Please re-run the import."


class InvalidTransition(RuntimeError):
    """Raised when a job is moved out of a state it cannot leave."""


class ImportTracker:
    """Pushes state and progress for one import job into the store.

    pending -> processing -> completed | failed; completed and failed are terminal.
    """

    def __init__(self, store: CatalogStore, import_id: int) -> None:
        self.store = store
        self.import_id = import_id

    def job(self) -> dict[str, Any]:
        job = self.store.get_import(self.import_id)
        if job is None:
            raise LookupError(f"Import {self.import_id} not found")
        return job

    def _require(self, allowed: set[str], target: str) -> dict[str, Any]:
        job = self.job()
        if job["status"] not in allowed:
            raise InvalidTransition(f"Import {self.import_id} cannot go from {job['status']} to {target}")
        return job

    def mark_processing(self) -> None:
        self._require({PENDING}, PROCESSING)
        now = utcnow()
        self.store.update_import(self.import_id, status=PROCESSING, started_at=now, last_progress_at=now)

    def update_progress(self, processed: int, total: int, step: str | None = None) -> None:
        self._require({PROCESSING}, PROCESSING)
        self.store.update_import(
            self.import_id,
            processed_products=processed,
            total_products=total,
            progress_percent=progress_percent(processed, total),
            current_step=step,
            last_progress_at=utcnow(),
        )

    def complete(self, stats: ImportStats) -> None:
        job = self._require({PROCESSING}, COMPLETED)
        warnings = list(stats.warnings)
        if stats.created_products:
            warnings = [f"Created: {name}" for name in stats.created_products] + [""] + warnings
        total = job["total_products"] or 0
        processed = total if total > 0 else stats.products_created + stats.products_skipped
        self.store.update_import(
            self.import_id,
            status=COMPLETED,
            completed_at=utcnow(),
            products_count=stats.products_created,
            variants_count=stats.variants_created,
            variants_skipped_count=stats.variants_skipped,
            images_count=stats.images_created,
            collections_count=stats.collections_created,
            collections_total=stats.collections_total,
            skipped_count=stats.products_skipped,
            warnings="\n".join(warnings),
            processed_products=processed,
            progress_percent=100,
            current_step="Completed",
        )
        logger.info("Import %s complete: %s", self.import_id, stats.as_dict())

    def fail(self, message: str) -> None:
        self._require({PENDING, PROCESSING}, FAILED)
        self.store.update_import(
            self.import_id,
            status=FAILED,
            completed_at=utcnow(),
            error_messages=message,
            current_step="Failed",
        )
        logger.error("Import %s failed: %s", self.import_id, message)

    def fail_unless_finished(self, message: str) -> bool:
        """Fail the job unless it already reached a terminal state; returns whether it was failed."""
        status = self.job()["status"]
        if status in TERMINAL_STATUSES:
            logger.error("Import %s already %s, not failing it: %s", self.import_id, status, message)
            return False
        self.fail(message)
        return True

    def mark_stale(self, timeout_minutes: int = 30, *, now: datetime | None = None) -> bool:
        if not is_stale(self.job(), timeout_minutes, now=now):
            return False
        self.fail(STALE_MESSAGE)
        return True


def progress_percent(processed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(processed / total * 100)


def is_stale(job: dict[str, Any], timeout_minutes: int = 30, *, now: datetime | None = None) -> bool:
    if job["status"] != PROCESSING or not job["started_at"]:
        return False
    last_progress = job["last_progress_at"] or job["started_at"]
    return seconds_between(last_progress, now or utcnow()) > timeout_minutes * 60


def duration(job: dict[str, Any]) -> float | None:
    if not job["started_at"] or not job["completed_at"]:
        return None
    return round(seconds_between(job["started_at"], job["completed_at"]), 2)


def eta_seconds(job: dict[str, Any], *, now: datetime | None = None) -> int | None:
    processed = job["processed_products"] or 0
    total = job["total_products"] or 0
    if not job["started_at"] or processed <= 0 or total <= 0:
        return None
    elapsed = seconds_between(job["started_at"], now or utcnow())
    if elapsed <= 0:
        return None
    remaining = total - processed
    if remaining <= 0:
        return 0
    return round(remaining / (processed / elapsed))


def serialize_job(job: dict[str, Any], *, full: bool = False) -> dict[str, Any]:
    data = {
        "id": job["id"],
        "status": job["status"],
        "filename": job["filename"],
        "inventory_filename": job["inventory_filename"],
        "products_count": job["products_count"],
        "variants_count": job["variants_count"],
        "variants_skipped_count": job["variants_skipped_count"],
        "images_count": job["images_count"],
        "collections_count": job["collections_count"],
        "skipped_count": job["skipped_count"],
        "progress": {
            "processed": job["processed_products"],
            "total": job["total_products"],
            "percent": job["progress_percent"],
            "step": job["current_step"],
        },
        "started_at": job["started_at"],
        "completed_at": job["completed_at"],
        "duration": duration(job),
        "eta_seconds": eta_seconds(job) if job["status"] == PROCESSING else None,
        "created_at": job["created_at"],
    }
    if full:
        data["warnings"] = job["warnings"].split("\n") if job["warnings"] else []
        data["error_messages"] = job["error_messages"]
    return data
