"""Bounded-concurrency image download and storage."""

from __future__ import annotations

import asyncio
import functools
import io
import logging
import posixpath
from typing import Any, Iterable, Sequence
from urllib.parse import unquote, urlparse

import httpx

from catalog.db.store import CatalogStore
from catalog.importer.models import ProductRow, SharedStats
from catalog.importer.settings import ImportSettings

logger = logging.getLogger(__name__)


def should_skip_image(url: str, patterns: Iterable[str]) -> bool:
    if not url:
        return True
    lowered = url.lower()
    return any(pattern.lower() in lowered for pattern in patterns)


def image_urls(rows: Sequence[ProductRow], patterns: Iterable[str]) -> list[str]:
    """Unique image URLs in row order, without blanks or known logos/placeholders."""
    patterns = tuple(patterns)
    urls: list[str] = []
    for row in rows:
        url = row.image_src
        if url in urls or should_skip_image(url, patterns):
            continue
        urls.append(url)
    return urls


def filename_from_url(url: str) -> str:
    name = posixpath.basename(unquote(urlparse(url).path))
    if not name:
        raise ValueError(f"Cannot derive a filename from {url}")
    return name


def _basename(url: str) -> str:
    return posixpath.basename(urlparse(url).path) or url


class ImageIngestionPool:
    """Downloads images in fixed-size batches and records them against a product.

    A batch fully drains before the next one starts and a semaphore caps
    in-flight downloads for the whole pool, so sharing one pool across a run
    keeps the ceiling run-wide.
    """

    def __init__(
        self,
        store: CatalogStore,
        blob_store,
        *,
        settings: ImportSettings | None = None,
        session: httpx.AsyncClient | None = None,
    ) -> None:
        self.store = store
        self.blob_store = blob_store
        self.settings = settings or ImportSettings()
        self._session = session or httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.read_timeout, connect=self.settings.connect_timeout),
            follow_redirects=True,
            headers={"User-Agent": self.settings.user_agent},
        )
        self._semaphore = asyncio.Semaphore(self.settings.max_concurrent_downloads)

    async def close(self) -> None:
        await self._session.aclose()

    async def _in_executor(self, func, *args):
        # blocking store and blob calls run in the default executor
        return await asyncio.get_running_loop().run_in_executor(None, func, *args)

    async def ingest(self, product: dict[str, Any], urls: Sequence[str], shared: SharedStats) -> None:
        if not urls:
            return
        async with shared.lock:
            shared.position = await self._in_executor(self.store.image_count, product["id"])
        size = self.settings.batch_size
        for start in range(0, len(urls), size):
            batch = urls[start:start + size]
            await asyncio.gather(*(self._ingest_one(product, url, shared) for url in batch))

    async def _ingest_one(self, product: dict[str, Any], url: str, shared: SharedStats) -> None:
        try:
            async with self._semaphore:
                response = await self._session.get(url)
                response.raise_for_status()
            filename = filename_from_url(url)
            content_type = response.headers.get("content-type", "application/octet-stream").split(";")[0].strip()
            key = await self._in_executor(self.blob_store.store, io.BytesIO(response.content), filename, content_type)
            async with shared.lock:
                primary = await self._in_executor(self.store.image_count, product["id"]) == 0
                await self._in_executor(
                    functools.partial(
                        self.store.create_image,
                        product["id"],
                        s3_key=key,
                        alt_text=product["name"],
                        position=shared.next_position(),
                        primary=primary,
                    )
                )
                shared.stats.images_created += 1
            logger.info("Downloaded image: %s", filename)
        except Exception as exc:  # any failure stays local to this image
            logger.warning("Failed to download image %s: %s", url, exc)
            async with shared.lock:
                shared.stats.warnings.append(f"Failed to download image: {_basename(url)}")
