"""Tag-derived collections."""

from __future__ import annotations

import logging
from typing import Any

from catalog.db.store import CatalogStore
from catalog.importer.models import ImportStats
from catalog.importer.rows import slugify

logger = logging.getLogger(__name__)


def split_tags(tags: str) -> list[str]:
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


class CollectionTagger:
    """Resolves tag strings to collections, memoized in a per-run cache keyed by slug."""

    def __init__(self, store: CatalogStore, cache: dict[str, dict[str, Any]]) -> None:
        self.store = store
        self.cache = cache

    def resolve(self, name: str, stats: ImportStats) -> dict[str, Any] | None:
        slug = slugify(name)
        if not slug:
            logger.warning("Tag %r has no usable slug", name)
            stats.warnings.append(f"Skipped tag without a usable slug: {name}")
            return None
        collection = self.cache.get(slug)
        if collection is None:
            collection = self.store.find_collection(slug)
            if collection is None:
                collection = self.store.create_collection(name, slug, published=True)
                stats.collections_created += 1
                logger.info("Created collection %s", slug)
            self.cache[slug] = collection
        return collection

    def attach(self, product: dict[str, Any], tags: str, stats: ImportStats) -> list[int]:
        linked: set[int] = set(self.store.collection_ids_for(product["id"]))
        attached = []
        for name in split_tags(tags):
            collection = self.resolve(name, stats)
            if collection is None or collection["id"] in linked:
                continue
            self.store.link_collection(product["id"], collection["id"])
            linked.add(collection["id"])
            attached.append(collection["id"])
        return attached
