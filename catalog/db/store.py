"""Persistence collaborator used by the import pipeline."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from catalog.db.schema import (
    collections,
    imports,
    product_collections,
    product_images,
    product_variants,
    products,
)
from catalog.utils.dates import utcnow

logger = logging.getLogger(__name__)

DEFAULT_VARIANT_LEVELS = {"none", "product"}


class CatalogStore:
    """Find/create/update access to products, variants, collections, images and import jobs.

    Every call runs in its own transaction; the pipeline treats the store as a
    key-value-ish collaborator and never holds a transaction open across calls.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # Products

    def find_product(self, slug: str, *, archived: bool = False) -> dict[str, Any] | None:
        with self.engine.connect() as conn:
            row = conn.execute(
                select(products).where(products.c.slug == slug, products.c.archived.is_(archived))
            ).mappings().first()
        return dict(row) if row else None

    def get_product(self, product_id: int) -> dict[str, Any] | None:
        with self.engine.connect() as conn:
            row = conn.execute(select(products).where(products.c.id == product_id)).mappings().first()
        return dict(row) if row else None

    def create_product(self, values: dict[str, Any]) -> dict[str, Any]:
        now = utcnow()
        with self.engine.begin() as conn:
            result = conn.execute(insert(products).values(**values, created_at=now, updated_at=now))
            product_id = result.inserted_primary_key[0]
        product = self.get_product(product_id)
        if product["inventory_level"] in DEFAULT_VARIANT_LEVELS:
            self._ensure_default_variant(product)
        return product

    def update_product(self, product_id: int, **values: Any) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                update(products).where(products.c.id == product_id).values(**values, updated_at=utcnow())
            )

    def _ensure_default_variant(self, product: dict[str, Any]) -> None:
        if self.variant_count(product["id"], include_default=True):
            return
        logger.info("Auto-creating default variant for %s", product["name"])
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    insert(product_variants).values(
                        product_id=product["id"],
                        sku=f"{product['sku_prefix']}-DEFAULT",
                        size="Default",
                        variant_key="default",
                        variant_name="Default",
                        price_cents=product["base_price_cents"] or 0,
                        weight_oz=product["weight_oz"],
                        stock_quantity=0,
                        available=True,
                        is_default=True,
                        created_at=utcnow(),
                    )
                )
        except IntegrityError as exc:
            logger.error("Failed to create default variant for %s: %s", product["name"], exc.orig)

    def delete_default_variants(self, product_id: int) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                delete(product_variants).where(
                    product_variants.c.product_id == product_id,
                    product_variants.c.is_default.is_(True),
                )
            )
        return result.rowcount

    # Variants

    def existing_skus(self, skus: Iterable[str]) -> set[str]:
        wanted = {sku for sku in skus if sku}
        if not wanted:
            return set()
        with self.engine.connect() as conn:
            rows = conn.execute(select(product_variants.c.sku).where(product_variants.c.sku.in_(wanted)))
            return {row[0] for row in rows}

    def create_variant(self, product_id: int, values: dict[str, Any]) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                insert(product_variants).values(product_id=product_id, created_at=utcnow(), **values)
            )
        return int(result.inserted_primary_key[0])

    def find_variant_by_sku(self, sku: str) -> dict[str, Any] | None:
        with self.engine.connect() as conn:
            row = conn.execute(
                select(product_variants).where(product_variants.c.sku == sku)
            ).mappings().first()
        return dict(row) if row else None

    def update_variant(self, variant_id: int, **values: Any) -> None:
        with self.engine.begin() as conn:
            conn.execute(update(product_variants).where(product_variants.c.id == variant_id).values(**values))

    def list_variants(self, product_id: int) -> list[dict[str, Any]]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(product_variants)
                .where(product_variants.c.product_id == product_id)
                .order_by(product_variants.c.id)
            ).mappings()
            return [dict(row) for row in rows]

    def variant_count(self, product_id: int, *, include_default: bool = False) -> int:
        query = select(func.count()).select_from(product_variants).where(
            product_variants.c.product_id == product_id
        )
        if not include_default:
            query = query.where(product_variants.c.is_default.is_(False))
        with self.engine.connect() as conn:
            return int(conn.execute(query).scalar_one())

    def min_variant_price(self, product_id: int) -> int | None:
        with self.engine.connect() as conn:
            return conn.execute(
                select(func.min(product_variants.c.price_cents)).where(
                    product_variants.c.product_id == product_id
                )
            ).scalar_one_or_none()

    # Collections

    def find_collection(self, slug: str) -> dict[str, Any] | None:
        with self.engine.connect() as conn:
            row = conn.execute(select(collections).where(collections.c.slug == slug)).mappings().first()
        return dict(row) if row else None

    def create_collection(self, name: str, slug: str, *, published: bool = True) -> dict[str, Any]:
        with self.engine.begin() as conn:
            result = conn.execute(
                insert(collections).values(name=name, slug=slug, published=published, created_at=utcnow())
            )
            collection_id = result.inserted_primary_key[0]
        return {"id": collection_id, "name": name, "slug": slug, "published": published}

    def link_collection(self, product_id: int, collection_id: int) -> None:
        with self.engine.begin() as conn:
            conn.execute(insert(product_collections).values(product_id=product_id, collection_id=collection_id))

    def clear_collections(self, product_id: int) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(product_collections).where(product_collections.c.product_id == product_id))

    def collection_ids_for(self, product_id: int) -> list[int]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(product_collections.c.collection_id).where(product_collections.c.product_id == product_id)
            )
            return [row[0] for row in rows]

    def collection_count(self) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(collections)).scalar_one())

    # Images

    def image_count(self, product_id: int) -> int:
        with self.engine.connect() as conn:
            return int(
                conn.execute(
                    select(func.count()).select_from(product_images).where(product_images.c.product_id == product_id)
                ).scalar_one()
            )

    def create_image(self, product_id: int, *, s3_key: str, alt_text: str, position: int, primary: bool) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                insert(product_images).values(
                    product_id=product_id,
                    s3_key=s3_key,
                    alt_text=alt_text,
                    position=position,
                    primary=primary,
                    created_at=utcnow(),
                )
            )
        return int(result.inserted_primary_key[0])

    def list_images(self, product_id: int) -> list[dict[str, Any]]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(product_images)
                .where(product_images.c.product_id == product_id)
                .order_by(product_images.c.position)
            ).mappings()
            return [dict(row) for row in rows]

    # Import jobs

    def create_import(self, *, filename: str | None, inventory_filename: str | None = None) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(
                insert(imports).values(
                    status="pending",
                    filename=filename,
                    inventory_filename=inventory_filename,
                    created_at=utcnow(),
                )
            )
        return int(result.inserted_primary_key[0])

    def get_import(self, import_id: int) -> dict[str, Any] | None:
        with self.engine.connect() as conn:
            row = conn.execute(select(imports).where(imports.c.id == import_id)).mappings().first()
        return dict(row) if row else None

    def list_imports(self, limit: int = 50) -> list[dict[str, Any]]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(imports).order_by(imports.c.created_at.desc(), imports.c.id.desc()).limit(limit)
            ).mappings()
            return [dict(row) for row in rows]

    def update_import(self, import_id: int, **values: Any) -> None:
        with self.engine.begin() as conn:
            conn.execute(update(imports).where(imports.c.id == import_id).values(**values))
