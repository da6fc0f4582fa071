"""Catalog and import-job tables."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("slug", String(255), nullable=False, unique=True),
    Column("description", Text),
    Column("base_price_cents", Integer, nullable=False, default=0),
    Column("sku_prefix", String(64)),
    Column("weight_oz", Float),
    Column("vendor", Text),
    Column("product_type", Text),
    Column("published", Boolean, nullable=False, default=False),
    Column("featured", Boolean, nullable=False, default=False),
    Column("archived", Boolean, nullable=False, default=False),
    Column("inventory_level", String(16), nullable=False, default="none"),
    Column("product_stock_quantity", Integer, default=0),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

product_variants = Table(
    "product_variants",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
    Column("sku", String(255), nullable=False, unique=True),
    Column("size", Text),
    Column("color", Text),
    Column("material", Text),
    Column("variant_key", Text),
    Column("variant_name", Text),
    Column("price_cents", Integer, nullable=False, default=0),
    Column("compare_at_price_cents", Integer),
    Column("cost_cents", Integer, default=0),
    Column("stock_quantity", Integer, nullable=False, default=0),
    Column("weight_oz", Float),
    Column("available", Boolean, nullable=False, default=True),
    Column("is_default", Boolean, nullable=False, default=False),
    Column("created_at", DateTime),
)

collections = Table(
    "collections",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("slug", String(255), nullable=False, unique=True),
    Column("published", Boolean, nullable=False, default=True),
    Column("created_at", DateTime),
)

product_collections = Table(
    "product_collections",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
    Column("collection_id", Integer, ForeignKey("collections.id", ondelete="CASCADE"), nullable=False),
    UniqueConstraint("product_id", "collection_id", name="uq_product_collection"),
)

product_images = Table(
    "product_images",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
    Column("s3_key", Text, nullable=False),
    Column("alt_text", Text),
    Column("position", Integer, nullable=False, default=0),
    Column("primary", Boolean, nullable=False, default=False),
    Column("created_at", DateTime),
)

imports = Table(
    "imports",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("status", String(16), nullable=False, default="pending"),
    Column("filename", Text),
    Column("inventory_filename", Text),
    Column("products_count", Integer, default=0),
    Column("variants_count", Integer, default=0),
    Column("variants_skipped_count", Integer, default=0),
    Column("images_count", Integer, default=0),
    Column("collections_count", Integer, default=0),
    Column("collections_total", Integer, default=0),
    Column("skipped_count", Integer, default=0),
    Column("total_products", Integer, default=0),
    Column("processed_products", Integer, default=0),
    Column("progress_percent", Integer, default=0),
    Column("current_step", Text),
    Column("warnings", Text),
    Column("error_messages", Text),
    Column("created_at", DateTime),
    Column("started_at", DateTime),
    Column("completed_at", DateTime),
    Column("last_progress_at", DateTime),
)
