"""Bulk catalog import from product CSV exports."""

from __future__ import annotations

from catalog.importer.models import ImportStats, InventoryRow, ProductRow
from catalog.importer.pipeline import CatalogImporter
from catalog.importer.settings import ImportSettings

__all__ = ["CatalogImporter", "ImportSettings", "ImportStats", "InventoryRow", "ProductRow"]
