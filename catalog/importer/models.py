"""Import data models."""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class ProductRow:
    handle: str
    title: str
    body_html: str
    price: str
    weight: str
    vendor: str
    type: str
    status: str
    variant_sku: str
    option1: str
    option2: str
    option3: str
    compare_at_price: str
    image_src: str
    tags: str

    @classmethod
    def from_csv(cls, record: Mapping[str, str | None]) -> "ProductRow":
        def value(column: str) -> str:
            return (record.get(column) or "").strip()

        return cls(
            handle=value("Handle"),
            title=value("Title"),
            body_html=value("Body (HTML)"),
            price=value("Variant Price"),
            weight=value("Variant Grams"),
            vendor=value("Vendor"),
            type=value("Type"),
            status=value("Status"),
            variant_sku=value("Variant SKU"),
            option1=value("Option1 Value"),
            option2=value("Option2 Value"),
            option3=value("Option3 Value"),
            compare_at_price=value("Variant Compare At Price"),
            image_src=value("Image Src"),
            tags=value("Tags"),
        )


@dataclass(slots=True, frozen=True)
class InventoryRow:
    sku: str
    quantity: int


@dataclass(slots=True)
class ImportStats:
    products_created: int = 0
    variants_created: int = 0
    variants_skipped: int = 0
    images_created: int = 0
    collections_created: int = 0
    products_skipped: int = 0
    collections_total: int = 0
    warnings: list[str] = field(default_factory=list)
    created_products: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class SharedStats:
    """Stats plus the image position counter, guarded by one lock.

    Concurrent image tasks must hold ``lock`` for every mutation of ``stats``
    or ``position``.
    """

    stats: ImportStats
    position: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def next_position(self) -> int:
        position = self.position
        self.position += 1
        return position
