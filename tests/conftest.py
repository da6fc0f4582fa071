import pytest

from catalog.db.migrate import run_migrations
from catalog.db.session import create_engine_from_env
from catalog.db.store import CatalogStore
from tests.factories import FakeBlobStore


@pytest.fixture()
def engine():
    engine = create_engine_from_env("sqlite:///:memory:")
    run_migrations(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine):
    return CatalogStore(engine)


@pytest.fixture()
def blob_store():
    return FakeBlobStore()


@pytest.fixture()
def product(store):
    product = store.create_product(
        {
            "name": "Hafaloha Tee",
            "slug": "hafaloha-tee",
            "base_price_cents": 2500,
            "sku_prefix": "TEE",
            "weight_oz": 5.0,
            "published": True,
            "inventory_level": "none",
        }
    )
    store.delete_default_variants(product["id"])
    return product
