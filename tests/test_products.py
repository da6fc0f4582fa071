from catalog.importer.models import ImportStats
from catalog.importer.products import ProductResolver
from tests.factories import make_row


def _mug_rows():
    return [
        make_row(handle="mug-red", title="Red Mug", body="<p>Mug</p>", sku="MUG-R-S", price="12.00", grams="200", option1="S"),
        make_row(handle="mug-red", title="Red Mug", sku="MUG-R-L", price="14.00", grams="250", option1="L"),
    ]


def test_creates_new_product_and_drops_placeholder_variant(store):
    stats = ImportStats()
    product = ProductResolver(store).resolve(_mug_rows(), stats)

    assert product["slug"] == "mug-red"
    assert product["name"] == "Red Mug"
    assert product["base_price_cents"] == 1200
    assert product["weight_oz"] == 7.05
    assert product["sku_prefix"] == "MUG"
    assert product["inventory_level"] == "none"
    assert product["published"] is True
    assert store.variant_count(product["id"], include_default=True) == 0
    assert stats.products_created == 1
    assert stats.created_products == ["Red Mug"]


def test_skips_existing_active_product(store):
    ProductResolver(store).resolve(_mug_rows(), ImportStats())
    stats = ImportStats()

    assert ProductResolver(store).resolve(_mug_rows(), stats) is None
    assert stats.products_skipped == 1
    assert stats.products_created == 0
    assert stats.warnings == ["Product already exists: Red Mug"]


def test_skips_new_product_without_skus(store):
    stats = ImportStats()
    rows = [make_row(handle="poster", title="Poster", price="5.00")]

    assert ProductResolver(store).resolve(rows, stats) is None
    assert store.find_product("poster") is None
    assert stats.products_skipped == 1
    assert "missing SKUs" in stats.warnings[0]


def test_unarchives_archived_product(store):
    stats = ImportStats()
    resolver = ProductResolver(store)
    old = resolver.resolve(_mug_rows(), stats)
    collection = store.create_collection("Old", "old")
    store.link_collection(old["id"], collection["id"])
    store.update_product(old["id"], archived=True, published=False, name="Old Mug", base_price_cents=1)

    stats = ImportStats()
    product = resolver.resolve(_mug_rows(), stats)

    assert product["id"] == old["id"]
    assert product["archived"] is False
    assert product["published"] is True
    assert product["name"] == "Red Mug"
    assert product["base_price_cents"] == 1200
    assert store.collection_ids_for(product["id"]) == []
    assert stats.products_created == 1
    assert stats.created_products == ["Red Mug (unarchived)"]
    assert "Unarchived and updated: Red Mug" in stats.warnings


def test_archived_product_without_skus_stays_archived(store):
    resolver = ProductResolver(store)
    old = resolver.resolve(_mug_rows(), ImportStats())
    store.update_product(old["id"], archived=True)
    stats = ImportStats()

    rows = [make_row(handle="mug-red", title="Red Mug", price="12.00")]
    assert resolver.resolve(rows, stats) is None
    assert store.find_product("mug-red", archived=True) is not None
    assert stats.products_skipped == 1
    assert "missing SKUs" in stats.warnings[0]
