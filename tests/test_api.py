import pytest
from fastapi.testclient import TestClient

from catalog.api import main
from catalog.importer.progress import ImportTracker
from catalog.importer.settings import ImportSettings


@pytest.fixture()
def client(store, tmp_path, monkeypatch):
    queued = []
    monkeypatch.setattr(main, "enqueue_import", lambda *args: queued.append(args))
    main.app.dependency_overrides[main.get_store] = lambda: store
    main.app.dependency_overrides[main.get_settings] = lambda: ImportSettings(upload_dir=tmp_path / "uploads")
    with TestClient(main.app) as client:
        client.queued = queued
        yield client
    main.app.dependency_overrides.clear()


def test_create_import_saves_files_and_enqueues(client, store):
    response = client.post(
        "/imports",
        files={
            "products_file": ("products.csv", b"Handle,Title\n", "text/csv"),
            "inventory_file": ("inventory.csv", b"SKU,Quantity\n", "text/csv"),
        },
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["filename"] == "products.csv"
    assert data["inventory_filename"] == "inventory.csv"
    [(import_id, products_path, inventory_path)] = client.queued
    assert import_id == data["id"]
    assert products_path.endswith("products.csv")
    assert inventory_path.endswith("inventory.csv")


def test_create_import_requires_products_file(client):
    response = client.post("/imports", files={"inventory_file": ("inventory.csv", b"SKU,Quantity\n", "text/csv")})
    assert response.status_code == 422
    assert client.queued == []


def test_list_and_show_imports(client, store):
    import_id = store.create_import(filename="products.csv")
    tracker = ImportTracker(store, import_id)
    tracker.mark_processing()
    tracker.fail("boom")

    listing = client.get("/imports").json()["data"]
    assert [job["id"] for job in listing] == [import_id]

    detail = client.get(f"/imports/{import_id}").json()["data"]
    assert detail["status"] == "failed"
    assert detail["error_messages"] == "boom"
    assert detail["warnings"] == []


def test_show_missing_import(client):
    assert client.get("/imports/999").status_code == 404
