import asyncio
import threading

import httpx
import pytest
import respx

from catalog.importer.images import ImageIngestionPool, filename_from_url, image_urls, should_skip_image
from catalog.importer.models import ImportStats, SharedStats
from catalog.importer.settings import DEFAULT_SKIP_IMAGE_PATTERNS
from tests.factories import make_row

CDN = "https://cdn.example.com/files"


def test_image_urls_filters_and_dedupes():
    rows = [
        make_row(image=f"{CDN}/a.jpg"),
        make_row(image=""),
        make_row(image=f"{CDN}/a.jpg"),
        make_row(image=f"{CDN}/HafalohaLogo_small.png"),
        make_row(image=f"{CDN}/PLACEHOLDER.jpg"),
        make_row(image=f"{CDN}/b.jpg"),
    ]
    assert image_urls(rows, DEFAULT_SKIP_IMAGE_PATTERNS) == [f"{CDN}/a.jpg", f"{CDN}/b.jpg"]


def test_should_skip_image_is_case_insensitive():
    assert should_skip_image(f"{CDN}/christmaspua.PNG", DEFAULT_SKIP_IMAGE_PATTERNS)
    assert should_skip_image("", DEFAULT_SKIP_IMAGE_PATTERNS)
    assert not should_skip_image(f"{CDN}/shirt.png", DEFAULT_SKIP_IMAGE_PATTERNS)


def test_filename_from_url():
    assert filename_from_url(f"{CDN}/red%20mug.jpg?v=123") == "red mug.jpg"
    with pytest.raises(ValueError):
        filename_from_url("https://cdn.example.com/")


@pytest.mark.asyncio
async def test_batches_never_exceed_five_in_flight(store, product, blob_store):
    in_flight = 0
    peak = 0

    async def handler(request):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return httpx.Response(200, content=b"img", headers={"Content-Type": "image/jpeg; charset=binary"})

    urls = [f"{CDN}/photo-{i}.jpg" for i in range(12)]
    stats = ImportStats()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as session:
        pool = ImageIngestionPool(store, blob_store, session=session)
        await pool.ingest(product, urls, SharedStats(stats))

    assert peak == 5
    assert stats.images_created == 12
    images = store.list_images(product["id"])
    assert sorted(image["position"] for image in images) == list(range(12))
    assert sum(1 for image in images if image["primary"]) == 1
    assert all(image["alt_text"] == "Hafaloha Tee" for image in images)
    assert {content_type for _, content_type, _ in blob_store.stored} == {"image/jpeg"}


@pytest.mark.asyncio
async def test_failed_downloads_do_not_abort_the_batch(store, product, blob_store):
    stats = ImportStats()
    async with respx.mock(assert_all_called=True) as router:
        router.get(f"{CDN}/ok.png").mock(
            return_value=httpx.Response(200, content=b"png", headers={"Content-Type": "image/png"})
        )
        router.get(f"{CDN}/slow.png").mock(side_effect=httpx.ReadTimeout("timed out"))
        router.get(f"{CDN}/gone.png").mock(return_value=httpx.Response(404))
        async with httpx.AsyncClient() as session:
            pool = ImageIngestionPool(store, blob_store, session=session)
            await pool.ingest(product, [f"{CDN}/slow.png", f"{CDN}/gone.png", f"{CDN}/ok.png"], SharedStats(stats))

    assert stats.images_created == 1
    assert sorted(stats.warnings) == [
        "Failed to download image: gone.png",
        "Failed to download image: slow.png",
    ]
    [image] = store.list_images(product["id"])
    assert image["primary"] is True
    assert image["position"] == 0


@pytest.mark.asyncio
async def test_blob_store_failure_is_recorded(store, product):
    class BrokenBlobStore:
        def store(self, stream, filename, content_type):
            raise OSError("bucket unavailable")

    stats = ImportStats()
    async with respx.mock() as router:
        router.get(f"{CDN}/a.png").mock(return_value=httpx.Response(200, content=b"png"))
        async with httpx.AsyncClient() as session:
            pool = ImageIngestionPool(store, BrokenBlobStore(), session=session)
            await pool.ingest(product, [f"{CDN}/a.png"], SharedStats(stats))

    assert stats.images_created == 0
    assert stats.warnings == ["Failed to download image: a.png"]
    assert store.image_count(product["id"]) == 0


@pytest.mark.asyncio
async def test_positions_continue_after_existing_images(store, product, blob_store):
    store.create_image(product["id"], s3_key="products/old.png", alt_text="old", position=0, primary=True)
    stats = ImportStats()
    async with respx.mock() as router:
        router.get(f"{CDN}/new.png").mock(return_value=httpx.Response(200, content=b"png"))
        async with httpx.AsyncClient() as session:
            pool = ImageIngestionPool(store, blob_store, session=session)
            await pool.ingest(product, [f"{CDN}/new.png"], SharedStats(stats))

    images = store.list_images(product["id"])
    assert [(image["position"], image["primary"]) for image in images] == [(0, True), (1, False)]


@pytest.mark.asyncio
async def test_store_writes_run_off_the_event_loop(store, product, blob_store, monkeypatch):
    loop_thread = threading.get_ident()
    threads = []

    def recorded(method):
        def wrapper(*args, **kwargs):
            threads.append(threading.get_ident())
            return method(*args, **kwargs)
        return wrapper

    monkeypatch.setattr(store, "image_count", recorded(store.image_count))
    monkeypatch.setattr(store, "create_image", recorded(store.create_image))
    stats = ImportStats()
    async with respx.mock() as router:
        router.get(url__startswith=CDN).mock(return_value=httpx.Response(200, content=b"png"))
        async with httpx.AsyncClient() as session:
            pool = ImageIngestionPool(store, blob_store, session=session)
            await pool.ingest(product, [f"{CDN}/a.png", f"{CDN}/b.png"], SharedStats(stats))

    assert stats.images_created == 2
    assert threads
    assert loop_thread not in threads


@pytest.mark.asyncio
async def test_default_session_timeouts(store, blob_store):
    pool = ImageIngestionPool(store, blob_store)
    try:
        assert pool._session.timeout.connect == 10.0
        assert pool._session.timeout.read == 30.0
        assert pool._session.follow_redirects is True
    finally:
        await pool.close()
