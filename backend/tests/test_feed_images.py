"""Image cache: download once, atomic writes, unknown posts."""
import httpx
import pytest

from feedproxy.core.errors import (
    ImageDownloadError,
    ImageResolutionFailedError,
    InvalidPostIdError,
    PostNotFoundError,
)
from feedproxy.services.feed import store
from feedproxy.services.feed.images import ImageCache

from tests.factories import BASE_TIME, IMAGE_BASE_URL, feed_record, post_id


@pytest.fixture
def cache(image_dir, upstream):
    return ImageCache(image_dir, IMAGE_BASE_URL + "/", transport=upstream.transport())


def test_ensure_local_downloads_once(db, cache, image_dir, upstream):
    store.upsert(db, feed_record("abc", 1), now=BASE_TIME)
    pid = post_id("abc", 1)

    first = cache.ensure_local(db, pid)
    second = cache.ensure_local(db, pid)

    assert first == second == f"{IMAGE_BASE_URL}/{pid}.webp"
    assert len(upstream.calls("cdn.test")) == 1
    assert (image_dir / f"{pid}.webp").read_bytes() == b"image:/abc-p1.jpg"


def test_existing_file_needs_no_lookup_or_network(db, cache, image_dir, upstream):
    (image_dir / "ghost.webp").write_bytes(b"old")

    assert cache.ensure_local(db, "ghost") == f"{IMAGE_BASE_URL}/ghost.webp"
    assert upstream.requests == []


def test_unknown_post_raises_post_not_found(db, cache, upstream):
    with pytest.raises(PostNotFoundError) as exc_info:
        cache.ensure_local(db, "ghost")
    assert isinstance(exc_info.value, ImageResolutionFailedError)
    assert upstream.requests == []


def test_failed_download_leaves_no_file(db, cache, image_dir, upstream):
    store.upsert(db, feed_record("abc", 1), now=BASE_TIME)
    upstream.image_status = 502

    with pytest.raises(ImageDownloadError):
        cache.ensure_local(db, post_id("abc", 1))

    assert list(image_dir.iterdir()) == []


def test_interrupted_download_leaves_no_file(db, image_dir):
    store.upsert(db, feed_record("abc", 1), now=BASE_TIME)

    def handler(request):
        raise httpx.ReadError("connection reset", request=request)

    cache = ImageCache(image_dir, IMAGE_BASE_URL, transport=httpx.MockTransport(handler))
    with pytest.raises(ImageDownloadError):
        cache.ensure_local(db, post_id("abc", 1))
    assert list(image_dir.iterdir()) == []


def test_retry_after_failed_download_fetches_again(db, cache, image_dir, upstream):
    store.upsert(db, feed_record("abc", 1), now=BASE_TIME)
    pid = post_id("abc", 1)
    upstream.image_status = 500
    with pytest.raises(ImageDownloadError):
        cache.ensure_local(db, pid)

    upstream.image_status = 200
    assert cache.ensure_local(db, pid) == f"{IMAGE_BASE_URL}/{pid}.webp"
    assert (image_dir / f"{pid}.webp").exists()
    assert len(upstream.calls("cdn.test")) == 2


@pytest.mark.parametrize("bad_id", ["../evil", "nested/evil", "", ".", ".."])
def test_post_id_outside_image_directory_is_rejected(db, cache, image_dir, upstream, bad_id):
    store.upsert(db, feed_record("abc", 1), now=BASE_TIME)

    with pytest.raises(InvalidPostIdError) as exc_info:
        cache.ensure_local(db, bad_id)

    assert isinstance(exc_info.value, ImageResolutionFailedError)
    assert upstream.requests == []
    assert list(image_dir.iterdir()) == []
    assert not (image_dir.parent / "evil.webp").exists()
