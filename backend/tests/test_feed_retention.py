"""
Retention reproduces the stored behaviour: with more than 6 posts the 6 oldest
are kept and the newer ones deleted, unlike recent_post_ids which shows the
6 newest.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from feedproxy.services.feed import retention, store
from feedproxy.services.feed.retention import prune_feed, skip_oldest_retention_policy

from tests.factories import BASE_TIME, feed_record, post_id


def _ids(feed_id, numbers):
    return [post_id(feed_id, i) for i in numbers]


def _store_with_images(db, image_dir, feed_id, n):
    store.upsert(db, feed_record(feed_id, n), now=BASE_TIME)
    for i in range(1, n + 1):
        (image_dir / f"{post_id(feed_id, i)}.webp").write_bytes(b"img")


def test_policy_keeps_first_six_of_ascending_list():
    assert skip_oldest_retention_policy(list("abcdefghij")) == list("ghij")
    assert skip_oldest_retention_policy(list("abcdef")) == []
    assert skip_oldest_retention_policy([]) == []


def test_prune_deletes_newest_four_of_ten(db, image_dir):
    _store_with_images(db, image_dir, "abc", 10)

    deleted = prune_feed(db, "abc", image_dir)

    assert deleted == _ids("abc", range(7, 11))
    assert store.all_post_ids_ascending(db, "abc") == _ids("abc", range(1, 7))
    for i in range(7, 11):
        assert not (image_dir / f"{post_id('abc', i)}.webp").exists()
    for i in range(1, 7):
        assert (image_dir / f"{post_id('abc', i)}.webp").exists()


def test_prune_does_not_delete_oldest_four(db, image_dir):
    _store_with_images(db, image_dir, "abc", 10)

    prune_feed(db, "abc", image_dir)

    remaining = store.all_post_ids_ascending(db, "abc")
    assert set(_ids("abc", range(1, 5))) <= set(remaining)
    assert remaining != _ids("abc", range(5, 11))


def test_prune_six_or_fewer_is_noop(db, image_dir):
    _store_with_images(db, image_dir, "abc", 6)

    assert prune_feed(db, "abc", image_dir) == []
    assert len(store.all_post_ids_ascending(db, "abc")) == 6
    assert len(list(image_dir.iterdir())) == 6


def test_prune_only_touches_given_feed(db, image_dir):
    _store_with_images(db, image_dir, "abc", 8)
    _store_with_images(db, image_dir, "other", 8)

    prune_feed(db, "abc", image_dir)

    assert len(store.all_post_ids_ascending(db, "other")) == 8


def test_prune_twice_is_harmless(db, image_dir):
    _store_with_images(db, image_dir, "abc", 8)
    assert prune_feed(db, "abc", image_dir) == _ids("abc", [7, 8])
    assert prune_feed(db, "abc", image_dir) == []


def test_missing_image_files_are_skipped(db, image_dir):
    store.upsert(db, feed_record("abc", 8), now=BASE_TIME)
    assert prune_feed(db, "abc", image_dir) == _ids("abc", [7, 8])


def test_file_removal_error_is_logged_not_raised(db, image_dir, caplog):
    _store_with_images(db, image_dir, "abc", 8)
    blocked = image_dir / f"{post_id('abc', 7)}.webp"
    blocked.unlink()
    blocked.mkdir()

    with caplog.at_level(logging.WARNING, logger=retention.__name__):
        deleted = prune_feed(db, "abc", image_dir)

    assert deleted == _ids("abc", [7, 8])
    assert not (image_dir / f"{post_id('abc', 8)}.webp").exists()
    assert "Error removing file" in caplog.text


def test_database_error_is_logged_not_raised(db, image_dir, monkeypatch, caplog):
    _store_with_images(db, image_dir, "abc", 8)

    def failing_delete(session, post_ids):
        raise SQLAlchemyError("locked")

    monkeypatch.setattr(store, "delete_posts", failing_delete)
    with caplog.at_level(logging.WARNING, logger=retention.__name__):
        assert prune_feed(db, "abc", image_dir) == []

    assert "Error deleting posts for feed abc" in caplog.text
    assert len(list(image_dir.iterdir())) == 8


def test_prune_never_removes_files_outside_image_directory(db, image_dir, caplog):
    record = feed_record("abc", 7)
    record.posts[6].post_id = "../outside"
    store.upsert(db, record, now=BASE_TIME)
    outside = image_dir.parent / "outside.webp"
    outside.write_bytes(b"keep me")

    with caplog.at_level(logging.WARNING, logger=retention.__name__):
        deleted = prune_feed(db, "abc", image_dir)

    assert deleted == ["../outside"]
    assert store.all_post_ids_ascending(db, "abc") == _ids("abc", range(1, 7))
    assert outside.read_bytes() == b"keep me"
    assert "Skipping image removal" in caplog.text
