"""Upstream client: payload mapping and error classification."""
from datetime import datetime, timezone

import httpx
import pytest

from feedproxy.core.errors import FeedFetchError, FeedNotExistsError
from feedproxy.services.feed.client import FeedClient, parse_timestamp

from tests.factories import FEED_BASE_URL, post_id, post_time, upstream_feed


def _client(upstream) -> FeedClient:
    return FeedClient(FEED_BASE_URL, transport=upstream.transport())


def test_fetch_maps_header_and_small_size(upstream):
    upstream.feeds["123"] = upstream_feed("123", 2, username="test account name")

    record = _client(upstream).fetch("123")

    assert str(upstream.requests[0].url) == "https://feeds.test/123"
    assert record.feed_id == "123"
    assert record.username == "test account name"
    assert record.follows_count == 80
    assert len(record.posts) == 2
    post = record.posts[1]
    assert post.post_id == post_id("123", 2)
    assert post.feed_id == "123"
    assert post.timestamp == post_time(2)
    assert post.external_media_url == "https://cdn.test/123-p2.jpg"
    assert (post.media_small_height, post.media_small_width) == (300, 240)
    assert post.pruned_caption == "caption 2"


def test_fetch_404_is_feed_not_exists(upstream):
    with pytest.raises(FeedNotExistsError) as exc_info:
        _client(upstream).fetch("unknown")
    assert not isinstance(exc_info.value, FeedFetchError)


def test_fetch_server_error_is_fetch_error(upstream):
    upstream.feed_status["abc"] = 503
    with pytest.raises(FeedFetchError):
        _client(upstream).fetch("abc")


def test_fetch_transport_error_is_fetch_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = FeedClient(FEED_BASE_URL, transport=httpx.MockTransport(handler))
    with pytest.raises(FeedFetchError):
        client.fetch("abc")


def test_fetch_invalid_json_is_fetch_error():
    client = FeedClient(
        FEED_BASE_URL,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>")),
    )
    with pytest.raises(FeedFetchError):
        client.fetch("abc")


def test_one_bad_timestamp_aborts_whole_fetch(upstream):
    payload = upstream_feed("abc", 3)
    payload["posts"][1]["timestamp"] = "29.01.2025 18:34"
    upstream.feeds["abc"] = payload

    with pytest.raises(FeedFetchError):
        _client(upstream).fetch("abc")


def test_parse_timestamp_normalizes_offset_to_utc():
    parsed = parse_timestamp("2025-01-29T20:34:09+0200")
    assert parsed == datetime(2025, 1, 29, 18, 34, 9, tzinfo=timezone.utc)
    assert parsed.utcoffset().total_seconds() == 0
