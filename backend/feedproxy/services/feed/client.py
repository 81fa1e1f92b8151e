"""Upstream feed API client: one GET per feed, mapped into FeedRecord. No retry."""
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from feedproxy.core.constants import UPSTREAM_TIMESTAMP_FORMAT
from feedproxy.core.errors import FeedFetchError, FeedNotExistsError
from feedproxy.services.feed.types import FeedRecord, PostRecord

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an upstream post timestamp ("2025-01-29T18:34:09+0000") into UTC."""
    return datetime.strptime(value, UPSTREAM_TIMESTAMP_FORMAT).astimezone(timezone.utc)


def _small_size(post: dict[str, Any]) -> dict[str, Any]:
    # Only the small variant is cached; medium and large are ignored
    sizes = post.get("sizes") or {}
    return sizes.get("small") or {}


def parse_feed(feed_id: str, payload: dict[str, Any]) -> FeedRecord:
    """
    Map an upstream feed payload into a FeedRecord.
    Raises FeedFetchError if any post timestamp cannot be parsed; no partial feed is returned.
    """
    posts: list[PostRecord] = []
    for post in payload.get("posts") or []:
        raw_ts = post.get("timestamp") or ""
        try:
            ts = parse_timestamp(raw_ts)
        except (TypeError, ValueError) as e:
            raise FeedFetchError(f"error parsing timestamp {raw_ts!r} of feed {feed_id}: {e}") from e
        small = _small_size(post)
        posts.append(
            PostRecord(
                post_id=str(post.get("id") or ""),
                feed_id=feed_id,
                permalink=post.get("permalink") or "",
                timestamp=ts,
                media_type=post.get("mediaType") or "",
                media_small_height=int(small.get("height") or 0),
                media_small_width=int(small.get("width") or 0),
                caption=post.get("caption") or "",
                pruned_caption=post.get("prunedCaption") or "",
                external_media_url=small.get("mediaUrl") or "",
            )
        )
    return FeedRecord(
        feed_id=feed_id,
        username=payload.get("username") or "",
        biography=payload.get("biography") or "",
        profile_picture_url=payload.get("profilePictureUrl") or "",
        website=payload.get("website") or "",
        followers_count=int(payload.get("followersCount") or 0),
        follows_count=int(payload.get("followsCount") or 0),
        posts=posts,
    )


class FeedClient:
    """Fetches one feed from the upstream API (base_url + feed_id)."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._timeout = timeout
        self._transport = transport

    def _get(self, url: str) -> httpx.Response:
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as c:
                return c.get(url)
        except httpx.HTTPError as e:
            raise FeedFetchError(f"error fetching feed from {url}: {e}") from e

    def fetch(self, feed_id: str) -> FeedRecord:
        """
        Fetch and map the feed. 404 raises FeedNotExistsError; any other
        non-200 status, transport error or bad payload raises FeedFetchError.
        """
        url = self.base_url + feed_id
        r = self._get(url)
        if r.status_code == 404:
            raise FeedNotExistsError(feed_id)
        if r.status_code != 200:
            raise FeedFetchError(f"error fetching feed {feed_id}: status code {r.status_code}")
        try:
            payload = r.json()
        except ValueError as e:
            raise FeedFetchError(f"error parsing feed {feed_id}: {e}") from e
        if not isinstance(payload, dict):
            raise FeedFetchError(f"error parsing feed {feed_id}: expected an object")
        try:
            record = parse_feed(feed_id, payload)
        except (TypeError, ValueError, AttributeError) as e:
            raise FeedFetchError(f"error parsing feed {feed_id}: {e}") from e
        logger.info("Fetched feed %s from upstream (%s posts)", feed_id, len(record.posts))
        return record
