"""
Feed lookup: whitelist -> fresh cache or upstream fetch + store -> local images
-> response, then a background prune of the feed.
"""
import logging
from concurrent.futures import Future

from sqlalchemy.orm import Session

from feedproxy.core.errors import (
    FeedFetchError,
    FeedNotExistsError,
    ImageResolutionFailedError,
    NotWhitelistedError,
    PersistFailedError,
)
from feedproxy.scheduler.prune_job import PruneQueue
from feedproxy.services.feed import store
from feedproxy.services.feed.client import FeedClient
from feedproxy.services.feed.config import FeedProxyConfig
from feedproxy.services.feed.images import ImageCache
from feedproxy.services.feed.types import FeedRecord, FeedResponse, to_response

logger = logging.getLogger(__name__)


class FeedLookup:
    """Result of one lookup. prune is the background retention job (None if not scheduled)."""

    __slots__ = ("feed", "prune")

    def __init__(self, feed: FeedResponse, prune: Future | None = None):
        self.feed = feed
        self.prune = prune


class FeedOrchestrator:
    def __init__(
        self,
        config: FeedProxyConfig,
        *,
        client: FeedClient | None = None,
        images: ImageCache | None = None,
        prune_queue: PruneQueue | None = None,
    ) -> None:
        self.config = config
        self.client = client or FeedClient(config.api_base_url, timeout=config.timeout)
        self.images = images or ImageCache(config.image_directory, config.image_url, timeout=config.timeout)
        self.prune_queue = prune_queue

    def get_feed(self, db: Session, feed_id: str) -> FeedResponse:
        return self.lookup(db, feed_id).feed

    def lookup(self, db: Session, feed_id: str) -> FeedLookup:
        if not self.config.is_allowed(feed_id):
            raise NotWhitelistedError(feed_id)

        record = self._fresh_or_fetch(db, feed_id)
        feed = self._with_local_images(db, record)

        prune = self.prune_queue.submit(feed_id) if self.prune_queue is not None else None
        return FeedLookup(feed, prune)

    def _fresh_or_fetch(self, db: Session, feed_id: str) -> FeedRecord:
        record = store.lookup_fresh(db, feed_id)
        if record is not None:
            logger.info("Found feed %s in local database", feed_id)
            return record

        logger.info("Feed %s not in local database or stale; fetching", feed_id)
        try:
            fetched = self.client.fetch(feed_id)
        except (FeedNotExistsError, FeedFetchError):
            raise
        except Exception as e:
            raise FeedFetchError(f"failed to get feed {feed_id}: {e}") from e

        store.upsert(db, fetched)
        record = store.lookup_fresh(db, feed_id)
        if record is None:
            raise PersistFailedError(f"feed {feed_id} missing after store")
        return record

    def _with_local_images(self, db: Session, record: FeedRecord) -> FeedResponse:
        by_id = {p.post_id: p for p in record.posts}
        posts = [by_id[pid] for pid in store.recent_post_ids(db, record.feed_id) if pid in by_id]
        local_urls: dict[str, str] = {}
        for post in posts:
            try:
                local_urls[post.post_id] = self.images.ensure_local(db, post.post_id)
            except ImageResolutionFailedError:
                raise
            except Exception as e:
                raise ImageResolutionFailedError(f"failed to populate image of post {post.post_id}: {e}") from e
        return to_response(record, posts, local_urls)
