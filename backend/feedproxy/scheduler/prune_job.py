"""
Background retention queue. Lookups submit their feed ID after responding;
workers prune in their own session. At most one prune per feed is in flight,
and at most max_pending overall; extra submissions are dropped (the next
lookup of that feed submits again).
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from sqlalchemy.orm import Session

from feedproxy.services.feed.retention import prune_feed

logger = logging.getLogger(__name__)


class PruneQueue:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        image_directory: str | Path,
        *,
        max_workers: int = 2,
        max_pending: int = 32,
    ) -> None:
        self._session_factory = session_factory
        self._image_directory = image_directory
        self._max_pending = max_pending
        self._in_flight: dict[str, Future] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="feed_prune")

    def submit(self, feed_id: str) -> Future | None:
        """
        Schedule a prune for feed_id. Returns the job's future (the existing one
        if a prune for this feed is already queued or running), or None when the
        queue is full.
        """
        with self._lock:
            existing = self._in_flight.get(feed_id)
            if existing is not None:
                return existing
            if len(self._in_flight) >= self._max_pending:
                logger.warning("Prune queue full (%s jobs); skipping feed %s", self._max_pending, feed_id)
                return None
            future = self._executor.submit(self._run, feed_id)
            self._in_flight[feed_id] = future
        future.add_done_callback(lambda _f: self._done(feed_id))
        return future

    def pending(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _done(self, feed_id: str) -> None:
        with self._lock:
            self._in_flight.pop(feed_id, None)

    def _run(self, feed_id: str) -> list[str]:
        """Prune one feed in its own session. Never raises."""
        db = self._session_factory()
        try:
            return prune_feed(db, feed_id, self._image_directory)
        except Exception as e:
            logger.exception("Prune of feed %s failed: %s", feed_id, e)
            return []
        finally:
            db.close()
