"""
Feed cache store: freshness-gated reads and all-or-nothing writes of a feed
and its posts. All functions take the caller's Session; upsert owns its commit.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from feedproxy.core.constants import FRESHNESS_WINDOW, RECENT_POST_LIMIT
from feedproxy.core.errors import PersistFailedError, PostNotFoundError
from feedproxy.models.feed import Feed
from feedproxy.models.post import Post
from feedproxy.services.feed.types import FeedRecord, PostRecord

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite returns naive datetimes; everything is written as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _post_record(row: Post) -> PostRecord:
    return PostRecord(
        post_id=row.post_id,
        feed_id=row.feed_id,
        permalink=row.permalink or "",
        timestamp=_as_utc(row.timestamp),
        media_type=row.media_type or "",
        media_small_height=row.media_small_height or 0,
        media_small_width=row.media_small_width or 0,
        caption=row.caption or "",
        pruned_caption=row.pruned_caption or "",
        external_media_url=row.media_small_url or "",
    )


def _feed_values(record: FeedRecord) -> dict:
    return {
        "feed_id": record.feed_id,
        "username": record.username,
        "biography": record.biography,
        "profile_picture_url": record.profile_picture_url,
        "website": record.website,
        "followers_count": record.followers_count,
        "follows_count": record.follows_count,
        "last_fetched": record.last_fetched,
    }


def _post_values(post: PostRecord) -> dict:
    return {
        "post_id": post.post_id,
        "feed_id": post.feed_id,
        "permalink": post.permalink,
        "timestamp": _as_utc(post.timestamp),
        "media_type": post.media_type,
        "media_small_url": post.external_media_url,
        "media_small_height": post.media_small_height,
        "media_small_width": post.media_small_width,
        "caption": post.caption,
        "pruned_caption": post.pruned_caption,
    }


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise PersistFailedError(f"upsert is not supported on {dialect}")
    return insert


def _upsert_stmt(insert, model, values: dict, key: str):
    """INSERT ... ON CONFLICT (key) DO UPDATE every other column from excluded."""
    stmt = insert(model).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[key],
        set_={name: stmt.excluded[name] for name in values if name != key},
    )


def lookup_fresh(db: Session, feed_id: str, now: datetime | None = None) -> FeedRecord | None:
    """
    Return the cached feed with all its posts (newest first) if fetched within
    FRESHNESS_WINDOW. Returns None on cache miss or stale row; callers refetch
    in both cases.
    """
    row = db.query(Feed).filter(Feed.feed_id == feed_id).first()
    if row is None:
        return None
    now = now or _utc_now()
    last_fetched = _as_utc(row.last_fetched)
    if last_fetched is None or now - last_fetched >= FRESHNESS_WINDOW:
        return None
    posts = (
        db.query(Post)
        .filter(Post.feed_id == feed_id)
        .order_by(Post.timestamp.desc(), Post.post_id)
        .all()
    )
    return FeedRecord(
        feed_id=row.feed_id,
        username=row.username or "",
        biography=row.biography or "",
        profile_picture_url=row.profile_picture_url or "",
        website=row.website or "",
        followers_count=row.followers_count or 0,
        follows_count=row.follows_count or 0,
        posts=[_post_record(p) for p in posts],
        last_fetched=last_fetched,
    )


def upsert(db: Session, record: FeedRecord, now: datetime | None = None) -> None:
    """
    Insert or replace the feed row and every post row in one transaction.
    Each row is written with INSERT ... ON CONFLICT DO UPDATE on its primary
    key, so a row created by a concurrent request is overwritten field for
    field. On any error the whole transaction is rolled back and
    PersistFailedError raised.
    """
    record.last_fetched = now or _utc_now()
    insert = _insert_for(db)
    try:
        db.execute(_upsert_stmt(insert, Feed, _feed_values(record), "feed_id"))
        for post in record.posts:
            db.execute(_upsert_stmt(insert, Post, _post_values(post), "post_id"))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistFailedError(f"failed to store feed {record.feed_id}: {e}") from e
    logger.debug("Stored feed %s with %s posts", record.feed_id, len(record.posts))


def resolve_external_url(db: Session, post_id: str) -> str:
    """Upstream media URL of a post, for downloading its image on a local miss."""
    url = db.query(Post.media_small_url).filter(Post.post_id == post_id).scalar()
    if url is None:
        exists = db.query(Post.post_id).filter(Post.post_id == post_id).first()
        if exists is None:
            raise PostNotFoundError(post_id)
        return ""
    return url


def recent_post_ids(db: Session, feed_id: str, n: int = RECENT_POST_LIMIT) -> list[str]:
    """IDs of the n most recent posts of the feed, newest first."""
    rows = (
        db.query(Post.post_id)
        .filter(Post.feed_id == feed_id)
        .order_by(Post.timestamp.desc(), Post.post_id)
        .limit(n)
        .all()
    )
    return [r.post_id for r in rows]


def all_post_ids_ascending(db: Session, feed_id: str) -> list[str]:
    """IDs of every post of the feed, oldest first."""
    rows = (
        db.query(Post.post_id)
        .filter(Post.feed_id == feed_id)
        .order_by(Post.timestamp.asc(), Post.post_id)
        .all()
    )
    return [r.post_id for r in rows]


def delete_posts(db: Session, post_ids: list[str]) -> int:
    """Delete the given posts in one statement. Caller commits."""
    if not post_ids:
        return 0
    return (
        db.query(Post)
        .filter(Post.post_id.in_(post_ids))
        .delete(synchronize_session=False)
    )
