"""
Feed shapes.

FeedRecord/PostRecord are the internal shapes: they carry cache bookkeeping
(last_fetched) and the upstream media URL needed to re-download an image.
FeedResponse/PostResponse are what API clients receive. The only way from one
to the other is to_response(), which drops the internal fields.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostRecord:
    """One post as fetched upstream or read from the posts table."""

    __slots__ = (
        "post_id",
        "feed_id",
        "permalink",
        "timestamp",
        "media_type",
        "media_small_height",
        "media_small_width",
        "caption",
        "pruned_caption",
        "external_media_url",
    )

    def __init__(
        self,
        *,
        post_id: str,
        feed_id: str,
        permalink: str = "",
        timestamp: datetime | None = None,
        media_type: str = "",
        media_small_height: int = 0,
        media_small_width: int = 0,
        caption: str = "",
        pruned_caption: str = "",
        external_media_url: str = "",
    ):
        self.post_id = post_id
        self.feed_id = feed_id
        self.permalink = permalink
        self.timestamp = timestamp
        self.media_type = media_type
        self.media_small_height = media_small_height
        self.media_small_width = media_small_width
        self.caption = caption
        self.pruned_caption = pruned_caption
        self.external_media_url = external_media_url

    def __repr__(self) -> str:
        return f"PostRecord(post_id={self.post_id!r}, feed_id={self.feed_id!r}, timestamp={self.timestamp!r})"


class FeedRecord:
    """One feed with its posts. last_fetched is set by the store on upsert."""

    __slots__ = (
        "feed_id",
        "username",
        "biography",
        "profile_picture_url",
        "website",
        "followers_count",
        "follows_count",
        "posts",
        "last_fetched",
    )

    def __init__(
        self,
        *,
        feed_id: str,
        username: str = "",
        biography: str = "",
        profile_picture_url: str = "",
        website: str = "",
        followers_count: int = 0,
        follows_count: int = 0,
        posts: list[PostRecord] | None = None,
        last_fetched: datetime | None = None,
    ):
        self.feed_id = feed_id
        self.username = username
        self.biography = biography
        self.profile_picture_url = profile_picture_url
        self.website = website
        self.followers_count = followers_count
        self.follows_count = follows_count
        self.posts = posts if posts is not None else []
        self.last_fetched = last_fetched

    def __repr__(self) -> str:
        return f"FeedRecord(feed_id={self.feed_id!r}, posts={len(self.posts)})"


class PostResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    permalink: str = ""
    timestamp: datetime | None = None
    media_type: str = Field("", alias="mediaType")
    media_small_url: str = Field("", alias="mediaSmallUrl")
    media_small_height: int = Field(0, alias="mediaSmallHeight")
    media_small_width: int = Field(0, alias="mediaSmallWidth")
    caption: str = ""
    pruned_caption: str = Field("", alias="prunedCaption")


class FeedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str = ""
    biography: str = ""
    profile_picture_url: str = Field("", alias="profilePictureUrl")
    website: str = ""
    followers_count: int = Field(0, alias="followersCount")
    follows_count: int = Field(0, alias="followsCount")
    posts: list[PostResponse] = Field(default_factory=list)


def to_response(feed: FeedRecord, posts: list[PostRecord], local_urls: dict[str, str]) -> FeedResponse:
    """Build the client-facing feed. local_urls maps post_id -> locally served image URL."""
    return FeedResponse(
        id=feed.feed_id,
        username=feed.username,
        biography=feed.biography,
        profile_picture_url=feed.profile_picture_url,
        website=feed.website,
        followers_count=feed.followers_count,
        follows_count=feed.follows_count,
        posts=[
            PostResponse(
                id=p.post_id,
                permalink=p.permalink,
                timestamp=p.timestamp,
                media_type=p.media_type,
                media_small_url=local_urls.get(p.post_id, ""),
                media_small_height=p.media_small_height,
                media_small_width=p.media_small_width,
                caption=p.caption,
                pruned_caption=p.pruned_caption,
            )
            for p in posts
        ],
    )
