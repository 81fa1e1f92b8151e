"""
Cached upstream post. post_id is globally unique (not scoped per feed).

media_small_url holds the upstream media URL, used only to download the image
on a local cache miss. It is never returned to API clients.
"""
from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from feedproxy.db.base import Base


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (Index("ix_posts_feed_id_timestamp", "feed_id", "timestamp"),)

    post_id = Column(String(128), primary_key=True)
    feed_id = Column(String(128), nullable=False)
    permalink = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=True)
    media_type = Column(String(32), nullable=True)
    media_small_url = Column(Text, nullable=True)
    media_small_height = Column(Integer, nullable=True)
    media_small_width = Column(Integer, nullable=True)
    caption = Column(Text, nullable=True)
    pruned_caption = Column(Text, nullable=True)
