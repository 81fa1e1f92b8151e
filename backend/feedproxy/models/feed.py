"""Cached upstream feed header. One row per feed ID; replaced on every refetch."""
from sqlalchemy import Column, DateTime, Integer, String, Text

from feedproxy.db.base import Base


class Feed(Base):
    __tablename__ = "feeds"

    feed_id = Column(String(128), primary_key=True)
    username = Column(String(256), nullable=True)
    biography = Column(Text, nullable=True)
    profile_picture_url = Column(Text, nullable=True)
    website = Column(Text, nullable=True)
    followers_count = Column(Integer, nullable=True)
    follows_count = Column(Integer, nullable=True)
    last_fetched = Column(DateTime(timezone=True), nullable=True)
