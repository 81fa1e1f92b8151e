"""Add feeds and posts tables (cached upstream feeds).

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

- feeds: one row per upstream feed; last_fetched drives the 24h freshness window.
- posts: globally unique post_id; media_small_url is the upstream media URL.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "feeds",
        sa.Column("feed_id", sa.String(128), primary_key=True),
        sa.Column("username", sa.String(256), nullable=True),
        sa.Column("biography", sa.Text(), nullable=True),
        sa.Column("profile_picture_url", sa.Text(), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("followers_count", sa.Integer(), nullable=True),
        sa.Column("follows_count", sa.Integer(), nullable=True),
        sa.Column("last_fetched", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "posts",
        sa.Column("post_id", sa.String(128), primary_key=True),
        sa.Column("feed_id", sa.String(128), nullable=False),
        sa.Column("permalink", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.Column("media_type", sa.String(32), nullable=True),
        sa.Column("media_small_url", sa.Text(), nullable=True),
        sa.Column("media_small_height", sa.Integer(), nullable=True),
        sa.Column("media_small_width", sa.Integer(), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("pruned_caption", sa.Text(), nullable=True),
    )
    op.create_index("ix_posts_feed_id_timestamp", "posts", ["feed_id", "timestamp"])


def downgrade() -> None:
    op.drop_index("ix_posts_feed_id_timestamp", table_name="posts")
    op.drop_table("posts")
    op.drop_table("feeds")
