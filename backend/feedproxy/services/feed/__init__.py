"""
Feed proxy: cached upstream feeds with locally served images.

- store: freshness-gated reads and atomic writes of feeds/posts.
- client: upstream fetch (404 -> FeedNotExistsError).
- images: local image cache (download once, atomic write).
- retention: background pruning of posts and their images.
- orchestrator: per-request flow tying the above together.
"""
from feedproxy.services.feed.config import FeedProxyConfig
from feedproxy.services.feed.orchestrator import FeedLookup, FeedOrchestrator
from feedproxy.services.feed.types import FeedResponse, PostResponse

__all__ = [
    "FeedLookup",
    "FeedOrchestrator",
    "FeedProxyConfig",
    "FeedResponse",
    "PostResponse",
]
