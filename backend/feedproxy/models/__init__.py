from feedproxy.models.feed import Feed
from feedproxy.models.post import Post

__all__ = [
    "Feed",
    "Post",
]
