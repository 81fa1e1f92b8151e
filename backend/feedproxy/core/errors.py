"""
Feed lookup errors and their HTTP mapping.
Routes stay thin: raise these from services, map once with feed_error_to_http.
"""
from __future__ import annotations

from fastapi import HTTPException

STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500

MSG_NOT_WHITELISTED = "Feed is not served by this proxy."
MSG_FEED_NOT_EXISTS = "Feed does not exist."
MSG_INTERNAL_ERROR = "Could not load feed."


class FeedProxyError(Exception):
    """Base class for request-terminal feed lookup failures."""


class NotWhitelistedError(FeedProxyError):
    def __init__(self, feed_id: str) -> None:
        super().__init__(f"feed id {feed_id} is not in the whitelist")
        self.feed_id = feed_id


class FeedNotExistsError(FeedProxyError):
    """Upstream answered 404: the feed is confirmed absent."""

    def __init__(self, feed_id: str) -> None:
        super().__init__(f"feed {feed_id} not found upstream")
        self.feed_id = feed_id


class FeedFetchError(FeedProxyError):
    """Transport failure, non-2xx status or unparseable payload from upstream."""


class PersistFailedError(FeedProxyError):
    """The feed upsert transaction was rolled back; nothing was written."""


class ImageResolutionFailedError(FeedProxyError):
    """A post image could not be made available locally."""


class PostNotFoundError(ImageResolutionFailedError):
    def __init__(self, post_id: str) -> None:
        super().__init__(f"post {post_id} not found")
        self.post_id = post_id


class ImageDownloadError(ImageResolutionFailedError):
    pass


class InvalidPostIdError(ImageResolutionFailedError):
    """The post ID cannot name a file inside the image directory."""

    def __init__(self, post_id: str) -> None:
        super().__init__(f"post id {post_id!r} is not a valid image name")
        self.post_id = post_id


# List of (exception type, status_code, detail). First match wins.
FEED_ERROR_RULES: list[tuple[type[Exception], int, str]] = [
    (NotWhitelistedError, STATUS_FORBIDDEN, MSG_NOT_WHITELISTED),
    (FeedNotExistsError, STATUS_NOT_FOUND, MSG_FEED_NOT_EXISTS),
]


def feed_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from a feed lookup into an HTTPException.
    Uses FEED_ERROR_RULES for known error types; everything else is a 500.
    """
    for exc_type, status_code, detail in FEED_ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=MSG_INTERNAL_ERROR)
