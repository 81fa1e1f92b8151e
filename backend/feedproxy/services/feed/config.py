"""Feed proxy config: whitelist, image location and upstream URL, passed explicitly to the orchestrator."""
from feedproxy.config import DEFAULT_API_BASE_URL, Settings


def parse_allowed_feed_ids(raw: str) -> frozenset[str]:
    """Comma-separated feed IDs; all spaces are removed first. Empty string -> no restriction."""
    return frozenset(p for p in (raw or "").replace(" ", "").split(",") if p)


class FeedProxyConfig:
    """Everything a feed lookup needs from the environment."""

    __slots__ = ("allowed_feed_ids", "image_directory", "image_url", "api_base_url", "timeout")

    def __init__(
        self,
        *,
        allowed_feed_ids: str | frozenset[str] = "",
        image_directory: str = "images",
        image_url: str = "",
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 20.0,
    ) -> None:
        if isinstance(allowed_feed_ids, str):
            allowed_feed_ids = parse_allowed_feed_ids(allowed_feed_ids)
        self.allowed_feed_ids = frozenset(allowed_feed_ids)
        self.image_directory = image_directory
        self.image_url = image_url
        self.api_base_url = api_base_url or DEFAULT_API_BASE_URL
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "FeedProxyConfig":
        return cls(
            allowed_feed_ids=settings.allowed_feed_ids,
            image_directory=settings.image_directory,
            image_url=settings.image_url,
            api_base_url=settings.api_base_url,
            timeout=settings.http_timeout_seconds,
        )

    def is_allowed(self, feed_id: str) -> bool:
        if not self.allowed_feed_ids:
            return True
        return feed_id in self.allowed_feed_ids
