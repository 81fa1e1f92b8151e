"""
Application settings (Pydantic Settings).
"""
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

# .env next to backend/ (parent of feedproxy/)
_env_path = Path(__file__).resolve().parent.parent / ".env"

DEFAULT_API_BASE_URL = "https://feeds.behold.so/"


class Settings(BaseSettings):
    database_url: str = "sqlite:///feeds.db"
    # Comma-separated feed IDs; empty means every feed ID is served
    allowed_feed_ids: str = ""
    image_directory: str = "images"
    # Public URL the image directory is served under, e.g. https://cdn.example.com/images
    image_url: str = ""
    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        validation_alias=AliasChoices("BHP_BASEURL", "BHP_API_BASE_URL"),
    )
    log_file: str = ""  # BHP_LOGFILE; stderr when empty
    http_timeout_seconds: float = 20.0
    prune_max_workers: int = 2
    prune_max_pending: int = 32

    class Config:
        env_file = _env_path
        env_prefix = "BHP_"
        extra = "ignore"

    @field_validator("allowed_feed_ids", "image_directory", "image_url", "log_file", mode="after")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("api_base_url", mode="after")
    @classmethod
    def default_base_url(cls, v: str) -> str:
        return (v or "").strip() or DEFAULT_API_BASE_URL


settings = Settings()
