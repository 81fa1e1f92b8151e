"""
Local image cache: <image_directory>/<post_id>.webp, served under image_url.

A file that exists is a cache hit and is never re-validated. Downloads go to a
temporary file in the same directory and are renamed into place only after the
whole body arrived, so a failed download never leaves a file behind.
"""
import logging
import os
import tempfile
from pathlib import Path

import httpx
from sqlalchemy.orm import Session

from feedproxy.core.constants import IMAGE_EXTENSION
from feedproxy.core.errors import ImageDownloadError, InvalidPostIdError
from feedproxy.services.feed import store

logger = logging.getLogger(__name__)


def image_filename(post_id: str) -> str:
    return f"{post_id}{IMAGE_EXTENSION}"


def image_path(image_directory: str | Path, post_id: str) -> Path:
    """Path of the post's image. Raises InvalidPostIdError unless post_id is a plain file name."""
    if post_id in ("", ".", "..") or Path(post_id).name != post_id:
        raise InvalidPostIdError(post_id)
    return Path(image_directory) / image_filename(post_id)


class ImageCache:
    """Makes post images available locally and returns their public URLs."""

    def __init__(
        self,
        image_directory: str | Path,
        image_url: str,
        *,
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.image_directory = Path(image_directory)
        self.image_url = image_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def public_url(self, post_id: str) -> str:
        return f"{self.image_url}/{image_filename(post_id)}"

    def ensure_local(self, db: Session, post_id: str) -> str:
        """
        Return the public URL of the post's image, downloading it first if the
        file is missing. Raises InvalidPostIdError for an ID that is not a plain
        file name, PostNotFoundError for an unknown post and ImageDownloadError
        when the download fails.
        """
        path = image_path(self.image_directory, post_id)
        if path.exists():
            return self.public_url(post_id)
        url = store.resolve_external_url(db, post_id)
        self.download(url, path)
        logger.info("Cached image for post %s", post_id)
        return self.public_url(post_id)

    def download(self, url: str, dest: Path) -> None:
        """Stream url into dest atomically (temp file + rename)."""
        if not url:
            raise ImageDownloadError(f"no media url for {dest.name}")
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".download-", suffix=IMAGE_EXTENSION, dir=dest.parent)
        except OSError as e:
            raise ImageDownloadError(f"failed to create image file in {dest.parent}: {e}") from e
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                with httpx.Client(timeout=self._timeout, transport=self._transport) as c:
                    with c.stream("GET", url) as r:
                        if r.status_code != 200:
                            raise ImageDownloadError(
                                f"failed to download image {url}, status: {r.status_code}"
                            )
                        for chunk in r.iter_bytes():
                            f.write(chunk)
            os.replace(tmp_path, dest)
        except httpx.HTTPError as e:
            raise ImageDownloadError(f"failed to download image {url}: {e}") from e
        except OSError as e:
            raise ImageDownloadError(f"failed to write image {dest}: {e}") from e
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
