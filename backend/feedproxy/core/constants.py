"""
Cache and retention constants. Change windows here instead of scattering literals.
"""
from datetime import timedelta

# Cached feed rows are served while last_fetched is newer than this
FRESHNESS_WINDOW = timedelta(hours=24)

# Posts shown per feed (newest first); also the retention window size
RECENT_POST_LIMIT = 6

# Upstream post timestamp, e.g. "2025-01-29T18:34:09+0000"
UPSTREAM_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Cached images are stored as <image_directory>/<post_id><IMAGE_EXTENSION>
IMAGE_EXTENSION = ".webp"
