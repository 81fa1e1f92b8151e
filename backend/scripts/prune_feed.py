#!/usr/bin/env python3
"""
Run retention for one feed now (same policy as the background prune).
  python scripts/prune_feed.py <feed_id> [--image-directory DIR]
"""
import argparse
import os
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main() -> int:
    from feedproxy.config import settings
    from feedproxy.core.logging import configure_logging
    from feedproxy.db.session import SessionLocal
    from feedproxy.services.feed.retention import prune_feed

    parser = argparse.ArgumentParser(description="Prune posts of one cached feed.")
    parser.add_argument("feed_id")
    parser.add_argument("--image-directory", default=settings.image_directory)
    args = parser.parse_args()

    configure_logging(settings.log_file)
    db = SessionLocal()
    try:
        deleted = prune_feed(db, args.feed_id, args.image_directory)
    finally:
        db.close()
    print(f"Deleted {len(deleted)} posts from feed {args.feed_id}")
    for post_id in deleted:
        print("  ", post_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
