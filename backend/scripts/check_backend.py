#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from backend/:
  python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def sqlite_path(database_url: str) -> Path | None:
    """File path of a sqlite:/// URL, None for other databases or in-memory SQLite."""
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        return None
    name = database_url[len(prefix):]
    if not name or name == ":memory:":
        return None
    return Path(name)


def main():
    errors = []

    # 1) Settings
    try:
        from feedproxy.config import settings
        print("OK  Settings loaded")
    except Exception as e:
        print("FAIL Settings:", e)
        return 1

    # 2) SQLite database file exists and is writeable
    db_file = sqlite_path(settings.database_url)
    if db_file is not None:
        if not db_file.exists():
            errors.append(f"Database file {db_file} does not exist.")
            print("FAIL Database file missing:", db_file)
        elif not os.access(db_file, os.W_OK):
            errors.append(f"Database file {db_file} is not writeable.")
            print("FAIL Database file not writeable:", db_file)
        else:
            print("OK  Database file", db_file)

    # 3) Image directory
    image_dir = Path(settings.image_directory)
    if not image_dir.is_dir():
        errors.append(f"Image directory {image_dir} does not exist (BHP_IMAGE_DIRECTORY).")
        print("FAIL Image directory missing:", image_dir)
    elif not os.access(image_dir, os.W_OK):
        errors.append(f"Image directory {image_dir} is not writeable.")
        print("FAIL Image directory not writeable:", image_dir)
    else:
        print("OK  Image directory", image_dir)
    if not settings.image_url:
        print("WARN BHP_IMAGE_URL is empty; image URLs will be relative")

    # 4) DB connection
    try:
        from sqlalchemy import text
        from feedproxy.db.session import engine
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (BHP_DATABASE_URL)")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 5) App import (catches missing deps, bad imports)
    try:
        from feedproxy.main import app  # noqa: F401
        print("OK  App import (feedproxy.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: uvicorn feedproxy.main:app --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
