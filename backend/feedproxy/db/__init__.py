from feedproxy.db.base import Base
from feedproxy.db.session import get_db, engine, init_db, SessionLocal
from feedproxy.db.tables import ALL_TABLE_NAMES

__all__ = ["get_db", "engine", "init_db", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
