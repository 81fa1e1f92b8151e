"""Shared pytest fixtures: a fresh SQLite file database and image directory per test."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import feedproxy.models  # noqa: F401  register tables with Base.metadata
from feedproxy.db.base import Base

from tests.factories import UpstreamStub


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'feeds.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def image_dir(tmp_path):
    d = tmp_path / "images"
    d.mkdir()
    return d


@pytest.fixture
def upstream():
    """Fake upstream feed API (feeds.test) and image host (cdn.test)."""
    return UpstreamStub()
