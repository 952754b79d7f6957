"""Shared fixtures: a throwaway SQLite file per test and a fresh rate limiter."""

import pytest

import config
from database import init_db
from rate_limit import reset_rate_limiter


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "reports.db"
    monkeypatch.setattr(config, "DB_PATH", path)
    init_db()
    return path


@pytest.fixture(autouse=True)
def fresh_rate_limiter():
    reset_rate_limiter()
    yield
    reset_rate_limiter()


@pytest.fixture
def make_metadata():
    """Factory for ScrapedMetadata dicts with every field empty unless overridden."""

    def _make(**overrides) -> dict:
        metadata = {
            "title": None,
            "description": None,
            "keywords": None,
            "headings": {"h1": [], "h2": [], "h3": [], "h4": [], "h5": [], "h6": []},
            "meta_tags": {},
            "url": "https://example.com/",
        }
        metadata.update(overrides)
        return metadata

    return _make
