"""
Shared pytest fixtures for fdb tests.

Provides an isolated store path and a controllable clock so ranking
tests don't depend on wall-clock time.
"""

from pathlib import Path

import pytest

from fdb.config import Settings
from fdb.types import Item

NOW = 1_700_000_000


class FakeClock:
    """Clock returning a fixed time that tests can advance."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep user config, env overrides and error logs out of the tests."""
    for var in ("FDB_DB_PATH", "FDB_HISTORY_SIZE", "FDB_SORT_BY", "FDB_VERBOSE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("FDB_CONFIG", str(tmp_path / "no-such-config.toml"))
    monkeypatch.setenv("FDB_ERROR_LOG", str(tmp_path / "errors.log"))


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Path to a store file that does not exist yet."""
    return tmp_path / "fdb.json"


@pytest.fixture
def settings(db_path) -> Settings:
    return Settings(db_path=db_path, history_size=0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_items(*specs) -> list[Item]:
    """Build items from (path, age_seconds, hits) tuples relative to NOW."""
    return [Item(path=path, atime=NOW - age, hits=hits) for path, age, hits in specs]
