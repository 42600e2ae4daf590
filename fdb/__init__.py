"""
fdb: a frecency-ranked database of visited directories.

Quick start:
    from fdb import Database, resolve_settings

    db = Database(resolve_settings(db_path="~/.fdb"))
    db.initialize()
    db.add(["/home/me/projects"])
    db.query(["proj"])
"""

__version__ = "0.4.0"

from .api import Database
from .config import Settings, resolve_settings
from .errors import (
    ConfigError,
    DataCorrupt,
    FdbError,
    LockError,
    LockTimeout,
    OutputError,
    PatternError,
    StoreIOError,
    StoreNotFound,
)
from .lock import StoreLock
from .types import Item, SortBy, frecency

__all__ = [
    "__version__",
    "Database",
    "Settings",
    "resolve_settings",
    "Item",
    "SortBy",
    "frecency",
    "StoreLock",
    "FdbError",
    "StoreIOError",
    "StoreNotFound",
    "DataCorrupt",
    "PatternError",
    "ConfigError",
    "LockError",
    "LockTimeout",
    "OutputError",
]
