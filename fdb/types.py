"""
Data types for the frecency database.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import DataCorrupt

# Persisted integer ranges
ATIME_MIN = -(2 ** 63)
ATIME_MAX = 2 ** 63 - 1
HITS_MAX = 2 ** 32 - 1

# Frecency decay: a visit loses half its weight after roughly one day
FRECENCY_BASE = 0.25
FRECENCY_DECAY = 3e-6


class SortBy(str, Enum):
    """Orderings available to queries."""
    FRECENCY = "frecency"
    ATIME = "atime"
    HITS = "hits"


@dataclass
class Item:
    """
    One tracked path with its access statistics.

    ``path`` is the key; ``atime`` is the last touch in unix seconds;
    ``hits`` counts touches and starts at 1.
    """
    path: str
    atime: int
    hits: int = 1

    def touch(self, now: int) -> None:
        """Record another visit at ``now``."""
        self.hits = min(self.hits + 1, HITS_MAX)
        self.atime = now

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "atime": self.atime, "hits": self.hits}

    @classmethod
    def from_dict(cls, data: Any) -> "Item":
        """Build an Item from decoded JSON, raising DataCorrupt on schema mismatch."""
        if not isinstance(data, dict):
            raise DataCorrupt(f"Expected an item object, got {type(data).__name__}")
        missing = {"path", "atime", "hits"} - data.keys()
        if missing:
            raise DataCorrupt(f"Item is missing fields: {', '.join(sorted(missing))}")

        path, atime, hits = data["path"], data["atime"], data["hits"]
        if not isinstance(path, str):
            raise DataCorrupt(f"Item path must be a string, got {type(path).__name__}")
        # bool is an int subclass; reject it explicitly
        if not isinstance(atime, int) or isinstance(atime, bool):
            raise DataCorrupt(f"Item atime must be an integer: {path!r}")
        if not ATIME_MIN <= atime <= ATIME_MAX:
            raise DataCorrupt(f"Item atime out of range: {path!r}")
        if not isinstance(hits, int) or isinstance(hits, bool):
            raise DataCorrupt(f"Item hits must be an integer: {path!r}")
        if not 0 <= hits <= HITS_MAX:
            raise DataCorrupt(f"Item hits out of range: {path!r}")
        return cls(path=path, atime=atime, hits=hits)


def frecency(item: Item, now: int) -> float:
    """Relevance score combining hit count and age; higher is better.

    Computed at query time and never stored, so rankings drift as items age.
    An ``atime`` in the future counts as age zero.
    """
    age = max(0, now - item.atime)
    return item.hits / (FRECENCY_BASE + FRECENCY_DECAY * age)
