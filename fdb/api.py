"""
Database facade: one locked load/mutate/save cycle per operation.

Each public method acquires the store lock, loads the whole store, applies
exactly one command handler, saves if the handler mutates, and releases
the lock on every exit path. Queries take the lock too, so they never read
a store another invocation is in the middle of rewriting.
"""

import logging
import sys
import time
from typing import IO, Callable, Iterable, Optional, Sequence

from . import commands, store
from .commands import QueryResult
from .config import Settings
from .errors import StoreIOError
from .lock import DEFAULT_POLL_INTERVAL, StoreLock
from .types import Item, SortBy

logger = logging.getLogger(__name__)


class Database:
    """
    Frecency database bound to one store file.

    Holds no item state between calls; every operation reads the store
    fresh from disk.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        clock: Callable[[], float] = time.time,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        lock_timeout: Optional[float] = None,
    ):
        """
        Args:
            settings: Resolved settings for this invocation
            clock: Source of the current time in unix seconds
            poll_interval: Seconds between lock attempts when contended
            lock_timeout: Seconds before giving up on the lock (None = forever)
        """
        self.settings = settings
        self._clock = clock
        self._poll_interval = poll_interval
        self._lock_timeout = lock_timeout

    @property
    def path(self):
        return self.settings.db_path

    def _now(self) -> int:
        return int(self._clock())

    def _lock(self) -> StoreLock:
        return StoreLock(
            self.path,
            poll_interval=self._poll_interval,
            timeout=self._lock_timeout,
        )

    def initialize(self) -> None:
        """Write an empty store, replacing any existing one."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(f"Can't create store directory: {self.path.parent}") from e
        with self._lock():
            store.initialize(self.path)

    def add(self, paths: Iterable[str]) -> list[Item]:
        """Record visits to ``paths``. Returns the items evicted by the size limit."""
        with self._lock():
            now = self._now()
            items = store.load(self.path)
            evicted = commands.add(items, paths, now, self.settings.history_size)
            store.save(items, self.path)
        for item in evicted:
            logger.debug("Evicted %s (hits=%d, atime=%d)", item.path, item.hits, item.atime)
        return evicted

    def delete(self, paths: Iterable[str]) -> int:
        """Forget ``paths``. Returns how many items were removed."""
        with self._lock():
            items = store.load(self.path)
            removed = commands.delete(items, paths)
            store.save(items, self.path)
        logger.debug("Deleted %d items", removed)
        return removed

    def query(
        self,
        fragments: Sequence[str],
        out: Optional[IO[str]] = None,
        sort_by: Optional[SortBy] = None,
    ) -> QueryResult:
        """Write paths matching ``fragments`` to ``out`` (default stdout), best first."""
        with self._lock():
            now = self._now()
            items = store.load(self.path)
            return commands.query(
                items,
                fragments,
                sort_by or self.settings.sort_by,
                now,
                out if out is not None else sys.stdout,
            )

