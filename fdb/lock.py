"""
Cross-process exclusion lock for the store file.

The lock is a zero-byte sentinel at ``<db_path>.lock``; while it exists the
store is held. Acquisition is a single exclusive create, so two processes
can never both succeed. A holder killed before release leaves the sentinel
behind and blocks later invocations until it is removed by hand; there is
no staleness detection.
"""

import logging
import os
import time
from pathlib import Path
from typing import Optional

from .errors import LockError, LockTimeout

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"
DEFAULT_POLL_INTERVAL = 0.03  # seconds between attempts while contended


def lock_path_for(db_path: Path) -> Path:
    return db_path.with_name(db_path.name + LOCK_SUFFIX)


class StoreLock:
    """
    Sentinel-file lock guarding one store's load/mutate/save cycle.

    Use as a context manager; release happens on every exit path once the
    lock has been acquired::

        with StoreLock(db_path):
            items = load(db_path)
            ...
            save(items, db_path)
    """

    def __init__(
        self,
        db_path: Path,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            db_path: Path of the store file the lock protects
            poll_interval: Seconds to sleep between attempts when contended
            timeout: Give up with LockTimeout after this many seconds;
                None waits indefinitely
        """
        self.path = lock_path_for(Path(db_path))
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._held = False

    @property
    def held(self) -> bool:
        """True if this instance currently owns the sentinel."""
        return self._held

    def is_locked(self) -> bool:
        """Probe whether any process holds the lock."""
        return self.path.exists()

    def _try_create(self) -> bool:
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        except OSError as e:
            raise LockError(f"Can't create lock file: {self.path}") from e
        os.close(fd)
        return True

    def acquire(self) -> None:
        """Block until the sentinel is created by this instance."""
        if self._held:
            raise LockError(f"Lock already held by this process: {self.path}")

        started = time.monotonic()
        waited = False
        while not self._try_create():
            if not waited:
                logger.debug("Waiting for lock %s", self.path)
                waited = True
            if self._timeout is not None and time.monotonic() - started >= self._timeout:
                raise LockTimeout(
                    f"Timed out after {self._timeout}s waiting for lock: {self.path}"
                )
            time.sleep(self._poll_interval)

        self._held = True
        logger.debug("Acquired lock %s", self.path)

    def release(self) -> None:
        """Delete the sentinel if this instance holds it."""
        if not self._held:
            return
        self._held = False
        try:
            self.path.unlink()
        except FileNotFoundError:
            logger.warning("Lock file vanished before release: %s", self.path)
            return
        logger.debug("Released lock %s", self.path)

    def __enter__(self) -> "StoreLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
