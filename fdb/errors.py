"""
Error types and error logging for fdb.

Every failure aborts the current invocation. Errors are raised with
``raise ... from exc`` so the CLI can print the full causal chain, while
unexpected exceptions get their traceback logged to a file.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path


class FdbError(Exception):
    """Base class for all fdb failures."""


class StoreIOError(FdbError):
    """A store file could not be opened, created, written or renamed."""


class StoreNotFound(StoreIOError):
    """The store file does not exist (run ``fdb init`` first)."""


class DataCorrupt(FdbError):
    """The store file exists but does not decode to the expected schema."""


class PatternError(FdbError):
    """A query pattern is not a valid regular expression."""


class ConfigError(FdbError):
    """A required setting could not be resolved or is invalid."""


class LockError(FdbError):
    """The lock sentinel could not be created for a reason other than contention."""


class LockTimeout(LockError):
    """The lock was still held by another invocation when the timeout ran out."""


class OutputError(FdbError):
    """Writing query output failed for a reason other than a closed pipe."""


def error_chain(exc: BaseException) -> list[str]:
    """Messages for ``exc`` and each exception it was raised from, outermost first."""
    messages = []
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        messages.append(str(current) or type(current).__name__)
        current = current.__cause__
    return messages


def _error_log_path() -> Path:
    """Resolve error log path, respecting FDB_ERROR_LOG."""
    override = os.environ.get("FDB_ERROR_LOG")
    if override:
        return Path(override)
    return Path.home() / ".cache" / "fdb" / "fdb-errors.log"


def log_exception(exc: Exception, context: str = "") -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)

    Returns:
        Path to the error log file
    """
    log_path = _error_log_path()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    except OSError:
        pass  # Can't write error log, don't crash over it
    return log_path
