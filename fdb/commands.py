"""
Command handlers: add, delete and query against an in-memory store.

Handlers never touch the filesystem. The caller loads the items, runs one
handler with a single ``now`` sampled for the whole invocation, and saves
the result if the handler mutated anything.
"""

import logging
import re
from typing import IO, Iterable, NamedTuple, Sequence

from .errors import OutputError, PatternError
from .types import Item, SortBy, frecency

logger = logging.getLogger(__name__)

# Query fragments are joined so later ones need not follow earlier ones directly
FRAGMENT_JOINER = ".*"


class QueryResult(NamedTuple):
    """Outcome of a query: lines written, and whether the reader went away."""
    emitted: int
    closed: bool


def sort_items(items: list[Item], sort_by: SortBy, now: int) -> None:
    """Sort in place, best first. Ties keep their current relative order."""
    if sort_by == SortBy.FRECENCY:
        items.sort(key=lambda item: frecency(item, now), reverse=True)
    elif sort_by == SortBy.ATIME:
        items.sort(key=lambda item: item.atime, reverse=True)
    elif sort_by == SortBy.HITS:
        items.sort(key=lambda item: item.hits, reverse=True)
    else:
        raise ValueError(f"Unknown sort method: {sort_by!r}")


def evict(items: list[Item], history_size: int, now: int) -> list[Item]:
    """Drop the lowest-frecency items until at most ``history_size`` remain.

    A ``history_size`` of 0 means unlimited. Returns the evicted items.
    """
    if history_size <= 0 or len(items) <= history_size:
        return []
    sort_items(items, SortBy.FRECENCY, now)
    evicted = items[history_size:]
    del items[history_size:]
    logger.debug("Evicted %d items over history size %d", len(evicted), history_size)
    return evicted


def add(items: list[Item], paths: Iterable[str], now: int, history_size: int = 0) -> list[Item]:
    """
    Record a visit to each path, then enforce the history size.

    Existing items are touched; unknown paths are appended with one hit.
    A path repeated in ``paths`` is touched once per occurrence.

    Returns:
        Items evicted to respect ``history_size``
    """
    index = {item.path: item for item in items}
    for path in paths:
        existing = index.get(path)
        if existing is not None:
            existing.touch(now)
        else:
            item = Item(path=path, atime=now, hits=1)
            items.append(item)
            index[path] = item
    return evict(items, history_size, now)


def delete(items: list[Item], paths: Iterable[str]) -> int:
    """Remove items whose path exactly equals one of ``paths``. Returns the count removed."""
    doomed = set(paths)
    before = len(items)
    items[:] = [item for item in items if item.path not in doomed]
    return before - len(items)


def compile_pattern(fragments: Sequence[str]) -> re.Pattern:
    """Join query fragments with ``.*`` and compile them as one regex."""
    pattern = FRAGMENT_JOINER.join(fragments)
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(f"Invalid query pattern: {pattern!r}") from e


def query(
    items: list[Item],
    fragments: Sequence[str],
    sort_by: SortBy,
    now: int,
    out: IO[str],
) -> QueryResult:
    """
    Write matching paths to ``out``, one per line, best first.

    ``items`` is re-sorted in place but nothing is persisted. If the
    reader closes the pipe early the remaining lines are skipped without
    error; any other write failure raises OutputError.
    """
    regex = compile_pattern(fragments)
    sort_items(items, sort_by, now)

    emitted = 0
    try:
        for item in items:
            if regex.search(item.path):
                out.write(item.path + "\n")
                emitted += 1
        out.flush()
    except BrokenPipeError:
        logger.debug("Output closed after %d lines", emitted)
        return QueryResult(emitted, closed=True)
    except OSError as e:
        raise OutputError("Can't write query output") from e
    return QueryResult(emitted, closed=False)
