"""
On-disk persistence for the frecency database.

The whole store is one JSON document, read completely at the start of an
invocation and rewritten completely at the end. Writes go to a sibling
temporary file which is renamed over the store, so readers only ever see
a fully written file and a failed save leaves the previous one in place.
"""

import json
import logging
import os
from pathlib import Path
from typing import Iterable

from .errors import DataCorrupt, StoreIOError, StoreNotFound
from .types import Item

logger = logging.getLogger(__name__)

STORE_VERSION = 1
TMP_SUFFIX = ".tmp"


def tmp_path_for(path: Path) -> Path:
    """Sibling file a save writes before renaming it into place."""
    return path.with_name(path.name + TMP_SUFFIX)


def load(path: Path) -> list[Item]:
    """
    Read every item from the store file.

    Raises:
        StoreNotFound: If the file does not exist
        StoreIOError: If the file exists but cannot be read
        DataCorrupt: If the content does not decode to the store schema
    """
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except FileNotFoundError as e:
        raise StoreNotFound(f"Store not found: {path}") from e
    except OSError as e:
        raise StoreIOError(f"Can't read store: {path}") from e

    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise DataCorrupt(f"Can't decode store: {path}") from e

    try:
        items = _decode(data)
    except DataCorrupt as e:
        raise DataCorrupt(f"Invalid store contents: {path}") from e

    logger.debug("Loaded %d items from %s", len(items), path)
    return items


def _decode(data) -> list[Item]:
    if not isinstance(data, dict) or "items" not in data:
        raise DataCorrupt("Expected an object with an 'items' list")
    version = data.get("version", STORE_VERSION)
    if not isinstance(version, int) or isinstance(version, bool):
        raise DataCorrupt(f"Store version must be an integer, got {version!r}")
    if version > STORE_VERSION:
        raise DataCorrupt(f"Store version {version} is newer than supported ({STORE_VERSION})")
    if not isinstance(data["items"], list):
        raise DataCorrupt("Store 'items' must be a list")
    return [Item.from_dict(entry) for entry in data["items"]]


def save(items: Iterable[Item], path: Path) -> None:
    """
    Atomically replace the store file with ``items``.

    Creates the parent directory if needed. On any failure the temporary
    file is removed and the previously committed store is left untouched.

    Raises:
        StoreIOError: If the temporary file cannot be written or renamed
    """
    items = list(items)
    tmp_path = tmp_path_for(path)
    document = {
        "version": STORE_VERSION,
        "items": [item.to_dict() for item in items],
    }

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False, separators=(",", ":"))
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        _discard(tmp_path)
        raise StoreIOError(f"Can't write temporary store file: {tmp_path}") from e
    except BaseException:
        _discard(tmp_path)
        raise

    try:
        os.replace(tmp_path, path)
    except OSError as e:
        _discard(tmp_path)
        raise StoreIOError(f"Can't rename {tmp_path} to {path}") from e

    logger.debug("Saved %d items to %s", len(items), path)


def initialize(path: Path) -> None:
    """Create (or reset) the store as an empty sequence."""
    save([], path)
    logger.info("Initialized empty store at %s", path)


def _discard(tmp_path: Path) -> None:
    try:
        tmp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove temporary file %s: %s", tmp_path, e)
