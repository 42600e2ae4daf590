"""
Configuration for the frecency database.

Settings are resolved once per invocation and passed explicitly to the
code that needs them. Each value comes from the first source that sets it:

1. Command-line option
2. Environment (FDB_DB_PATH, FDB_HISTORY_SIZE, FDB_SORT_BY)
3. TOML config file (FDB_CONFIG, default ~/.config/fdb/fdb.toml)
4. Built-in default

The CLI layer handles sources 1 and 2; this module merges in the rest.
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigError
from .types import SortBy

# tomli_w for writing TOML (tomllib is read-only)
try:
    import tomli_w
except ImportError:
    tomli_w = None  # type: ignore


CONFIG_FILENAME = "fdb.toml"
CONFIG_SECTION = "fdb"

DEFAULT_DB_PATH = "~/.fdb"
DEFAULT_HISTORY_SIZE = 600
DEFAULT_SORT_BY = SortBy.FRECENCY


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one invocation."""
    db_path: Path
    history_size: int = DEFAULT_HISTORY_SIZE  # 0 = unlimited
    sort_by: SortBy = DEFAULT_SORT_BY


def expand_home(value: str) -> Path:
    """Expand a leading ``~`` in a path, failing if the home directory is unknown."""
    try:
        return Path(value).expanduser()
    except RuntimeError as e:
        raise ConfigError(f"Can't resolve home directory for {value!r}") from e


def default_config_path() -> Path:
    """Config file location, respecting FDB_CONFIG and XDG_CONFIG_HOME."""
    override = os.environ.get("FDB_CONFIG")
    if override:
        return expand_home(override)
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "fdb" / CONFIG_FILENAME
    return expand_home("~/.config") / "fdb" / CONFIG_FILENAME


def read_config_file(config_path: Path) -> dict[str, Any]:
    """
    Read the ``[fdb]`` table from a TOML file.

    A missing file is not an error and yields an empty dict.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Can't read config file: {config_path}") from e

    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{CONFIG_SECTION}] in {config_path} must be a table")
    return section


def _parse_history_size(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"history_size must be a non-negative integer, got {value!r}")
    try:
        size = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"history_size must be a non-negative integer, got {value!r}") from e
    if size < 0:
        raise ConfigError(f"history_size must be a non-negative integer, got {value!r}")
    return size


def _parse_sort_by(value: Any) -> SortBy:
    if isinstance(value, SortBy):
        return value
    try:
        return SortBy(str(value))
    except ValueError as e:
        choices = "|".join(s.value for s in SortBy)
        raise ConfigError(f"sort_by must be one of {choices}, got {value!r}") from e


def resolve_settings(
    db_path: Optional[str] = None,
    history_size: Optional[int] = None,
    sort_by: Optional[SortBy] = None,
    unlimited: bool = False,
    config_path: Optional[Path] = None,
) -> Settings:
    """
    Build Settings from explicit values, falling back to the config file
    and then to defaults.

    Args:
        db_path: Store file path; ``~`` is expanded
        history_size: Maximum number of items kept (0 = unlimited)
        sort_by: Default query ordering
        unlimited: Force history_size to 0
        config_path: TOML file to consult (default: default_config_path())
    """
    file_values = read_config_file(config_path or default_config_path())

    raw_path = db_path if db_path is not None else file_values.get("db_path", DEFAULT_DB_PATH)
    if not isinstance(raw_path, (str, os.PathLike)):
        raise ConfigError(f"db_path must be a string, got {raw_path!r}")
    resolved_path = expand_home(os.fspath(raw_path))

    if unlimited:
        size = 0
    elif history_size is not None:
        size = _parse_history_size(history_size)
    else:
        size = _parse_history_size(file_values.get("history_size", DEFAULT_HISTORY_SIZE))

    order = _parse_sort_by(
        sort_by if sort_by is not None else file_values.get("sort_by", DEFAULT_SORT_BY)
    )

    return Settings(db_path=resolved_path, history_size=size, sort_by=order)


def settings_to_toml(settings: Settings) -> str:
    """Render settings as a TOML document loadable by read_config_file."""
    if tomli_w is None:
        raise RuntimeError("tomli_w is required to write config. Install with: pip install tomli-w")
    return tomli_w.dumps({CONFIG_SECTION: {
        "db_path": str(settings.db_path),
        "history_size": settings.history_size,
        "sort_by": settings.sort_by.value,
    }})


def save_config(settings: Settings, config_path: Path) -> None:
    """
    Write settings to a TOML config file.

    Creates the directory if it doesn't exist.
    """
    text = settings_to_toml(settings)
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Can't write config file: {config_path}") from e
