"""
CLI interface for the frecency database.

Usage:
    fdb init
    fdb add /home/me/projects/fdb
    fdb query proj fdb | head -n 1
    fdb delete /home/me/old
"""

import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from typing_extensions import Annotated

from . import __version__
from .api import Database
from .config import Settings, default_config_path, resolve_settings, save_config, settings_to_toml
from .errors import FdbError, error_chain
from .logging_config import configure_from_env, enable_debug_mode
from .types import SortBy

# Quiet by default; FDB_VERBOSE=1 enables debug output
configure_from_env()


def _version_callback(value: bool):
    if value:
        typer.echo(f"fdb {__version__}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


app = typer.Typer(
    name="fdb",
    help="Track visited directories and rank them by frecency.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


def _fail(exc: BaseException) -> NoReturn:
    """Print an error with its causes to stderr and exit non-zero."""
    first, *causes = error_chain(exc)
    typer.echo(f"Error: {first}", err=True)
    for cause in causes:
        typer.echo(f"  caused by: {cause}", err=True)
    raise typer.Exit(1)


def _detach_stdout() -> None:
    """Point stdout at /dev/null so the interpreter's final flush can't hit a closed pipe."""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError):
        pass


@app.callback()
def main_callback(
    ctx: typer.Context,
    db_path: Annotated[Optional[str], typer.Option(
        "--db-path", "-i",
        envvar="FDB_DB_PATH",
        help="Path to the database file (default: ~/.fdb)",
    )] = None,
    history_size: Annotated[Optional[int], typer.Option(
        "--history-size",
        envvar="FDB_HISTORY_SIZE",
        min=0,
        help="Maximum number of paths kept; 0 keeps everything (default: 600)",
    )] = None,
    unlimited: Annotated[bool, typer.Option(
        "--unlimited", "-u",
        help="Don't limit the size of the database",
    )] = False,
    sort_by: Annotated[Optional[SortBy], typer.Option(
        "--sort-by", "-s",
        envvar="FDB_SORT_BY",
        case_sensitive=False,
        help="Default query order",
    )] = None,
    config: Annotated[Optional[Path], typer.Option(
        "--config",
        envvar="FDB_CONFIG",
        help="TOML config file (default: ~/.config/fdb/fdb.toml)",
    )] = None,
    verbose: Annotated[bool, typer.Option(
        "--verbose",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version", "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
):
    """Track visited directories and rank them by frecency."""
    ctx.obj = {
        "db_path": db_path,
        "history_size": history_size,
        "sort_by": sort_by,
        "unlimited": unlimited,
        "config_path": config,
    }


def _get_settings(ctx: typer.Context) -> Settings:
    try:
        return resolve_settings(**(ctx.obj or {}))
    except FdbError as e:
        _fail(e)


def _get_database(ctx: typer.Context) -> Database:
    return Database(_get_settings(ctx))


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command()
def init(ctx: typer.Context):
    """Create an empty database, replacing any existing one."""
    db = _get_database(ctx)
    try:
        db.initialize()
    except FdbError as e:
        _fail(e)


@app.command()
def add(
    ctx: typer.Context,
    paths: Annotated[list[str], typer.Argument(help="Paths to record a visit to")],
):
    """
    Record a visit to each path.

    \b
    Examples:
        fdb add "$PWD"
        fdb --history-size 100 add /srv/www /srv/logs
    """
    db = _get_database(ctx)
    try:
        db.add(paths)
    except FdbError as e:
        _fail(e)


@app.command()
def delete(
    ctx: typer.Context,
    paths: Annotated[list[str], typer.Argument(help="Exact paths to forget")],
):
    """Remove paths from the database. Unknown paths are ignored."""
    db = _get_database(ctx)
    try:
        db.delete(paths)
    except FdbError as e:
        _fail(e)


@app.command()
def query(
    ctx: typer.Context,
    patterns: Annotated[list[str], typer.Argument(
        help="Regex fragments; joined with '.*' so each may match further along",
    )],
    sort_by: Annotated[Optional[SortBy], typer.Option(
        "--sort-by", "-s",
        case_sensitive=False,
        help="Order for this query (overrides the default)",
    )] = None,
):
    """
    Print matching paths, best first.

    \b
    Examples:
        fdb query proj              # anything containing "proj"
        fdb query src fdb$          # "src", then later a path ending in "fdb"
        fdb query -s atime .        # every path, most recent first
    """
    db = _get_database(ctx)
    try:
        result = db.query(patterns, sort_by=sort_by)
    except FdbError as e:
        _fail(e)
    if result.closed:
        _detach_stdout()


@app.command("config")
def show_config(
    ctx: typer.Context,
    save: Annotated[bool, typer.Option(
        "--save",
        help="Also write the resolved settings to the config file",
    )] = False,
):
    """Print the resolved settings as TOML."""
    settings = _get_settings(ctx)
    try:
        typer.echo(settings_to_toml(settings), nl=False)
        if save:
            config_path = (ctx.obj or {}).get("config_path") or default_config_path()
            save_config(settings, config_path)
    except FdbError as e:
        _fail(e)


# Single-letter aliases matching the classic -z/-a/-d/-q flags
app.command("z", hidden=True)(init)
app.command("a", hidden=True)(add)
app.command("d", hidden=True)(delete)
app.command("q", hidden=True)(query)


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="fdb CLI")
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
