"""
Tests for the fdb command line.

Runs the typer app in-process with CliRunner; settings come from options
and environment exactly as they would from a shell.
"""

import json

import pytest
from typer.testing import CliRunner

from fdb import __version__, store
from fdb.cli import app
from fdb.lock import lock_path_for
from fdb.types import Item


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, db_path):
    """Invoke the CLI against the test store."""
    def _invoke(*args, env=None):
        return runner.invoke(app, ["--db-path", str(db_path), *args], env=env)
    return _invoke


def test_version(runner):
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_add_query(invoke, db_path):
    assert invoke("init").exit_code == 0
    assert invoke("add", "/home/me/src", "/etc").exit_code == 0
    assert invoke("add", "/home/me/src").exit_code == 0

    result = invoke("query", "/")
    assert result.exit_code == 0
    assert result.output == "/home/me/src\n/etc\n"
    assert not lock_path_for(db_path).exists()


def test_success_prints_nothing(invoke):
    invoke("init")
    result = invoke("add", "/a")
    assert result.exit_code == 0
    assert result.output == ""


def test_query_joins_fragments(invoke):
    invoke("init")
    invoke("add", "/home/me/projects/fdb", "/fdb/home")
    result = invoke("query", "home", "fdb")
    assert result.output == "/home/me/projects/fdb\n"


def test_query_sort_option(invoke, db_path):
    store.save([Item("/many", 1, 9), Item("/recent", 2_000_000_000, 1)], db_path)
    assert invoke("query", "-s", "hits", "/").output == "/many\n/recent\n"
    assert invoke("query", "--sort-by", "atime", "/").output == "/recent\n/many\n"


def test_global_sort_option(runner, db_path):
    store.save([Item("/many", 1, 9), Item("/recent", 2_000_000_000, 1)], db_path)
    result = runner.invoke(app, ["-i", str(db_path), "-s", "atime", "query", "/"])
    assert result.output == "/recent\n/many\n"


def test_delete(invoke, db_path):
    invoke("init")
    invoke("add", "/a", "/a/b")
    assert invoke("delete", "/a", "/never-added").exit_code == 0
    assert [i.path for i in store.load(db_path)] == ["/a/b"]


def test_history_size_option(invoke, db_path):
    invoke("init")
    invoke("add", "/a", "/a")
    result = invoke("--history-size", "1", "add", "/b")
    assert result.exit_code == 0
    assert [i.path for i in store.load(db_path)] == ["/a"]


def test_history_size_from_env(invoke, db_path):
    invoke("init")
    invoke("add", "/a", "/a")
    result = invoke("add", "/b", env={"FDB_HISTORY_SIZE": "1"})
    assert result.exit_code == 0
    assert [i.path for i in store.load(db_path)] == ["/a"]


def test_unlimited_flag_beats_env(runner, db_path):
    runner.invoke(app, ["-i", str(db_path), "init"])
    result = runner.invoke(
        app, ["-i", str(db_path), "-u", "add", "/a", "/b", "/c"],
        env={"FDB_HISTORY_SIZE": "1"},
    )
    assert result.exit_code == 0
    assert len(store.load(db_path)) == 3


def test_db_path_from_env(runner, db_path):
    result = runner.invoke(app, ["init"], env={"FDB_DB_PATH": str(db_path)})
    assert result.exit_code == 0
    assert store.load(db_path) == []


def test_classic_aliases(invoke):
    assert invoke("z").exit_code == 0
    assert invoke("a", "/x").exit_code == 0
    assert invoke("q", "x").output == "/x\n"
    assert invoke("d", "/x").exit_code == 0
    assert invoke("q", "x").output == ""


def test_missing_store_reports_error(invoke):
    result = invoke("add", "/a")
    assert result.exit_code == 1
    assert "Error: Store not found" in result.output


def test_corrupt_store_reports_cause_chain(invoke, db_path):
    db_path.write_text(json.dumps({"version": 1, "items": [{"path": "/a"}]}))
    result = invoke("query", "a")
    assert result.exit_code == 1
    assert "Error: Invalid store contents" in result.output
    assert "caused by: Item is missing fields" in result.output


def test_bad_pattern_reports_error(invoke, db_path):
    invoke("init")
    result = invoke("query", "(")
    assert result.exit_code == 1
    assert "Error: Invalid query pattern" in result.output
    assert not lock_path_for(db_path).exists()


def test_add_requires_paths(invoke):
    invoke("init")
    result = invoke("add")
    assert result.exit_code == 2


def test_config_prints_toml(invoke, db_path):
    result = invoke("config")
    assert result.exit_code == 0
    assert f'db_path = "{db_path}"' in result.output
    assert "history_size = 600" in result.output
    assert 'sort_by = "frecency"' in result.output


def test_config_save(runner, tmp_path, db_path):
    config_path = tmp_path / "saved.toml"
    result = runner.invoke(app, [
        "--config", str(config_path), "-i", str(db_path),
        "--history-size", "7", "config", "--save",
    ])
    assert result.exit_code == 0
    assert config_path.exists()

    # Saved values become the defaults for later invocations
    result = runner.invoke(app, ["--config", str(config_path), "config"])
    assert "history_size = 7" in result.output
    assert f'db_path = "{db_path}"' in result.output
