from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest
from sqlalchemy import inspect

from watchlist_sync.config import get_settings
from watchlist_sync.db import cli
from watchlist_sync.db.sessions import create_db_engine


@pytest.fixture
def sqlite_env(monkeypatch, tmp_path: Path) -> str:
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


def test_create_tables(sqlite_env: str) -> None:
    cli.create_tables()
    engine = create_db_engine(sqlite_env)
    try:
        assert {"user", "watchlist", "alert"} <= set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


@pytest.mark.parametrize(
    "command, argv, expected",
    [
        (cli.migrate, [], ["upgrade", "head"]),
        (cli.migrate, ["0001"], ["upgrade", "0001"]),
        (cli.downgrade, [], ["downgrade", "-1"]),
        (cli.downgrade, ["base", "--sql"], ["downgrade", "base", "--sql"]),
        (cli.generate, ["-m", "add index"], ["revision", "--autogenerate", "-m", "add index"]),
    ],
)
def test_alembic_commands(monkeypatch, sqlite_env, command, argv, expected) -> None:
    calls = []

    def fake_run(args, **kwargs):
        calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(cli.subprocess, "run", fake_run)
    monkeypatch.setattr(sys, "argv", ["db-command", *argv])

    with pytest.raises(SystemExit) as exc_info:
        command()

    assert exc_info.value.code == 0
    args, kwargs = calls[0]
    assert args[1:3] == ["-m", "alembic"]
    assert args[3:] == expected
    assert (Path(kwargs["cwd"]) / "alembic.ini").exists()
