from __future__ import annotations

from typing import TYPE_CHECKING

from shipper_scheduler.config import DatabaseConfig, default_data_dir, get_database_config

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def test_explicit_uri_wins_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db/shipper")

    config = get_database_config(database_uri="sqlite+pysqlite:///:memory:")

    assert config.uri == "sqlite+pysqlite:///:memory:"


def test_database_uri_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db/shipper")

    assert get_database_config().uri == "postgresql+psycopg://db/shipper"


def test_database_uri_falls_back_to_data_dir(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("SHIPPER_SCHEDULER_DATA_DIR", str(tmp_path / "data"))

    uri = get_database_config().uri

    assert uri == f"sqlite+pysqlite:///{(tmp_path / 'data').resolve() / 'shipper.db'}"
    assert (tmp_path / "data").is_dir()


def test_default_data_dir_uses_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("SHIPPER_SCHEDULER_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert default_data_dir() == (tmp_path / "shipper-scheduler").resolve()


def test_sqlite_connections_may_cross_threads() -> None:
    sqlite = DatabaseConfig(uri="sqlite+pysqlite:///shipper.db")
    postgres = DatabaseConfig(uri="postgresql+psycopg://db/shipper")

    assert sqlite.engine_options() == {"connect_args": {"check_same_thread": False}}
    assert postgres.engine_options() == {}
