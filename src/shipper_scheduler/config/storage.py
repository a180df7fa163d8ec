"""Where the object store lives and how to connect to it."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

APP_DIR_NAME: Final[str] = "shipper-scheduler"
DEFAULT_DB_FILENAME: Final[str] = "shipper.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str

    @property
    def is_sqlite(self) -> bool:
        return self.uri.startswith("sqlite")

    def engine_options(self) -> dict[str, Any]:
        """Keyword arguments for ``create_engine``.

        Informer and worker threads share pooled connections, so SQLite must not
        pin a connection to the thread that opened it.
        """

        if self.is_sqlite:
            return {"connect_args": {"check_same_thread": False}}
        return {}


def default_data_dir() -> Path:
    env_dir = os.getenv("SHIPPER_SCHEDULER_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    base = os.getenv("XDG_DATA_HOME")
    base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_database_config(*, database_uri: str | None = None) -> DatabaseConfig:
    """Resolve the store URI: explicit value, then ``DATABASE_URI``, then a local SQLite file."""

    uri = database_uri or os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    data_dir = default_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{data_dir / DEFAULT_DB_FILENAME}")
