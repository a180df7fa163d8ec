"""Logging setup for the scheduler process."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(threadName)s] %(message)s"

# Library loggers that are chatty at INFO during startup migrations and queries.
NOISY_LOGGERS = ("alembic", "sqlalchemy.engine")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger for a long-running controller.

    Worker threads are named, so the format carries ``threadName``. Unless
    ``level`` is DEBUG, the migration and SQL engine loggers are held at WARNING.
    Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    library_level = logging.NOTSET if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
