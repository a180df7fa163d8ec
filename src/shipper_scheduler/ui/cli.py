from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import threading
from signal import SIGINT, SIGTERM, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from shipper_scheduler.app import open_sqlalchemy_store, run_scheduler, seed_cluster, seed_release
from shipper_scheduler.config import ConfigurationError, configure_logging, get_controller_config
from shipper_scheduler.domain.scheduling import split_key

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Schedule releases onto clusters")
    parser.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to DATABASE_URI or a local SQLite file)",
    )
    parser.add_argument(
        "--log-level",
        choices=_LOG_LEVELS,
        default="INFO",
        help="Logging verbosity (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run the schedule controller")
    run.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of concurrent workers (defaults to config)",
    )

    cluster = subparsers.add_parser("seed-cluster", help="Register a cluster")
    cluster.add_argument("name", type=str, help="Cluster name")

    release = subparsers.add_parser(
        "seed-release",
        help="Create a release waiting for scheduling",
    )
    release.add_argument("key", type=str, help="Release key as NAMESPACE/NAME")

    return parser.parse_args(list(argv))


def _parse_release_key(value: str) -> tuple[str, str]:
    namespace, name = split_key(value)
    if not namespace:
        raise ValueError(f"Release key must be NAMESPACE/NAME, got {value!r}")
    return namespace, name


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=getattr(logging, parsed_args.log_level))
        release_key = None
        if parsed_args.command == "seed-release":
            release_key = _parse_release_key(parsed_args.key)
        config = get_controller_config()
        if parsed_args.command == "run" and parsed_args.workers is not None:
            config = dataclasses.replace(config, workers=parsed_args.workers)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "run":
            stop = threading.Event()
            _install_signal_handlers(stop)
            run_scheduler(stop, config=config, database_uri=parsed_args.database_uri)
        elif parsed_args.command == "seed-cluster":
            seed_cluster(open_sqlalchemy_store(parsed_args.database_uri), parsed_args.name)
        elif parsed_args.command == "seed-release" and release_key is not None:
            namespace, name = release_key
            seed_release(open_sqlalchemy_store(parsed_args.database_uri), namespace, name)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error in schedule controller")
        sys.exit(1)


def _install_signal_handlers(stop: threading.Event) -> None:
    def handler(_signal_received: int, _frame: FrameType | None) -> None:
        log.info("Stop requested; finishing in-flight work")
        stop.set()

    signal(SIGINT, handler)
    signal(SIGTERM, handler)


if __name__ == "__main__":
    main()
