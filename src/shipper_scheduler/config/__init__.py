"""Application configuration helpers."""

from __future__ import annotations

from .controller import ControllerConfig, ReleaseIdScheme, get_controller_config
from .env import env_float, env_int
from .errors import ConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, default_data_dir, get_database_config

__all__ = [
    "ConfigurationError",
    "ControllerConfig",
    "DatabaseConfig",
    "ReleaseIdScheme",
    "configure_logging",
    "default_data_dir",
    "env_float",
    "env_int",
    "get_controller_config",
    "get_database_config",
]
