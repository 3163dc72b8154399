"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_int
from .errors import ConfigurationError, InvalidSettingError
from .importer import DEFAULT_LINE_ITEM_LIMIT, ImporterConfig, get_importer_config
from .logging import OUTCOME_LOGGER_NAME, configure_logging
from .storage import DatabaseConfig, get_data_dir, get_database_config

__all__ = [
    "DEFAULT_LINE_ITEM_LIMIT",
    "OUTCOME_LOGGER_NAME",
    "ConfigurationError",
    "DatabaseConfig",
    "ImporterConfig",
    "InvalidSettingError",
    "configure_logging",
    "env_flag",
    "env_int",
    "get_data_dir",
    "get_database_config",
    "get_importer_config",
]
