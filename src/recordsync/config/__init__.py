"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, optional_env_var
from .errors import ConfigurationError, InvalidSettingError
from .importer import ImporterConfig, get_importer_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "ImporterConfig",
    "InvalidSettingError",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "env_float",
    "get_database_config",
    "get_importer_config",
    "get_storage_config",
    "optional_env_var",
]
