"""Application configuration helpers."""

from __future__ import annotations

from .env import choice_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .firestore import FirestoreConfig, get_firestore_config
from .http_resilience import ResilienceConfig, RetryPolicy
from .logging import configure_logging, log_level_from_env
from .storage import DatabaseConfig, data_dir, get_database_config
from .store import StoreBackend, StoreConfig, get_store_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "FirestoreConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "ResilienceConfig",
    "RetryPolicy",
    "StoreBackend",
    "StoreConfig",
    "choice_env_var",
    "configure_logging",
    "data_dir",
    "get_database_config",
    "get_firestore_config",
    "get_store_config",
    "log_level_from_env",
    "optional_env_var",
    "require_env_vars",
]
