"""Configuration management for migledger."""

from migledger.config.loader import load_config
from migledger.config.models import Config, DynamoDBConfig, LoggingConfig, StorageConfig
from migledger.config.options import (
    LedgerOptions,
    Option,
    resolve_options,
    with_lock_id,
    with_lock_retry_interval,
    with_lock_table_name,
    with_table_name,
)

__all__ = [
    "Config",
    "DynamoDBConfig",
    "LedgerOptions",
    "LoggingConfig",
    "Option",
    "StorageConfig",
    "load_config",
    "resolve_options",
    "with_lock_id",
    "with_lock_retry_interval",
    "with_lock_table_name",
    "with_table_name",
]
