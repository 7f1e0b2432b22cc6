"""Configuration models."""

from .config import (
    Config,
    MigrateConfig,
    ExtensionsConfig,
    LoggingConfig,
    MigrationOptions,
)

__all__ = [
    'Config',
    'MigrateConfig',
    'ExtensionsConfig',
    'LoggingConfig',
    'MigrationOptions',
]
