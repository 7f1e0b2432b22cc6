"""Shared utilities: logging, errors and filesystem helpers."""

from .exceptions import (
    ErrorKind,
    MigrationError,
    MigrationIOError,
    MigrationParseError,
    MigrationWriteError,
    EngineDetectionError,
    UnknownEngineError,
    FrontMatterError,
)

__all__ = [
    'ErrorKind',
    'MigrationError',
    'MigrationIOError',
    'MigrationParseError',
    'MigrationWriteError',
    'EngineDetectionError',
    'UnknownEngineError',
    'FrontMatterError',
]
