"""Site migration exceptions."""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union


class ErrorKind(str, Enum):
    """Category of a migration failure."""

    IO = 'io'
    PARSE = 'parse'
    WRITE = 'write'
    DETECTION = 'detection'


class MigrationError(Exception):
    """Base exception for site migration errors."""

    kind: ErrorKind = ErrorKind.IO

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        kind: Optional[ErrorKind] = None,
    ):
        """Initialize migration error.

        Args:
            message: Error message
            path: Filesystem path the error relates to
            kind: Override for the error category
        """
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        if self.path is not None:
            return f'{self.message} ({self.path})'
        return self.message


class MigrationIOError(MigrationError):
    """Reading, copying or deleting a filesystem entry failed."""

    kind = ErrorKind.IO


class MigrationParseError(MigrationError):
    """A structured source document could not be parsed."""

    kind = ErrorKind.PARSE


class MigrationWriteError(MigrationError):
    """A destination file could not be created or written."""

    kind = ErrorKind.WRITE


class EngineDetectionError(MigrationError):
    """No engine recognises a source directory."""

    kind = ErrorKind.DETECTION


class UnknownEngineError(MigrationError):
    """An engine was requested by a name the registry does not know."""

    kind = ErrorKind.DETECTION

    def __init__(self, name: str, available: Optional[List[str]] = None):
        self.name = name
        self.available = available or []
        message = f'Unsupported engine: {name}'
        if self.available:
            message += f'. Supported engines: {", ".join(self.available)}'
        super().__init__(message)


class FrontMatterError(MigrationParseError):
    """Front matter in a content file is malformed."""
