"""Extension loading interface.

Migrations never call into extensions. The interface exists so that a
loader can be plugged in later without touching the engines.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from loguru import logger


class ExtensionHandle(BaseModel):
    """Opaque reference to a loaded extension."""

    path: Path = Field(..., description='Where the extension was loaded from')
    loaded: bool = Field(default=False, description='Extension code is active')
    options: Dict[str, Any] = Field(
        default_factory=dict, description='Options passed at initialisation'
    )


class ExtensionLoader(ABC):
    """Capability interface for loading site extensions."""

    @abstractmethod
    def load(self, path: Path) -> ExtensionHandle:
        """Load the extension at ``path``."""

    @abstractmethod
    def initialize(
        self, handle: ExtensionHandle, config: Optional[Dict[str, Any]] = None
    ) -> None:
        """Pass configuration to a loaded extension."""

    @abstractmethod
    def invoke(
        self, handle: ExtensionHandle, hook: str, payload: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Call a named hook on the extension and return its response."""

    @abstractmethod
    def unload(self, handle: ExtensionHandle) -> None:
        """Release the extension."""


class NullExtensionLoader(ExtensionLoader):
    """Loader that accepts extension paths but never runs any code."""

    def __init__(self):
        self.logger = logger.bind(component='extensions')

    def load(self, path: Path) -> ExtensionHandle:
        self.logger.warning(f'Extension loading is not implemented; ignoring {path}')
        return ExtensionHandle(path=Path(path))

    def initialize(
        self, handle: ExtensionHandle, config: Optional[Dict[str, Any]] = None
    ) -> None:
        handle.options = dict(config or {})

    def invoke(
        self, handle: ExtensionHandle, hook: str, payload: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        self.logger.debug(f'Hook {hook} not dispatched to inert extension {handle.path}')
        return None

    def unload(self, handle: ExtensionHandle) -> None:
        handle.loaded = False
