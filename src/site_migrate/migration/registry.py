"""Engine registry and source-site detection."""

from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from loguru import logger

from ..utils.exceptions import EngineDetectionError, UnknownEngineError
from .engine import MigrationEngine


class EngineRegistry:
    """Ordered collection of migration engines.

    Order matters: detection picks the first engine that recognises a
    source directory, so engines with specific marker files must come
    before engines with generic heuristics.
    """

    def __init__(self, engines: Iterable[MigrationEngine]):
        self._engines: Tuple[MigrationEngine, ...] = tuple(engines)
        self.logger = logger.bind(component='EngineRegistry')

    def __iter__(self) -> Iterator[MigrationEngine]:
        return iter(self._engines)

    def __len__(self) -> int:
        return len(self._engines)

    def names(self) -> List[str]:
        return [engine.name for engine in self._engines]

    def select(self, source_dir: Path) -> Optional[MigrationEngine]:
        """Return the first engine that recognises ``source_dir``."""
        source_dir = Path(source_dir)
        for engine in self._engines:
            if engine.detect(source_dir):
                self.logger.debug(f'Detected {engine.name} site in {source_dir}')
                return engine
        return None

    def candidates(self, source_dir: Path) -> List[MigrationEngine]:
        """Return every engine that recognises ``source_dir``, in order."""
        source_dir = Path(source_dir)
        return [engine for engine in self._engines if engine.detect(source_dir)]

    def get(self, name: str) -> MigrationEngine:
        """Look up an engine by name or alias, ignoring case.

        Raises:
            UnknownEngineError: If no engine has that name
        """
        wanted = name.strip().lower()
        for engine in self._engines:
            if wanted == engine.name.lower() or wanted in engine.aliases:
                return engine
        raise UnknownEngineError(name, available=[n.lower() for n in self.names()])

    def resolve(
        self, source_dir: Path, engine: Optional[str] = None
    ) -> MigrationEngine:
        """Pick the engine for a run.

        Args:
            source_dir: Root of the source site
            engine: Explicit engine name, skips detection when given

        Returns:
            The engine to migrate with

        Raises:
            UnknownEngineError: If ``engine`` is not registered
            EngineDetectionError: If no engine recognises the site
        """
        if engine:
            return self.get(engine)

        selected = self.select(source_dir)
        if selected is None:
            raise EngineDetectionError(
                'Could not detect the site generator', path=source_dir
            )
        return selected


def default_registry() -> EngineRegistry:
    """Registry of all built-in engines in detection order."""
    from ..engines import ENGINE_CLASSES

    return EngineRegistry(engine_class() for engine_class in ENGINE_CLASSES)
