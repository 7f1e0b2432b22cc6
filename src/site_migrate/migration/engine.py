"""Migration engine contract and the uniform migration pipeline."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Tuple

from loguru import logger

from ..config.config import MigrationOptions
from ..utils.exceptions import MigrationError, MigrationIOError
from ..utils.fs import create_dir_if_not_exists, remove_tree
from .ledger import MigrationResult
from .stages import Stage


class MigrationEngine(ABC):
    """Converts sites built with one source generator.

    Subclasses declare how to recognise their generator and which stages
    convert it. Instances hold no per-run state, so one instance can serve
    any number of runs.
    """

    name: str = ''
    description: str = ''
    aliases: Tuple[str, ...] = ()

    def __init__(self):
        self.logger = logger.bind(component=f'engine:{self.name.lower()}')

    @abstractmethod
    def detect(self, source_dir: Path) -> bool:
        """Check whether a directory looks like a site for this engine.

        Args:
            source_dir: Root of the source site

        Returns:
            True if the engine's marker files are present
        """

    @abstractmethod
    def stages(self) -> List[Stage]:
        """Ordered pipeline stages for this engine."""

    def migrate(self, options: MigrationOptions) -> MigrationResult:
        """Migrate a site into the destination directory.

        Args:
            options: Source, destination and run flags

        Returns:
            Ledger of every change made

        Raises:
            MigrationError: If any stage fails; no partial result is returned
        """
        source_dir = Path(options.source_dir)
        dest_dir = Path(options.dest_dir)
        self.logger.info(f'Migrating {self.name} site {source_dir} -> {dest_dir}')

        try:
            if options.clean and dest_dir.exists():
                self.logger.info(f'Cleaning destination {dest_dir}')
                remove_tree(dest_dir)
            create_dir_if_not_exists(dest_dir)

            result = MigrationResult(engine_name=self.name)
            for stage in self.stages():
                self.logger.debug(f'Running stage {stage.name}')
                stage.run(source_dir, dest_dir, options.verbose, result)

        except MigrationError as e:
            self.logger.error(f'{self.name} migration failed: {e}')
            raise
        except OSError as e:
            self.logger.error(f'{self.name} migration failed: {e}')
            raise MigrationIOError(
                f'{self.name} migration failed: {e}', path=e.filename
            ) from e

        self.logger.info(
            f'{self.name} migration finished: {len(result.changes)} changes, '
            f'{len(result.warnings)} warnings, {len(result.errors)} errors'
        )
        return result

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.name}>'
