"""Gatsby sites."""

from pathlib import Path
from typing import List

from ..migration.detection import has_file, package_json_depends_on
from ..migration.engine import MigrationEngine
from ..migration.stages import NotImplementedStage, Stage


class GatsbyEngine(MigrationEngine):
    """Recognises Gatsby sites; conversion is not available yet."""

    name = 'Gatsby'
    description = 'React-based sites built with Gatsby (detection only)'

    def detect(self, source_dir: Path) -> bool:
        return has_file(
            source_dir, 'gatsby-config.js', 'gatsby-config.ts', 'gatsby-config.mjs'
        ) or package_json_depends_on(source_dir, 'gatsby')

    def stages(self) -> List[Stage]:
        return [NotImplementedStage(self.name)]
