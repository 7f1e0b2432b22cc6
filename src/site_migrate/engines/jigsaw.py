"""Jigsaw (Tighten) sites."""

from pathlib import Path, PurePosixPath
from typing import List

from ..migration.detection import file_contains, has_file
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    PostsStage,
    ReadmeStage,
    Stage,
    parse_assignments,
)
from ..migration.transforms import blade_to_liquid, chain, strip_template_suffix

BLADE_SUFFIXES = {'.blade.php': '.html', '.blade.md': '.md', '.blade.markdown': '.md'}

PHP_SETTINGS = {
    key: rf"""['"]{key}['"]\s*=>\s*['"]([^'"]*)['"]"""
    for key in ('siteName', 'title', 'siteDescription', 'description', 'author', 'baseUrl')
}


def _rename_template(relative: str) -> str:
    return strip_template_suffix(relative, BLADE_SUFFIXES)


def _rename_partial(relative: str) -> str:
    path = PurePosixPath(_rename_template(relative))
    name = path.name.lstrip('_')
    return (path.parent / name).as_posix() if path.parent.name else name


class JigsawEngine(MigrationEngine):
    """Migrates Jigsaw sites, converting Blade templates to Liquid."""

    name = 'Jigsaw'
    description = 'PHP static site generator using Blade templates'

    def detect(self, source_dir: Path) -> bool:
        return has_file(source_dir, 'config.php', 'bootstrap.php') or file_contains(
            source_dir, 'composer.json', ['tightenco/jigsaw']
        )

    def stages(self) -> List[Stage]:
        blade = chain(blade_to_liquid)
        return [
            ConfigStage(
                self.name,
                ['config.php'],
                parse_assignments(PHP_SETTINGS),
                fields={
                    'title': ['siteName', 'title'],
                    'description': ['siteDescription', 'description'],
                    'author': ['author'],
                    'url': ['baseUrl'],
                },
                preserve_original=True,
                review_warning=(
                    'config.php is PHP; computed settings, helpers and collections '
                    'must be ported by hand'
                ),
            ),
            PostsStage('posts', ['source/_posts'], body_transform=blade, rename=_rename_template),
            CopyTreeStage(
                'content',
                ['source'],
                '',
                transform=blade,
                transform_suffixes=('.php', '.md', '.markdown', '.html'),
                rename=_rename_template,
                exclude=['_posts/**', '_layouts/**', '_partials/**', '_components/**', '_assets/**'],
                label='Content file',
            ),
            CopyTreeStage(
                'layouts',
                ['source/_layouts'],
                '_layouts',
                transform=blade,
                rename=_rename_template,
                label='Layout',
            ),
            CopyTreeStage(
                'partials',
                ['source/_partials', 'source/_components'],
                '_includes',
                transform=blade,
                rename=_rename_partial,
                label='Partial',
            ),
            CopyTreeStage(
                'assets',
                ['source/_assets'],
                '_assets',
                review=lambda relative: True,
                review_message='Laravel Mix asset sources need a new build pipeline',
                label='Asset source',
            ),
            ReadmeStage(
                self.name,
                notes=[
                    'Blade directives without a Liquid counterpart were left in place.',
                    'Collections declared in config.php must be added to _config.yml.',
                ],
            ),
        ]
