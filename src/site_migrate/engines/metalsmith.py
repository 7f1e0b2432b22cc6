"""Metalsmith sites."""

from pathlib import Path, PurePosixPath
from typing import List

from ..migration.detection import has_file, package_json_depends_on
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    PostsStage,
    ReadmeStage,
    Stage,
    parse_json,
)
from ..migration.transforms import chain, handlebars_to_liquid, strip_template_suffix

HANDLEBARS_SUFFIXES = {'.hbs': '.html', '.handlebars': '.html'}


def _rename_template(relative: str) -> str:
    return strip_template_suffix(relative, HANDLEBARS_SUFFIXES)


def _rename_partial(relative: str) -> str:
    path = PurePosixPath(relative)
    name = _rename_template(path.name.lstrip('_'))
    if '.' not in name:
        name += '.html'
    return (path.parent / name).as_posix() if path.parent.name else name


class MetalsmithEngine(MigrationEngine):
    """Migrates Metalsmith sites, converting Handlebars templates to Liquid."""

    name = 'Metalsmith'
    description = 'Pluggable JavaScript static site generator'

    def detect(self, source_dir: Path) -> bool:
        return has_file(
            source_dir, 'metalsmith.json', 'metalsmith.js'
        ) or package_json_depends_on(source_dir, 'metalsmith')

    def stages(self) -> List[Stage]:
        handlebars = chain(handlebars_to_liquid)
        return [
            ConfigStage(
                self.name,
                ['metalsmith.json', 'package.json'],
                parse_json,
                fields={
                    'title': ['metadata.sitename', 'metadata.title', 'metadata.site.title', 'name'],
                    'description': ['metadata.description', 'description'],
                    'author': ['metadata.author', 'author'],
                    'url': ['metadata.siteurl', 'metadata.url', 'homepage'],
                },
            ),
            PostsStage('posts', ['src/posts', 'src/blog']),
            CopyTreeStage(
                'content',
                ['src'],
                '',
                transform=handlebars,
                transform_suffixes=('.html', '.hbs', '.handlebars'),
                rename=_rename_template,
                exclude=['posts/**', 'blog/**'],
                label='Content file',
            ),
            CopyTreeStage(
                'layouts',
                ['layouts', 'templates'],
                '_layouts',
                transform=handlebars,
                rename=_rename_template,
                exclude=['partials/**'],
                missing_warning='No Metalsmith layouts directory found',
                label='Layout',
            ),
            CopyTreeStage(
                'partials',
                ['partials', 'layouts/partials', 'templates/partials'],
                '_includes',
                transform=handlebars,
                rename=_rename_partial,
                label='Partial',
            ),
            CopyTreeStage(
                'static', ['static', 'public', 'assets'], 'assets', label='Static file'
            ),
            ReadmeStage(
                self.name,
                notes=[
                    'Handlebars helpers have no Liquid equivalent and were left in place.',
                    'Metalsmith plugins (collections, permalinks) must be replaced '
                    'with _config.yml settings.',
                ],
            ),
        ]
