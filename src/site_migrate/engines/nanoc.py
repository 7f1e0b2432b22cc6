"""Nanoc sites."""

from pathlib import Path, PurePosixPath
from typing import List

from ..migration.detection import has_dir, has_file
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    ReadmeStage,
    Stage,
    parse_yaml,
)
from ..migration.transforms import chain, erb_to_liquid, strip_template_suffix

ERB_SUFFIXES = {'.html.erb': '.html', '.md.erb': '.md', '.erb': '.html', '.rhtml': '.html'}


def _rename_template(relative: str) -> str:
    return strip_template_suffix(relative, ERB_SUFFIXES)


def _rename_partial(relative: str) -> str:
    path = PurePosixPath(_rename_template(relative))
    name = path.name.lstrip('_')
    return (path.parent / name).as_posix() if path.parent.name else name


def _is_haml(relative: str) -> bool:
    return relative.endswith(('.haml', '.slim'))


class NanocEngine(MigrationEngine):
    """Migrates Nanoc sites, converting ERB layouts to Liquid."""

    name = 'Nanoc'
    description = 'Ruby static site generator driven by a Rules file'

    def detect(self, source_dir: Path) -> bool:
        if has_file(source_dir, 'nanoc.yaml', 'Rules', 'Rules.rb'):
            return True
        return has_file(source_dir, 'config.yaml') and has_dir(source_dir, 'content')

    def stages(self) -> List[Stage]:
        erb = chain(erb_to_liquid)
        template_suffixes = ('.erb', '.rhtml', '.html', '.md')
        return [
            ConfigStage(
                self.name,
                ['nanoc.yaml', 'config.yaml'],
                parse_yaml,
                fields={
                    'title': ['title', 'site.title', 'site_name'],
                    'description': ['description', 'site.description'],
                    'author': ['author', 'site.author', 'author_name'],
                    'url': ['base_url', 'site.url'],
                },
            ),
            CopyTreeStage(
                'content',
                ['content'],
                '',
                transform=erb,
                transform_suffixes=template_suffixes,
                rename=_rename_template,
                review=_is_haml,
                review_message='Haml and Slim content must be converted by hand',
                label='Content file',
            ),
            CopyTreeStage(
                'layouts',
                ['layouts'],
                '_layouts',
                transform=erb,
                transform_suffixes=template_suffixes,
                rename=_rename_template,
                exclude=['partials/**'],
                review=_is_haml,
                review_message='Haml and Slim layouts must be converted by hand',
                label='Layout',
            ),
            CopyTreeStage(
                'partials',
                ['layouts/partials'],
                '_includes',
                transform=erb,
                transform_suffixes=template_suffixes,
                rename=_rename_partial,
                label='Partial',
            ),
            CopyTreeStage('data', ['data'], '_data', label='Data file'),
            CopyTreeStage(
                'lib',
                ['lib'],
                '_lib_reference',
                review=lambda relative: relative.endswith('.rb'),
                review_message='Nanoc helpers in lib/ are Ruby and must be reimplemented',
                label='Helper',
            ),
            CopyTreeStage('static', ['static', 'public'], '', label='Static file'),
            ReadmeStage(
                self.name,
                notes=[
                    'Routing and filtering rules from the Rules file were not migrated.',
                    'Helpers from lib/ are kept in _lib_reference for porting.',
                ],
            ),
        ]
