"""Zola sites."""

from pathlib import Path, PurePosixPath
from typing import List

from ..migration.detection import has_dirs, has_file
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    PostsStage,
    ReadmeStage,
    Stage,
    parse_toml,
)
from ..migration.transforms import chain, ensure_front_matter, jinja_to_liquid

POST_SECTIONS = ['blog/**', 'posts/**']


def _rename_section_index(relative: str) -> str:
    path = PurePosixPath(relative)
    if path.name.startswith('_index.'):
        path = path.with_name(path.name[1:])
    return path.as_posix()


def _page(text: str, relative: str) -> str:
    return ensure_front_matter(text, {'layout': 'page'})


class ZolaEngine(MigrationEngine):
    """Migrates Zola sites, converting Tera templates to Liquid."""

    name = 'Zola'
    description = 'Rust static site generator using Tera templates'

    def detect(self, source_dir: Path) -> bool:
        return has_file(source_dir, 'config.toml') and has_dirs(
            source_dir, 'templates', 'content'
        )

    def stages(self) -> List[Stage]:
        tera = chain(jinja_to_liquid)
        return [
            ConfigStage(
                self.name,
                ['config.toml', 'zola.toml'],
                parse_toml,
                fields={
                    'title': ['title'],
                    'description': ['description'],
                    'author': ['extra.author', 'author'],
                    'url': ['base_url'],
                    'lang': ['default_language'],
                },
            ),
            PostsStage('posts', ['content/blog', 'content/posts'], skip=['_index.md']),
            CopyTreeStage(
                'pages',
                ['content'],
                '',
                transform=_page,
                transform_suffixes=('.md', '.markdown'),
                rename=_rename_section_index,
                exclude=POST_SECTIONS,
                label='Page',
            ),
            CopyTreeStage(
                'templates',
                ['templates'],
                '_layouts',
                transform=tera,
                include=['*.html'],
                exclude=['partials/**', 'macros/**', 'shortcodes/**'],
                label='Template',
            ),
            CopyTreeStage(
                'partials',
                ['templates/partials'],
                '_includes',
                transform=tera,
                label='Partial',
            ),
            CopyTreeStage(
                'macros',
                ['templates/macros'],
                '_includes/macros',
                transform=tera,
                review=lambda relative: True,
                review_message='Tera macros have no Liquid equivalent and need restructuring',
                label='Macro',
            ),
            CopyTreeStage(
                'shortcodes',
                ['templates/shortcodes'],
                '_includes/shortcodes',
                transform=tera,
                review=lambda relative: True,
                review_message='Zola shortcodes must be rewritten as Liquid includes',
                label='Shortcode',
            ),
            CopyTreeStage('sass', ['sass'], '_sass', label='Stylesheet'),
            CopyTreeStage('static', ['static'], '', label='Static file'),
            CopyTreeStage('data', ['data'], '_data', label='Data file'),
            ReadmeStage(
                self.name,
                notes=[
                    'TOML front matter was converted to YAML.',
                    'Section `_index.md` files became `index.md` pages.',
                    'Tera filters without a Liquid counterpart were left in place.',
                ],
            ),
        ]
