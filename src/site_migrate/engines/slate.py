"""Slate API documentation sites."""

from pathlib import Path, PurePosixPath
from typing import Any, Dict, List

from ..migration.detection import file_contains, has_file
from ..migration.engine import MigrationEngine
from ..migration.stages import ConfigStage, CopyTreeStage, ReadmeStage, Stage
from ..migration.transforms import (
    chain,
    erb_to_liquid,
    sass_asset_helpers,
    split_front_matter,
    strip_template_suffix,
)

ERB_SUFFIXES = {'.html.md': '.md', '.html.erb': '.html', '.erb': '.html'}

INCLUDES_README = """# Includes Directory

Markdown sections migrated from Slate's `source/includes`. Slate pulls these
in through the `includes:` front matter list; in Liquid, include them
explicitly with `{% include errors.md %}` where they belong.
"""


def parse_index_front_matter(text: str) -> Dict[str, Any]:
    """Slate keeps its settings in the front matter of ``index.html.md``."""
    metadata, _, _ = split_front_matter(text)
    return metadata


def _rename_template(relative: str) -> str:
    return strip_template_suffix(relative, ERB_SUFFIXES)


def _rename_include(relative: str) -> str:
    path = PurePosixPath(relative)
    name = path.name.lstrip('_')
    return (path.parent / name).as_posix() if path.parent.name else name


class SlateEngine(MigrationEngine):
    """Migrates Slate API docs (a Middleman project) to a Jekyll layout."""

    name = 'Slate'
    description = 'Middleman-based API documentation generator'

    def detect(self, source_dir: Path) -> bool:
        return file_contains(source_dir, 'Gemfile', ["'slate'", '"slate"']) or has_file(
            source_dir,
            'source/index.html.md',
            'source/layouts/layout.erb',
            'source/stylesheets/_variables.scss',
        )

    def stages(self) -> List[Stage]:
        erb = chain(erb_to_liquid)
        return [
            ConfigStage(
                self.name,
                ['source/index.html.md'],
                parse_index_front_matter,
                fields={
                    'title': ['title'],
                    'language_tabs': ['language_tabs'],
                    'toc_footers': ['toc_footers'],
                    'search': ['search'],
                },
            ),
            CopyTreeStage(
                'content',
                ['source'],
                '',
                transform=erb,
                transform_suffixes=('.erb',),
                rename=_rename_template,
                exclude=[
                    'layouts/**',
                    'includes/**',
                    'stylesheets/**',
                    'javascripts/**',
                    'images/**',
                    'fonts/**',
                ],
                label='Content file',
            ),
            CopyTreeStage(
                'layouts',
                ['source/layouts'],
                '_layouts',
                transform=erb,
                rename=_rename_template,
                label='Layout',
            ),
            CopyTreeStage(
                'includes',
                ['source/includes'],
                '_includes',
                rename=_rename_include,
                readme=INCLUDES_README,
                label='Include file',
            ),
            CopyTreeStage(
                'styles',
                ['source/stylesheets'],
                'assets/css',
                transform=chain(sass_asset_helpers),
                transform_suffixes=('.css', '.scss', '.sass'),
                label='Stylesheet',
            ),
            CopyTreeStage(
                'javascripts', ['source/javascripts'], 'assets/js', label='Script'
            ),
            CopyTreeStage('images', ['source/images'], 'assets/images', label='Image'),
            CopyTreeStage('fonts', ['source/fonts'], 'assets/fonts', label='Font'),
            ReadmeStage(
                self.name,
                notes=[
                    'Language tabs and the table of contents depend on Slate\'s '
                    'JavaScript, copied to assets/js.',
                    'Sprockets `//= require` directives in scripts must be '
                    'replaced with explicit script tags.',
                ],
            ),
        ]
