"""Eleventy (11ty) sites."""

from pathlib import Path
from typing import List

from ..migration.detection import has_file, package_json_depends_on
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    GitignoreStage,
    PostsStage,
    ReadmeStage,
    Stage,
    parse_json,
)
from ..migration.transforms import chain, jinja_to_liquid, strip_template_suffix

NUNJUCKS_SUFFIXES = {'.njk': '.html', '.liquid': '.html'}

INCLUDES_README = """# Includes Directory

This directory contains include files migrated from Eleventy.

## Include Format

Includes are rendered with Liquid and used from templates and content with
`{% include filename.html %}`. They can receive variables from the parent
template.

## Changes from Eleventy

- Eleventy supports several template languages (Nunjucks, Handlebars, ...);
  only Liquid is supported here.
- Some includes may need syntax conversion to work properly.
- Nunjucks macros have no direct Liquid equivalent and must be restructured.
"""

CONTENT_DIRS = [
    '_includes/**',
    '_layouts/**',
    '_data/**',
    '_site/**',
    'node_modules/**',
    'includes/**',
    'data/**',
    'posts/**',
    'blog/**',
    'content/posts/**',
    'assets/**',
    'public/**',
    'static/**',
    'img/**',
    'images/**',
    'css/**',
    'js/**',
    'README.md',
]


def _rename_template(relative: str) -> str:
    return strip_template_suffix(relative, NUNJUCKS_SUFFIXES)


def _non_liquid(relative: str) -> bool:
    return not relative.endswith(('.html', '.liquid'))


class EleventyEngine(MigrationEngine):
    """Migrates Eleventy sites, converting Nunjucks templates to Liquid."""

    name = 'Eleventy'
    description = 'JavaScript static site generator (11ty)'
    aliases = ('11ty',)

    def detect(self, source_dir: Path) -> bool:
        return has_file(
            source_dir,
            '.eleventy.js',
            '.eleventy.cjs',
            'eleventy.config.js',
            'eleventy.config.cjs',
            'eleventy.config.mjs',
        ) or package_json_depends_on(source_dir, '@11ty/eleventy')

    def stages(self) -> List[Stage]:
        nunjucks = chain(jinja_to_liquid)
        return [
            ConfigStage(
                self.name,
                [
                    '_data/site.json',
                    '_data/metadata.json',
                    'src/_data/site.json',
                    'src/_data/metadata.json',
                    'package.json',
                ],
                parse_json,
                fields={
                    'title': ['title', 'name'],
                    'description': ['description'],
                    'author': ['author.name', 'author'],
                    'url': ['url', 'baseUrl'],
                },
            ),
            PostsStage(
                'posts',
                ['posts', 'blog', 'src/posts', 'src/blog', 'content/posts'],
            ),
            CopyTreeStage(
                'pages',
                ['src', ''],
                '',
                transform=nunjucks,
                transform_suffixes=('.njk', '.liquid', '.html'),
                rename=_rename_template,
                only=['*.md', '*.markdown', '*.njk', '*.liquid', '*.html'],
                exclude=CONTENT_DIRS,
                label='Page',
            ),
            CopyTreeStage(
                'layouts',
                ['_layouts', 'src/_layouts', '_includes/layouts', 'src/_includes/layouts'],
                '_layouts',
                transform=nunjucks,
                rename=_rename_template,
                label='Layout',
            ),
            CopyTreeStage(
                'includes',
                ['_includes', 'src/_includes', 'includes', 'src/includes'],
                '_includes',
                exclude=['layouts/**'],
                review=_non_liquid,
                review_message='Includes with a non-Liquid extension may need conversion',
                readme=INCLUDES_README,
                missing_warning=(
                    'No _includes directory found. Eleventy includes need to be '
                    'created manually.'
                ),
                label='Include file',
            ),
            CopyTreeStage(
                'data',
                ['_data', 'src/_data', 'data'],
                '_data',
                skip=['*.js', '*.cjs', '*.mjs'],
                label='Data file',
            ),
            CopyTreeStage('assets', ['assets', 'src/assets'], 'assets', label='Asset'),
            CopyTreeStage(
                'static', ['public', 'static', 'src/static'], 'assets', label='Static file'
            ),
            CopyTreeStage('images', ['images', 'img'], 'assets/images', label='Image'),
            CopyTreeStage('styles', ['css'], 'assets/css', label='Stylesheet'),
            CopyTreeStage('scripts', ['js'], 'assets/js', label='Script'),
            GitignoreStage(['node_modules/']),
            ReadmeStage(
                self.name,
                notes=[
                    'Nunjucks layouts were rewritten to Liquid; macros and filters '
                    'need manual attention.',
                    'JavaScript data files in _data were not migrated.',
                    'Collections defined in the Eleventy config must be recreated '
                    'in _config.yml.',
                ],
            ),
        ]
