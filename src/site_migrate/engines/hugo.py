"""Hugo sites."""

import tomllib
from pathlib import Path, PurePosixPath
from typing import List

import yaml

from ..migration.detection import has_dir, has_file
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    GitignoreStage,
    PostsStage,
    ReadmeStage,
    Stage,
    parse_json,
    parse_toml,
    parse_yaml,
)
from ..migration.transforms import chain, ensure_front_matter, go_template_to_liquid
from ..utils.exceptions import MigrationParseError

POST_SECTIONS = ['posts/**', 'post/**', 'blog/**']

PARTIALS_README = """# Includes Directory

Partials migrated from Hugo's `layouts/partials`. Go template calls such as
`{{ partial "header.html" . }}` became `{% include header.html %}`; the
context argument has no Liquid equivalent and was dropped.
"""


def _rename_layout(relative: str) -> str:
    path = PurePosixPath(relative)
    if path.parts[0] == '_default':
        path = PurePosixPath(*path.parts[1:])
    if path.name == 'baseof.html':
        path = path.with_name('default.html')
    return path.as_posix()


def _rename_section_index(relative: str) -> str:
    path = PurePosixPath(relative)
    if path.name.startswith('_index.'):
        path = path.with_name(path.name[1:])
    return path.as_posix()


def _page(text: str, relative: str) -> str:
    return ensure_front_matter(text, {'layout': 'page'})


def toml_data_to_yaml(text: str, relative: str) -> str:
    """Rewrite a TOML data file as YAML, which Jekyll can load."""
    if not relative.endswith('.toml'):
        return text
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise MigrationParseError(f'Invalid TOML data file: {e}') from e
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def _rename_data(relative: str) -> str:
    return relative[: -len('.toml')] + '.yml' if relative.endswith('.toml') else relative


class HugoEngine(MigrationEngine):
    """Migrates Hugo sites, converting Go templates to Liquid."""

    name = 'Hugo'
    description = 'Go static site generator'

    def detect(self, source_dir: Path) -> bool:
        if has_file(source_dir, 'hugo.toml', 'hugo.yaml', 'hugo.json'):
            return True
        return has_file(source_dir, 'config.toml') and has_dir(source_dir, 'archetypes')

    def stages(self) -> List[Stage]:
        go = chain(go_template_to_liquid)
        return [
            ConfigStage(
                self.name,
                ['hugo.toml', 'hugo.yaml', 'hugo.json', 'config.toml', 'config.yaml', 'config.json'],
                {
                    '.toml': parse_toml,
                    '.yaml': parse_yaml,
                    '.yml': parse_yaml,
                    '.json': parse_json,
                },
                fields={
                    'title': ['title'],
                    'description': ['params.description', 'description'],
                    'author': ['params.author', 'author.name', 'author'],
                    'url': ['baseURL', 'baseurl'],
                    'lang': ['languageCode'],
                },
            ),
            PostsStage(
                'posts',
                ['content/posts', 'content/post', 'content/blog'],
                skip=['_index.md'],
            ),
            CopyTreeStage(
                'pages',
                ['content'],
                '',
                transform=_page,
                transform_suffixes=('.md', '.markdown', '.html'),
                rename=_rename_section_index,
                exclude=POST_SECTIONS,
                label='Page',
            ),
            CopyTreeStage(
                'layouts',
                ['layouts'],
                '_layouts',
                transform=go,
                rename=_rename_layout,
                exclude=['partials/**', 'shortcodes/**'],
                label='Layout',
            ),
            CopyTreeStage(
                'partials',
                ['layouts/partials'],
                '_includes',
                transform=go,
                readme=PARTIALS_README,
                label='Partial',
            ),
            CopyTreeStage(
                'shortcodes',
                ['layouts/shortcodes'],
                '_includes/shortcodes',
                transform=go,
                review=lambda relative: True,
                review_message='Hugo shortcodes must be rewritten as Liquid includes',
                label='Shortcode',
            ),
            CopyTreeStage(
                'data',
                ['data'],
                '_data',
                transform=toml_data_to_yaml,
                transform_suffixes=('.toml',),
                rename=_rename_data,
                label='Data file',
            ),
            CopyTreeStage('static', ['static'], '', label='Static file'),
            CopyTreeStage('assets', ['assets'], 'assets', label='Asset'),
            CopyTreeStage(
                'archetypes', ['archetypes'], '_archetypes', skip=['*'], label='Archetype'
            ),
            GitignoreStage(['public/', 'resources/_gen/', '.hugo_build.lock']),
            ReadmeStage(
                self.name,
                notes=[
                    'TOML front matter and data files were converted to YAML.',
                    'Shortcodes in content (`{{< ... >}}`) need Liquid replacements.',
                    'Hugo Pipes processing of assets/ must be replaced.',
                    'Archetypes have no counterpart and were not migrated.',
                ],
            ),
        ]
