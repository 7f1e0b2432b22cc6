"""Pelican sites."""

import re
from pathlib import Path
from typing import List

from ..migration.detection import has_file
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    PostsStage,
    ReadmeStage,
    Stage,
    parse_assignments,
)
from ..migration.transforms import (
    chain,
    ensure_front_matter,
    jinja_to_liquid,
    render_front_matter,
)

_FIELD = re.compile(r'^([A-Za-z][\w-]*):[ \t]*(.*)$')

PYTHON_SETTINGS = {
    key: rf"""^{key}\s*=\s*['"]([^'"]*)['"]"""
    for key in ('SITENAME', 'SITESUBTITLE', 'AUTHOR', 'SITEURL')
}

CONTENT_EXCLUDES = ['pages/**', 'images/**', 'static/**', 'extra/**', 'files/**']


def metadata_to_front_matter(text: str) -> str:
    """Turn a Pelican ``Key: value`` header into YAML front matter.

    The header runs from the first line to the first blank line. Text that
    does not start with such a header is returned unchanged.
    """
    if text.startswith(('---', '+++')):
        return text

    lines = text.split('\n')
    metadata = {}
    index = 0
    while index < len(lines):
        match = _FIELD.match(lines[index])
        if not match:
            break
        metadata[match.group(1).lower()] = match.group(2).strip()
        index += 1

    if not metadata or (index < len(lines) and lines[index].strip()):
        return text

    if 'tags' in metadata:
        metadata['tags'] = [t.strip() for t in metadata['tags'].split(',') if t.strip()]
    if 'category' in metadata:
        metadata['categories'] = [metadata.pop('category')]
    body = '\n'.join(lines[index:]).lstrip('\n')
    return render_front_matter(metadata, body)


def _page(text: str, relative: str) -> str:
    return ensure_front_matter(metadata_to_front_matter(text), {'layout': 'page'})


def _is_rst(relative: str) -> bool:
    return relative.endswith('.rst')


class PelicanEngine(MigrationEngine):
    """Migrates Pelican blogs, converting metadata headers and Jinja themes."""

    name = 'Pelican'
    description = 'Python static site generator'

    def detect(self, source_dir: Path) -> bool:
        return has_file(source_dir, 'pelicanconf.py')

    def stages(self) -> List[Stage]:
        return [
            ConfigStage(
                self.name,
                ['pelicanconf.py'],
                parse_assignments(PYTHON_SETTINGS),
                fields={
                    'title': ['SITENAME'],
                    'description': ['SITESUBTITLE'],
                    'author': ['AUTHOR'],
                    'url': ['SITEURL'],
                },
                preserve_original=True,
                review_warning=(
                    'pelicanconf.py is Python; plugins, feeds and path settings '
                    'must be ported by hand'
                ),
            ),
            PostsStage(
                'posts',
                ['content'],
                prepare=metadata_to_front_matter,
                exclude=CONTENT_EXCLUDES,
                review=_is_rst,
                review_message='reStructuredText posts must be converted to Markdown',
            ),
            CopyTreeStage(
                'pages',
                ['content/pages'],
                '',
                transform=_page,
                transform_suffixes=('.md', '.markdown', '.html'),
                label='Page',
            ),
            CopyTreeStage(
                'templates',
                ['theme/templates', 'templates'],
                '_layouts',
                transform=chain(jinja_to_liquid),
                include=['*.html'],
                label='Template',
            ),
            CopyTreeStage('images', ['content/images'], 'images', label='Image'),
            CopyTreeStage(
                'static',
                ['content/static', 'content/extra', 'theme/static'],
                'assets',
                label='Static file',
            ),
            ReadmeStage(
                self.name,
                notes=[
                    'Pelican metadata headers were converted to YAML front matter.',
                    '`{filename}` and `{static}` link placeholders must be '
                    'replaced with Liquid `link` tags.',
                ],
            ),
        ]
