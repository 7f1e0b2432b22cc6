"""Nikola sites."""

import re
from pathlib import Path
from typing import List

from ..migration.detection import file_contains, has_dir, has_dirs, has_file
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

_METADATA_BLOCK = re.compile(
    r'\A(?:<!--[ \t]*\n)?((?:\.\.[ \t]+[\w-]+:.*(?:\n|\Z))+)(?:[ \t]*-->[ \t]*(?:\n|\Z))?'
)
_METADATA_LINE = re.compile(r'^\.\.[ \t]+([\w-]+):[ \t]*(.*)$', re.M)

PYTHON_SETTINGS = {
    key: rf"""^{key}\s*=\s*['"]([^'"]*)['"]"""
    for key in ('BLOG_TITLE', 'BLOG_DESCRIPTION', 'BLOG_AUTHOR', 'SITE_URL')
}


def metadata_to_front_matter(text: str) -> str:
    """Turn Nikola's ``.. key: value`` metadata block into YAML front matter."""
    match = _METADATA_BLOCK.match(text)
    if not match:
        return text
    metadata = {
        key.lower(): value.strip()
        for key, value in _METADATA_LINE.findall(match.group(1))
        if value.strip()
    }
    if 'tags' in metadata:
        metadata['tags'] = [t.strip() for t in metadata['tags'].split(',') if t.strip()]
    return render_front_matter(metadata, text[match.end():].lstrip('\n'))


def _page(text: str, relative: str) -> str:
    return ensure_front_matter(metadata_to_front_matter(text), {'layout': 'page'})


def _needs_conversion(relative: str) -> bool:
    return relative.endswith(('.rst', '.ipynb', '.tmpl'))


class NikolaEngine(MigrationEngine):
    """Migrates Nikola sites, converting metadata blocks and Jinja templates."""

    name = 'Nikola'
    description = 'Python static site generator'

    def detect(self, source_dir: Path) -> bool:
        return (
            has_file(source_dir, 'conf.py')
            or has_dir(source_dir, 'nikola')
            or has_dirs(source_dir, 'posts', 'pages')
            or file_contains(source_dir, 'requirements.txt', ['nikola', 'Nikola'])
        )

    def stages(self) -> List[Stage]:
        return [
            ConfigStage(
                self.name,
                ['conf.py'],
                parse_assignments(PYTHON_SETTINGS),
                fields={
                    'title': ['BLOG_TITLE'],
                    'description': ['BLOG_DESCRIPTION'],
                    'author': ['BLOG_AUTHOR'],
                    'url': ['SITE_URL'],
                },
                preserve_original=True,
                review_warning=(
                    'conf.py is Python; navigation links, post compilers and '
                    'translations must be ported by hand'
                ),
            ),
            PostsStage(
                'posts',
                ['posts'],
                prepare=metadata_to_front_matter,
                review=_needs_conversion,
                review_message='reStructuredText and notebook posts must be converted to Markdown',
            ),
            CopyTreeStage(
                'pages',
                ['pages'],
                '',
                transform=_page,
                transform_suffixes=('.md', '.markdown', '.html'),
                review=_needs_conversion,
                review_message='reStructuredText and notebook pages must be converted to Markdown',
                label='Page',
            ),
            CopyTreeStage(
                'templates',
                ['templates', 'themes/custom/templates'],
                '_layouts',
                transform=chain(jinja_to_liquid),
                transform_suffixes=('.html', '.tmpl'),
                review=_needs_conversion,
                review_message='Mako templates must be rewritten as Liquid',
                label='Template',
            ),
            CopyTreeStage('files', ['files'], '', label='Static file'),
            CopyTreeStage('images', ['images'], 'images', label='Image'),
            ReadmeStage(
                self.name,
                notes=[
                    'Nikola metadata comments were converted to YAML front matter.',
                    'Shortcodes such as `{{% raw %}}` and `{{% media %}}` need manual replacement.',
                ],
            ),
        ]
