"""Middleman sites."""

from pathlib import Path, PurePosixPath
from typing import List

from ..migration.detection import gemfile_mentions, has_file
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    GitignoreStage,
    PostsStage,
    ReadmeStage,
    Stage,
    parse_assignments,
)
from ..migration.transforms import (
    chain,
    erb_to_liquid,
    sass_asset_helpers,
    strip_template_suffix,
)

TEMPLATE_SUFFIXES = {
    '.html.erb': '.html',
    '.html.md': '.md',
    '.html.markdown': '.md',
    '.md.erb': '.md',
    '.xml.builder': '.xml',
    '.html.haml': '.html',
    '.html.slim': '.html',
    '.erb': '.html',
    '.haml': '.html',
    '.slim': '.html',
}

RUBY_SETTINGS = {
    'site_title': r"""set\s+:site_title\s*,\s*['"]([^'"]*)['"]""",
    'config_title': r"""config\[:(?:site_)?title\]\s*=\s*['"]([^'"]*)['"]""",
    'site_description': r"""set\s+:site_description\s*,\s*['"]([^'"]*)['"]""",
    'config_description': r"""config\[:(?:site_)?description\]\s*=\s*['"]([^'"]*)['"]""",
    'site_author': r"""set\s+:(?:site_)?author\s*,\s*['"]([^'"]*)['"]""",
    'site_url': r"""set\s+:(?:site_url|url_root)\s*,\s*['"]([^'"]*)['"]""",
    'config_url': r"""config\[:(?:site_url|url_root|url)\]\s*=\s*['"]([^'"]*)['"]""",
}

PARTIALS_README = """# Includes Directory

Partials migrated from Middleman's `source/partials`. Leading underscores were
dropped from file names, so `<%= partial "header" %>` became
`{% include header.html %}`.
"""

CONTENT_EXCLUDES = [
    'layouts/**',
    'partials/**',
    'blog/**',
    'posts/**',
    'images/**',
    'stylesheets/**',
    'javascripts/**',
    'fonts/**',
]


def _rename_template(relative: str) -> str:
    return strip_template_suffix(relative, TEMPLATE_SUFFIXES)


def _rename_partial(relative: str) -> str:
    path = PurePosixPath(relative)
    name = _rename_template(path.name.lstrip('_'))
    return (path.parent / name).as_posix() if path.parent.name else name


def _needs_manual_conversion(relative: str) -> bool:
    return relative.endswith(('.haml', '.slim', '.builder'))


class MiddlemanEngine(MigrationEngine):
    """Migrates Middleman sites, converting ERB templates to Liquid."""

    name = 'Middleman'
    description = 'Ruby static site generator'

    def detect(self, source_dir: Path) -> bool:
        return has_file(source_dir, 'config.rb') or gemfile_mentions(
            source_dir, 'middleman'
        )

    def stages(self) -> List[Stage]:
        erb = chain(erb_to_liquid)
        template_suffixes = ('.erb', '.html', '.md', '.markdown')
        return [
            ConfigStage(
                self.name,
                ['config.rb'],
                parse_assignments(RUBY_SETTINGS),
                fields={
                    'title': ['site_title', 'config_title'],
                    'description': ['site_description', 'config_description'],
                    'author': ['site_author'],
                    'url': ['site_url', 'config_url'],
                },
                preserve_original=True,
                review_warning=(
                    'config.rb is Ruby; activated extensions and helpers must be '
                    'replaced by hand'
                ),
            ),
            PostsStage(
                'posts',
                ['source/blog', 'source/posts'],
                body_transform=erb,
                rename=_rename_template,
            ),
            CopyTreeStage(
                'content',
                ['source'],
                '',
                transform=erb,
                transform_suffixes=template_suffixes,
                rename=_rename_template,
                exclude=CONTENT_EXCLUDES,
                review=_needs_manual_conversion,
                review_message='Haml, Slim and Builder templates must be converted by hand',
                label='Content file',
            ),
            CopyTreeStage(
                'layouts',
                ['source/layouts'],
                '_layouts',
                transform=erb,
                transform_suffixes=template_suffixes,
                rename=_rename_template,
                review=_needs_manual_conversion,
                review_message='Haml and Slim layouts must be converted by hand',
                label='Layout',
            ),
            CopyTreeStage(
                'partials',
                ['source/partials'],
                '_includes',
                transform=erb,
                transform_suffixes=template_suffixes,
                rename=_rename_partial,
                readme=PARTIALS_README,
                label='Partial',
            ),
            CopyTreeStage('data', ['data'], '_data', label='Data file'),
            CopyTreeStage('images', ['source/images'], 'assets/images', label='Image'),
            CopyTreeStage(
                'stylesheets',
                ['source/stylesheets'],
                'assets/css',
                transform=chain(sass_asset_helpers),
                transform_suffixes=('.css', '.scss', '.sass'),
                label='Stylesheet',
            ),
            CopyTreeStage(
                'javascripts', ['source/javascripts'], 'assets/js', label='Script'
            ),
            CopyTreeStage('fonts', ['source/fonts'], 'assets/fonts', label='Font'),
            GitignoreStage(['build/', '.bundle/']),
            ReadmeStage(
                self.name,
                notes=[
                    'ERB was rewritten to Liquid; Ruby helpers used in templates '
                    'still need Liquid replacements.',
                    'Asset paths moved from source/images, stylesheets and '
                    'javascripts to assets/.',
                ],
            ),
        ]
