"""Bridgetown sites."""

from pathlib import Path
from typing import List

from ..migration.detection import gemfile_mentions, has_file
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    GitignoreStage,
    PostsStage,
    ReadmeStage,
    ScaffoldStage,
    Stage,
    parse_yaml,
)
from ..migration.transforms import chain, erb_to_liquid, sass_asset_helpers, strip_template_suffix

ERB_SUFFIXES = {'.html.erb': '.html', '.md.erb': '.md', '.erb': '.html', '.serb': '.html'}


def _rename_template(relative: str) -> str:
    return strip_template_suffix(relative, ERB_SUFFIXES)


class BridgetownEngine(MigrationEngine):
    """Migrates Bridgetown sites, the Ruby successor to Jekyll."""

    name = 'Bridgetown'
    description = 'Ruby static site generator descended from Jekyll'

    def detect(self, source_dir: Path) -> bool:
        return has_file(
            source_dir, 'bridgetown.config.rb', 'bridgetown.config.yml'
        ) or gemfile_mentions(source_dir, 'bridgetown')

    def stages(self) -> List[Stage]:
        erb = chain(erb_to_liquid)
        return [
            ConfigStage(
                self.name,
                ['bridgetown.config.yml', 'src/_data/site_metadata.yml'],
                parse_yaml,
                fields={
                    'title': ['title', 'metadata.title'],
                    'description': ['description', 'tagline', 'metadata.description'],
                    'author': ['author', 'metadata.author'],
                    'url': ['url'],
                    'baseurl': ['base_path', 'baseurl'],
                },
            ),
            ScaffoldStage(['_layouts', '_includes', '_posts', '_data', 'assets']),
            PostsStage('posts', ['src/_posts'], body_transform=erb, rename=_rename_template),
            CopyTreeStage(
                'pages',
                ['src'],
                '',
                transform=erb,
                transform_suffixes=('.erb', '.md', '.html', '.liquid'),
                rename=_rename_template,
                exclude=[
                    '_posts/**',
                    '_layouts/**',
                    '_components/**',
                    '_partials/**',
                    '_data/**',
                ],
                label='Page',
            ),
            CopyTreeStage(
                'layouts',
                ['src/_layouts'],
                '_layouts',
                transform=erb,
                rename=_rename_template,
                label='Layout',
            ),
            CopyTreeStage(
                'components',
                ['src/_components', 'src/_partials'],
                '_includes',
                transform=erb,
                rename=_rename_template,
                skip=['*.rb'],
                label='Component',
            ),
            CopyTreeStage(
                'data', ['src/_data'], '_data', skip=['*.rb'], label='Data file'
            ),
            CopyTreeStage(
                'frontend',
                ['frontend'],
                'assets',
                transform=chain(sass_asset_helpers),
                transform_suffixes=('.css', '.scss', '.sass'),
                label='Frontend asset',
            ),
            GitignoreStage(['output/', 'node_modules/', '.bridgetown-cache/']),
            ReadmeStage(
                self.name,
                notes=[
                    'Ruby components (*.rb) and Ruby data files were not migrated.',
                    'ERB templates were rewritten to Liquid on a best-effort basis.',
                    'The frontend build (esbuild/webpack) must be reconfigured.',
                ],
            ),
        ]
