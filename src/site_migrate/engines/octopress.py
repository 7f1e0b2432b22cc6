"""Octopress 2 sites."""

import re
from pathlib import Path
from typing import List

from ..migration.detection import file_contains, has_dirs
from ..migration.engine import MigrationEngine
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    GitignoreStage,
    PostsStage,
    ReadmeStage,
    Stage,
    parse_yaml,
)
from ..migration.transforms import chain, sass_asset_helpers

INCLUDES_README = """# Includes Directory

Include files migrated from Octopress. Octopress themes rely on custom
plugins (for example `{% img %}` and `{% pullquote %}`); includes using them
will fail until those tags are replaced.
"""


def convert_codeblocks(text: str) -> str:
    """Rewrite Octopress ``codeblock`` tags as ``highlight`` blocks."""
    text = re.sub(
        r'\{%\s*codeblock\b[^%]*?\blang:(\w+)[^%]*%\}', r'{% highlight \1 %}', text
    )
    text = re.sub(r'\{%\s*codeblock\b[^%]*%\}', '{% highlight text %}', text)
    text = re.sub(r'\{%\s*endcodeblock\s*%\}', '{% endhighlight %}', text)
    return text


class OctopressEngine(MigrationEngine):
    """Migrates Octopress blogs back to a plain Jekyll layout."""

    name = 'Octopress'
    description = 'Jekyll-based blogging framework'

    def detect(self, source_dir: Path) -> bool:
        return (
            file_contains(source_dir, 'Rakefile', ['octopress', 'Octopress'])
            or file_contains(source_dir, '_config.yml', ['octopress', 'jekyll_plugins'])
            or has_dirs(source_dir, 'source/_posts', 'source/_includes')
        )

    def stages(self) -> List[Stage]:
        return [
            ConfigStage(
                self.name,
                ['_config.yml'],
                parse_yaml,
                fields={
                    'title': ['title'],
                    'description': ['subtitle', 'description'],
                    'author': ['author'],
                    'url': ['url'],
                    'baseurl': ['root'],
                },
                extra={'paginate': 10},
            ),
            PostsStage(
                'posts',
                ['source/_posts'],
                body_transform=chain(convert_codeblocks),
            ),
            CopyTreeStage(
                'pages',
                ['source'],
                '',
                exclude=['_posts/**', '_layouts/**', '_includes/**'],
                label='Page',
            ),
            CopyTreeStage('layouts', ['source/_layouts'], '_layouts', label='Layout'),
            CopyTreeStage(
                'includes',
                ['source/_includes'],
                '_includes',
                readme=INCLUDES_README,
                label='Include file',
            ),
            CopyTreeStage(
                'sass',
                ['sass'],
                '_sass',
                transform=chain(sass_asset_helpers),
                transform_suffixes=('.scss', '.sass'),
                label='Stylesheet',
            ),
            CopyTreeStage(
                'plugins',
                ['plugins'],
                '_plugins',
                review=lambda relative: relative.endswith('.rb'),
                review_message='Octopress plugins target an old Jekyll API and need review',
                label='Plugin',
            ),
            GitignoreStage(['public/', '.pygments-cache/']),
            ReadmeStage(
                self.name,
                notes=[
                    '`codeblock` tags in posts were rewritten to `highlight`.',
                    'Other Octopress tags (`img`, `pullquote`, `gist`) need the '
                    'plugins in _plugins or manual replacement.',
                    'Rake deployment tasks were not migrated.',
                ],
            ),
        ]
