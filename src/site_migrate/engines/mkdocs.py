"""MkDocs documentation sites."""

from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional

import yaml

from ..migration.detection import has_file
from ..migration.engine import MigrationEngine
from ..migration.ledger import ChangeType, MigrationResult
from ..migration.stages import (
    ConfigStage,
    CopyTreeStage,
    GitignoreStage,
    ReadmeStage,
    ScaffoldStage,
    Stage,
    parse_yaml,
)
from ..migration.transforms import (
    chain,
    convert_admonitions,
    docs_permalink,
    ensure_front_matter,
    jinja_to_liquid,
    rewrite_markdown_links,
    title_from_stem,
)
from ..utils.fs import read_text, write_text

CONFIG_FILES = ['mkdocs.yml', 'mkdocs.yaml']
ASSET_DIRS = [
    'assets/**',
    'css/**',
    'stylesheets/**',
    'js/**',
    'javascripts/**',
    'images/**',
    'img/**',
]

DOCS_README = """# Documentation Collection

Pages migrated from the MkDocs `docs/` directory. They form the `docs`
collection configured in `_config.yml` and keep the URLs MkDocs generated
through their `permalink` front matter.

- Admonitions (`!!! note`) were rewritten as HTML callouts.
- Relative links to `.md` files now use the Liquid `link` tag.
"""


def _doc_title(relative: str) -> str:
    path = PurePosixPath(relative)
    if path.stem in ('index', 'README'):
        return title_from_stem(path.parent.name) if path.parent.name else 'Home'
    return title_from_stem(path.stem)


def convert_doc(text: str, relative: str) -> str:
    """Prepare an MkDocs page for the ``_docs`` collection."""
    text = ensure_front_matter(
        text,
        {
            'layout': 'doc',
            'title': _doc_title(relative),
            'permalink': docs_permalink(relative),
        },
    )
    text = convert_admonitions(text)
    return rewrite_markdown_links(text, relative, '_docs')


def nav_to_data(nav: Any) -> List[Dict[str, Any]]:
    """Convert an MkDocs ``nav`` tree into navigation data.

    Entries are either ``{title: path}``, ``{title: [children]}`` or a bare
    path.
    """
    items = []
    for entry in nav or []:
        if isinstance(entry, str):
            items.append({'title': _doc_title(entry), 'url': docs_permalink(entry)})
            continue
        if not isinstance(entry, dict):
            continue
        for title, target in entry.items():
            if isinstance(target, list):
                items.append({'title': str(title), 'children': nav_to_data(target)})
            elif isinstance(target, str) and target.startswith(('http://', 'https://')):
                items.append({'title': str(title), 'url': target})
            elif isinstance(target, str):
                items.append({'title': str(title), 'url': docs_permalink(target)})
    return items


class NavigationStage(Stage):
    """Write the MkDocs ``nav`` tree to ``_data/navigation.yml``."""

    name = 'navigation'

    def run(
        self,
        source_dir: Path,
        dest_dir: Path,
        verbose: bool,
        result: MigrationResult,
    ) -> None:
        config_path = self._config_path(source_dir)
        if config_path is None:
            return
        # The config stage has already validated the document
        nav = parse_yaml(read_text(config_path)).get('nav')
        if not nav:
            result.add_warning(
                'mkdocs.yml has no nav; navigation must be built from the docs collection'
            )
            return

        items = nav_to_data(nav)
        write_text(
            dest_dir / '_data' / 'navigation.yml',
            yaml.safe_dump(items, sort_keys=False, allow_unicode=True),
        )
        result.add_change(
            '_data/navigation.yml',
            ChangeType.CREATED,
            f'Navigation with {len(items)} top-level entries from {config_path.name}',
        )
        self.trace(verbose, f'Converted nav from {config_path}')

    @staticmethod
    def _config_path(source_dir: Path) -> Optional[Path]:
        for name in CONFIG_FILES:
            if (source_dir / name).is_file():
                return source_dir / name
        return None


class MkDocsEngine(MigrationEngine):
    """Migrates MkDocs projects into a Jekyll docs collection."""

    name = 'MkDocs'
    description = 'Python documentation site generator'

    def detect(self, source_dir: Path) -> bool:
        return has_file(source_dir, 'mkdocs.yml', 'mkdocs.yaml', 'docs/index.md')

    def stages(self) -> List[Stage]:
        return [
            ConfigStage(
                self.name,
                CONFIG_FILES,
                parse_yaml,
                fields={
                    'title': ['site_name'],
                    'description': ['site_description'],
                    'author': ['site_author'],
                    'url': ['site_url'],
                    'repository': ['repo_url'],
                },
                extra={
                    'collections': {'docs': {'output': True, 'permalink': '/:path/'}},
                    'defaults': [
                        {'scope': {'path': '', 'type': 'docs'}, 'values': {'layout': 'doc'}}
                    ],
                },
                preserve_original=True,
            ),
            ScaffoldStage(['_layouts', '_includes', '_data', 'assets']),
            CopyTreeStage(
                'docs',
                ['docs'],
                '_docs',
                transform=convert_doc,
                transform_suffixes=('.md', '.markdown'),
                exclude=ASSET_DIRS,
                readme=DOCS_README,
                missing_warning='No docs directory found; the docs collection is empty',
                label='Document',
            ),
            CopyTreeStage(
                'layouts',
                ['overrides', 'custom_theme', 'theme', 'custom_dir'],
                '_layouts',
                transform=chain(jinja_to_liquid),
                include=['*.html'],
                exclude=['partials/**'],
                missing_warning=(
                    'No custom MkDocs theme found; create _layouts/default.html '
                    'and _layouts/doc.html by hand'
                ),
                label='Layout',
            ),
            CopyTreeStage(
                'partials',
                ['overrides/partials', 'custom_theme/partials', 'theme/partials'],
                '_includes',
                transform=chain(jinja_to_liquid),
                label='Partial',
            ),
            CopyTreeStage('assets', ['docs/assets'], 'assets', label='Asset'),
            CopyTreeStage(
                'stylesheets', ['docs/stylesheets', 'docs/css'], 'assets/css', label='Stylesheet'
            ),
            CopyTreeStage(
                'javascripts', ['docs/javascripts', 'docs/js'], 'assets/js', label='Script'
            ),
            CopyTreeStage(
                'images', ['docs/images', 'docs/img'], 'assets/images', label='Image'
            ),
            CopyTreeStage('data', ['data', '_data'], '_data', label='Data file'),
            NavigationStage(),
            GitignoreStage(['site/']),
            ReadmeStage(
                self.name,
                notes=[
                    'Docs live in the `docs` collection under _docs/.',
                    'Theme features (search, tabs, dark mode) must be provided by '
                    'a Jekyll theme.',
                    'Markdown extensions configured in mkdocs.yml are not applied.',
                ],
            ),
        ]
