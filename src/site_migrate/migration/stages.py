"""Conversion stage contract and the shared stage primitives."""

import fnmatch
import json
import re
import tomllib
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import yaml
from loguru import logger

from ..utils.exceptions import FrontMatterError, MigrationParseError
from ..utils.fs import (
    WalkEntry,
    copy_file,
    create_dir_if_not_exists,
    is_within,
    join_posix,
    read_text,
    relative_posix,
    walk_tree,
    write_readme,
    write_text,
)
from .ledger import ChangeType, MigrationResult
from .transforms import (
    TextTransform,
    coerce_date,
    ensure_front_matter,
    post_file_name,
    slugify,
    split_dated_stem,
    split_front_matter,
    title_from_stem,
)

NOISE_FILES = ('.DS_Store', 'Thumbs.db', 'desktop.ini', '*.swp', '*~', '.gitkeep')
TEXT_SUFFIXES = (
    '.md',
    '.markdown',
    '.mdown',
    '.html',
    '.htm',
    '.erb',
    '.haml',
    '.slim',
    '.liquid',
    '.njk',
    '.hbs',
    '.handlebars',
    '.php',
    '.tmpl',
    '.jinja',
    '.jinja2',
    '.txt',
    '.rst',
    '.textile',
    '.xml',
    '.css',
    '.scss',
    '.sass',
    '.js',
)


def matches_any(relative: str, patterns: Sequence[str]) -> bool:
    """Match a relative POSIX path against glob patterns.

    ``dir/**`` matches everything below ``dir``; other patterns are
    matched against both the full relative path and the file name.
    """
    name = PurePosixPath(relative).name
    for pattern in patterns:
        if pattern.endswith('/**'):
            prefix = pattern[:-3]
            if relative == prefix or relative.startswith(prefix + '/'):
                return True
        elif fnmatch.fnmatchcase(relative, pattern) or fnmatch.fnmatchcase(
            name, pattern
        ):
            return True
    return False


class Stage(ABC):
    """One unit of the migration pipeline."""

    name: str = 'stage'

    def __init__(self, name: Optional[str] = None):
        if name:
            self.name = name
        self.logger = logger.bind(component=f'stage:{self.name}')

    @abstractmethod
    def run(
        self,
        source_dir: Path,
        dest_dir: Path,
        verbose: bool,
        result: MigrationResult,
    ) -> None:
        """Run the stage, appending to ``result``.

        Raises:
            MigrationError: On a fatal I/O or parse failure
        """

    def trace(self, verbose: bool, message: str) -> None:
        """Log per-file progress at INFO when verbose, DEBUG otherwise."""
        self.logger.log('INFO' if verbose else 'DEBUG', message)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.name}>'


class CopyTreeStage(Stage):
    """Mirror a source subtree into a destination subtree file by file.

    Args:
        name: Stage name used in logs
        sources: Candidate source subtrees, every existing one is migrated
        dest: Destination subtree ('' for the site root)
        transform: Rewrite applied to text files, gets (text, relative path)
        transform_suffixes: Suffixes the transform applies to (None: all text)
        rename: Rewrite of the relative destination path
        only: File patterns this stage claims; others are left alone
        include: File patterns migrated; other claimed files are skipped
        exclude: Relative patterns left for other stages
        skip: Patterns claimed but deliberately not migrated
        review: Predicate marking files that need manual follow-up
        review_message: Warning prefix listing the files flagged by ``review``
        readme: Body of a README.md written into the destination subtree
        missing_warning: Warning recorded when no source subtree exists
        label: Noun used in ledger descriptions
    """

    def __init__(
        self,
        name: str,
        sources: Sequence[str],
        dest: str,
        transform: Optional[TextTransform] = None,
        transform_suffixes: Optional[Sequence[str]] = None,
        rename: Optional[Callable[[str], str]] = None,
        only: Sequence[str] = (),
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
        skip: Sequence[str] = (),
        review: Optional[Callable[[str], bool]] = None,
        review_message: str = 'Files need manual review',
        readme: Optional[str] = None,
        missing_warning: Optional[str] = None,
        label: str = 'File',
    ):
        super().__init__(name)
        self.sources = list(sources)
        self.dest = dest
        self.transform = transform
        self.transform_suffixes = (
            tuple(transform_suffixes) if transform_suffixes is not None else None
        )
        self.rename = rename
        self.only = tuple(only)
        self.include = tuple(include)
        self.exclude = tuple(exclude)
        self.skip = tuple(skip)
        self.review = review
        self.review_message = review_message
        self.readme = readme
        self.missing_warning = missing_warning
        self.label = label

    def locate(self, source_dir: Path) -> List[Path]:
        """Return the existing candidate subtrees in candidate order.

        A candidate that contains, or sits inside, an earlier match is
        dropped, so ``['src', '']`` means "src if present, else the root".
        """
        found: List[Path] = []
        for candidate in self.sources:
            path = source_dir / candidate if candidate else source_dir
            if not path.is_dir():
                continue
            if any(is_within(path, p) or is_within(p, path) for p in found):
                continue
            found.append(path)
        return found

    def run(
        self,
        source_dir: Path,
        dest_dir: Path,
        verbose: bool,
        result: MigrationResult,
    ) -> None:
        subtrees = self.locate(source_dir)
        if not subtrees:
            if self.missing_warning:
                result.add_warning(self.missing_warning)
            self.logger.debug(f'No source subtree among {self.sources}, skipping')
            return

        dest_root = dest_dir / self.dest if self.dest else dest_dir
        migrated: List[str] = []
        flagged: List[str] = []
        claimed: Dict[str, str] = {}

        for subtree in subtrees:
            self.trace(verbose, f'Migrating {subtree} -> {dest_root}')
            # A destination inside the source must not be copied into itself
            for entry in walk_tree(subtree, prune=[dest_dir]):
                if matches_any(entry.relative, self.exclude):
                    continue
                if self.only and not matches_any(entry.relative, self.only):
                    continue

                source_label = relative_posix(entry.path, source_dir)
                if entry.is_symlink:
                    kind = 'directory' if entry.is_dir else 'file'
                    result.add_warning(
                        f'Skipped symlinked {kind} {source_label}: '
                        'symlinks are not followed'
                    )
                    continue

                dest_relative = self._migrate_entry(
                    entry, source_label, dest_root, verbose, result, claimed
                )
                migrated.append(dest_relative)
                if self.review and self.review(entry.relative):
                    flagged.append(join_posix(self.dest, dest_relative))

        if flagged:
            result.add_warning(f'{self.review_message}: {", ".join(flagged)}')

        if self.readme:
            self._write_readme(dest_root, migrated, result)

    def _migrate_entry(
        self,
        entry: WalkEntry,
        source_label: str,
        dest_root: Path,
        verbose: bool,
        result: MigrationResult,
        claimed: Dict[str, str],
    ) -> str:
        if matches_any(entry.relative, NOISE_FILES) or self.is_skipped(entry.relative):
            dest_relative = self.rename_path(entry.relative)
            result.add_change(
                join_posix(self.dest, dest_relative),
                ChangeType.SKIPPED,
                f'{source_label} was not migrated',
            )
            return dest_relative

        text = None
        undecodable = False
        if self.wants_text(entry.relative):
            try:
                text = read_text(entry.path)
            except UnicodeDecodeError:
                undecodable = True

        dest_relative = self._claim(
            self.destination_for(entry, text), source_label, claimed, result
        )
        ledger_path = join_posix(self.dest, dest_relative)
        dest_path = dest_root / dest_relative
        create_dir_if_not_exists(dest_path.parent)

        if text is None:
            copy_file(entry.path, dest_path)
            result.add_change(
                ledger_path, ChangeType.COPIED, f'{self.label} copied from {source_label}'
            )
            if undecodable:
                result.add_error(
                    f'{source_label} is not valid UTF-8; copied without conversion'
                )
        else:
            try:
                converted = self.convert(text, entry)
            except MigrationParseError as e:
                write_text(dest_path, text)
                result.add_change(
                    ledger_path,
                    ChangeType.COPIED,
                    f'{self.label} copied unchanged from {source_label}',
                )
                result.add_error(f'{source_label}: {e}; copied without conversion')
            else:
                write_text(dest_path, converted)
                if converted != text:
                    result.add_change(
                        ledger_path,
                        ChangeType.CONVERTED,
                        f'{self.label} converted from {source_label}',
                    )
                else:
                    result.add_change(
                        ledger_path,
                        ChangeType.COPIED,
                        f'{self.label} copied from {source_label}',
                    )

        self.trace(verbose, f'{source_label} -> {ledger_path}')
        return dest_relative

    def _claim(
        self,
        dest_relative: str,
        source_label: str,
        claimed: Dict[str, str],
        result: MigrationResult,
    ) -> str:
        """Reserve a destination path, numbering it if already taken."""
        if dest_relative in claimed:
            path = PurePosixPath(dest_relative)
            stem = path.name[: -len(path.suffix)] if path.suffix else path.name
            counter = 2
            unique = path.with_name(f'{stem}-{counter}{path.suffix}').as_posix()
            while unique in claimed:
                counter += 1
                unique = path.with_name(f'{stem}-{counter}{path.suffix}').as_posix()
            result.add_warning(
                f'{source_label} and {claimed[dest_relative]} both map to '
                f'{join_posix(self.dest, dest_relative)}; '
                f'{source_label} was written as {join_posix(self.dest, unique)}'
            )
            dest_relative = unique
        claimed[dest_relative] = source_label
        return dest_relative

    def is_skipped(self, relative: str) -> bool:
        if self.include and not matches_any(relative, self.include):
            return True
        return matches_any(relative, self.skip)

    def wants_text(self, relative: str) -> bool:
        if self.transform is None:
            return False
        if self.transform_suffixes is None:
            return relative.lower().endswith(TEXT_SUFFIXES)
        return relative.lower().endswith(self.transform_suffixes)

    def rename_path(self, relative: str) -> str:
        return self.rename(relative) if self.rename else relative

    def destination_for(self, entry: WalkEntry, text: Optional[str]) -> str:
        """Relative destination path of a migrated file."""
        return self.rename_path(entry.relative)

    def convert(self, text: str, entry: WalkEntry) -> str:
        return self.transform(text, entry.relative) if self.transform else text

    def _write_readme(
        self, dest_root: Path, migrated: List[str], result: MigrationResult
    ) -> None:
        readme_path = join_posix(self.dest, 'README.md')
        if 'README.md' in migrated:
            result.add_warning(
                f'{readme_path} came from the source site; migration notes were not written'
            )
            return
        write_readme(dest_root, self.readme)
        result.add_change(
            readme_path, ChangeType.CREATED, f'Migration notes for {self.dest or "site root"}'
        )


class PostsStage(CopyTreeStage):
    """Copy posts into ``_posts`` using the ``YYYY-MM-DD-slug`` convention.

    The date comes from front matter, then the file name, then the file's
    modification time. Page bundles (``my-post/index.md``) take their slug
    from the bundle directory.

    Args:
        body_transform: Rewrite applied after front matter is normalised
        prepare: Rewrite applied before front matter is read, for sources
            whose metadata is not YAML front matter
        layout: Layout ensured in each post's front matter
    """

    POST_SUFFIXES = ('.md', '.markdown', '.mdown', '.html', '.textile')

    def __init__(
        self,
        name: str,
        sources: Sequence[str],
        dest: str = '_posts',
        body_transform: Optional[TextTransform] = None,
        prepare: Optional[Callable[[str], str]] = None,
        layout: str = 'post',
        **kwargs: Any,
    ):
        kwargs.setdefault('label', 'Post')
        kwargs.setdefault('transform_suffixes', self.POST_SUFFIXES)
        super().__init__(name, sources, dest, transform=self._convert_post, **kwargs)
        self.body_transform = body_transform
        self.prepare = prepare
        self.layout = layout

    def _is_post(self, relative: str) -> bool:
        return relative.lower().endswith(self.POST_SUFFIXES)

    def destination_for(self, entry: WalkEntry, text: Optional[str]) -> str:
        relative = self.rename_path(entry.relative)
        if not self._is_post(relative):
            return relative

        path = PurePosixPath(relative)
        parent = path.parent
        stem = path.name.split('.', 1)[0]
        if stem == 'index' and parent.name:
            stem = parent.name
            parent = parent.parent

        file_date, slug = split_dated_stem(stem)
        if text is not None and self.prepare:
            text = self.prepare(text)
        post_date = self._front_matter_date(text) or file_date
        if post_date is None:
            post_date = date.fromtimestamp(entry.path.stat().st_mtime)

        name = post_file_name(post_date, slugify(slug) or 'post', path.suffix)
        return (parent / name).as_posix() if parent.name else name

    @staticmethod
    def _front_matter_date(text: Optional[str]) -> Optional[date]:
        if text is None:
            return None
        try:
            metadata, _, _ = split_front_matter(text)
        except FrontMatterError:
            return None
        return coerce_date(metadata.get('date'))

    def _convert_post(self, text: str, relative: str) -> str:
        if self.prepare:
            text = self.prepare(text)
        path = PurePosixPath(relative)
        stem = path.name.split('.', 1)[0]
        if stem == 'index' and path.parent.name:
            stem = path.parent.name
        _, slug = split_dated_stem(stem)
        converted = ensure_front_matter(
            text, {'layout': self.layout, 'title': title_from_stem(slug)}
        )
        if self.body_transform:
            converted = self.body_transform(converted, relative)
        return converted


# Configuration synthesis


class _LenientLoader(yaml.SafeLoader):
    """SafeLoader that tolerates application-specific tags.

    MkDocs configs routinely contain ``!!python/name:`` and ``!ENV`` tags.
    """


def _ignore_tag(loader, tag_suffix, node):
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node)
    return loader.construct_mapping(node)


_LenientLoader.add_multi_constructor('!', _ignore_tag)
_LenientLoader.add_multi_constructor('tag:yaml.org,2002:python/', _ignore_tag)


def parse_yaml(text: str) -> Dict[str, Any]:
    data = yaml.load(text, Loader=_LenientLoader)  # noqa: S506 - SafeLoader subclass
    return data or {}


def parse_toml(text: str) -> Dict[str, Any]:
    return tomllib.loads(text)


def parse_json(text: str) -> Dict[str, Any]:
    return json.loads(text) if text.strip() else {}


def parse_assignments(patterns: Mapping[str, str]) -> Callable[[str], Dict[str, Any]]:
    """Build a parser that extracts string settings from source code.

    Used for executable configs (Ruby, Python, PHP) that must not be run.
    Each pattern needs one capture group holding the value.

    Args:
        patterns: Setting key to regular expression
    """
    compiled = {key: re.compile(pattern, re.M) for key, pattern in patterns.items()}

    def _parse(text: str) -> Dict[str, Any]:
        values = {}
        for key, regex in compiled.items():
            match = regex.search(text)
            if match:
                values[key] = match.group(1)
        return values

    return _parse


def lookup(data: Mapping[str, Any], dotted: str) -> Any:
    """Fetch ``a.b.c`` from nested mappings, None if any level is missing."""
    current: Any = data
    for part in dotted.split('.'):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


class ConfigStage(Stage):
    """Synthesise ``_config.yml`` from the source site's configuration.

    Args:
        engine_name: Source engine, used in defaults and notes
        candidates: Config files to look for, first existing one wins
        parser: Turns the config text into a mapping, or a mapping of file
            suffix to parser when candidates differ in format
        fields: Target key to source key paths, tried in order
        extra: Static settings appended to the generated config
        preserve_original: Also copy the source config for reference
        review_warning: Warning added when the source config is executable
    """

    name = 'config'
    BUILD_DEFAULTS = {
        'markdown': 'kramdown',
        'highlighter': 'rouge',
        'permalink': 'pretty',
    }
    EXCLUDE = [
        '.sass-cache/',
        '.jekyll-cache/',
        'Gemfile',
        'Gemfile.lock',
        'node_modules/',
        'vendor/',
    ]

    def __init__(
        self,
        engine_name: str,
        candidates: Sequence[str],
        parser: Union[
            Callable[[str], Dict[str, Any]], Mapping[str, Callable[[str], Dict[str, Any]]]
        ],
        fields: Optional[Mapping[str, Sequence[str]]] = None,
        extra: Optional[Mapping[str, Any]] = None,
        preserve_original: bool = False,
        review_warning: Optional[str] = None,
    ):
        super().__init__()
        self.engine_name = engine_name
        self.candidates = list(candidates)
        self.parser = parser
        self.fields = dict(fields or {})
        self.extra = dict(extra or {})
        self.preserve_original = preserve_original
        self.review_warning = review_warning

    def run(
        self,
        source_dir: Path,
        dest_dir: Path,
        verbose: bool,
        result: MigrationResult,
    ) -> None:
        config_path = next(
            (source_dir / c for c in self.candidates if (source_dir / c).is_file()),
            None,
        )

        source_values: Dict[str, Any] = {}
        if config_path is None:
            result.add_warning(
                f'No {self.engine_name} configuration file found; '
                'a default _config.yml was written'
            )
        else:
            self.trace(verbose, f'Reading {self.engine_name} configuration {config_path}')
            source_values = self.load(config_path)

        document = self.build(source_values)
        write_text(dest_dir / '_config.yml', self.render(document))
        origin = config_path.name if config_path else 'defaults'
        result.add_change(
            '_config.yml',
            ChangeType.CREATED,
            f'Site configuration generated from {origin}',
        )

        if config_path is not None and self.preserve_original:
            reference_name = f'{slugify(self.engine_name)}_{config_path.name.lstrip(".")}'
            copy_file(config_path, dest_dir / reference_name)
            result.add_change(
                reference_name,
                ChangeType.COPIED,
                f'Original {config_path.name} preserved for reference',
            )
        if config_path is not None and self.review_warning:
            result.add_warning(self.review_warning)

    def load(self, config_path: Path) -> Dict[str, Any]:
        """Read and parse the source configuration.

        Raises:
            MigrationParseError: If the document is malformed
        """
        parser = self.parser
        if isinstance(parser, Mapping):
            parser = parser[config_path.suffix]
        try:
            data = parser(read_text(config_path))
        except (yaml.YAMLError, ValueError) as e:
            raise MigrationParseError(
                f'Failed to parse {self.engine_name} configuration: {e}',
                path=config_path,
            ) from e
        if not isinstance(data, dict):
            raise MigrationParseError(
                f'{self.engine_name} configuration is not a mapping', path=config_path
            )
        return data

    def build(self, source_values: Mapping[str, Any]) -> Dict[str, Any]:
        """Map source settings onto the target configuration document."""
        document: Dict[str, Any] = {
            'title': f'Migrated {self.engine_name} Site',
            'description': f'A site migrated from {self.engine_name}',
            'author': '',
            'url': '',
            'baseurl': '',
        }
        for target, paths in self.fields.items():
            for dotted in paths:
                value = lookup(source_values, dotted)
                if value not in (None, ''):
                    document[target] = value if not isinstance(value, str) else value.strip()
                    break

        document.update(self.BUILD_DEFAULTS)
        document.update(self.extra)
        document['exclude'] = list(self.EXCLUDE)
        document['migration'] = {'source': self.engine_name}
        return document

    def render(self, document: Mapping[str, Any]) -> str:
        header = f'# Site configuration migrated from {self.engine_name}\n'
        return header + yaml.safe_dump(
            dict(document),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )


# Structural and documentation stages


class ScaffoldStage(Stage):
    """Create the standard destination directories."""

    name = 'scaffold'

    def __init__(self, directories: Sequence[str]):
        super().__init__()
        self.directories = list(directories)

    def run(
        self,
        source_dir: Path,
        dest_dir: Path,
        verbose: bool,
        result: MigrationResult,
    ) -> None:
        for directory in self.directories:
            if create_dir_if_not_exists(dest_dir / directory):
                result.add_change(
                    directory, ChangeType.CREATED, f'Created directory {directory}'
                )


class GitignoreStage(Stage):
    """Write a ``.gitignore`` covering build artifacts."""

    name = 'gitignore'
    BASE_ENTRIES = ['_site/', '.jekyll-cache/', '.jekyll-metadata', '.sass-cache/']

    def __init__(self, extra_entries: Sequence[str] = ()):
        super().__init__()
        self.entries = self.BASE_ENTRIES + [
            e for e in extra_entries if e not in self.BASE_ENTRIES
        ]

    def run(
        self,
        source_dir: Path,
        dest_dir: Path,
        verbose: bool,
        result: MigrationResult,
    ) -> None:
        write_text(dest_dir / '.gitignore', '\n'.join(self.entries) + '\n')
        result.add_change(
            '.gitignore', ChangeType.CREATED, 'Ignore rules for build artifacts'
        )


class ReadmeStage(Stage):
    """Summarise the migration in a root ``README.md``.

    Runs last so the summary covers every earlier stage. The output carries
    no timestamp, so identical runs produce identical files.
    """

    name = 'readme'

    def __init__(self, engine_name: str, notes: Sequence[str] = ()):
        super().__init__()
        self.engine_name = engine_name
        self.notes = list(notes)

    def run(
        self,
        source_dir: Path,
        dest_dir: Path,
        verbose: bool,
        result: MigrationResult,
    ) -> None:
        write_text(dest_dir / 'README.md', self.render(result))
        result.add_change(
            'README.md', ChangeType.CREATED, f'Overview of the {self.engine_name} migration'
        )

    def render(self, result: MigrationResult) -> str:
        counts = result.counts_by_type()
        top_level = sorted(
            {
                change.file_path.split('/', 1)[0]
                for change in result.changes
                if '/' in change.file_path
            }
        )

        lines = [
            f'# Site migrated from {self.engine_name}',
            '',
            f'This site was converted from {self.engine_name} to a Jekyll-style layout.',
            '',
            '## Summary',
            '',
        ]
        lines += [f'- {change_type.capitalize()}: {count}' for change_type, count in counts.items()]
        lines += [f'- Warnings: {len(result.warnings)}', f'- Errors: {len(result.errors)}']

        if top_level:
            lines += ['', '## Directories', '']
            lines += [f'- `{name}/`' for name in top_level]

        if self.notes:
            lines += ['', f'## Notes for {self.engine_name} sites', '']
            lines += [f'- {note}' for note in self.notes]

        lines += [
            '',
            '## Next steps',
            '',
            '1. Review converted layouts and includes; template conversion is best effort.',
            '2. Build the site and fix any Liquid errors.',
            '3. Address the warnings listed in MIGRATION.md.',
            '',
        ]
        return '\n'.join(lines)


class NotImplementedStage(Stage):
    """Record that an engine cannot migrate anything yet."""

    name = 'not-implemented'

    def __init__(self, engine_name: str):
        super().__init__()
        self.engine_name = engine_name

    def run(
        self,
        source_dir: Path,
        dest_dir: Path,
        verbose: bool,
        result: MigrationResult,
    ) -> None:
        result.add_warning(f'{self.engine_name} migration is not yet implemented')
