"""Detection predicates over marker files and manifests.

Every predicate is read-only and looks at a handful of paths directly under
the source root; none of them walks the tree.
"""

from pathlib import Path
from typing import Iterable

from ..utils.fs import read_text_if_exists


def has_file(source_dir: Path, *names: str) -> bool:
    """True if any of the named files exists."""
    return any((source_dir / name).is_file() for name in names)


def has_dir(source_dir: Path, name: str) -> bool:
    return (source_dir / name).is_dir()


def has_dirs(source_dir: Path, *names: str) -> bool:
    """True if every named directory exists."""
    return all(has_dir(source_dir, name) for name in names)


def has_path(source_dir: Path, *names: str) -> bool:
    """True if any of the named files or directories exists."""
    return any((source_dir / name).exists() for name in names)


def file_contains(source_dir: Path, name: str, needles: Iterable[str]) -> bool:
    """True if a manifest file mentions any of the given substrings.

    Args:
        source_dir: Site root
        name: Manifest file name, relative to the root
        needles: Substrings to look for
    """
    content = read_text_if_exists(source_dir / name)
    if not content:
        return False
    return any(needle in content for needle in needles)


def package_json_depends_on(source_dir: Path, package: str) -> bool:
    """True if ``package.json`` mentions the quoted package name."""
    return file_contains(source_dir, 'package.json', [f'"{package}"'])


def gemfile_mentions(source_dir: Path, gem: str) -> bool:
    """True if ``Gemfile`` or ``Gemfile.lock`` mentions a gem."""
    return file_contains(source_dir, 'Gemfile', [gem]) or file_contains(
        source_dir, 'Gemfile.lock', [gem]
    )
