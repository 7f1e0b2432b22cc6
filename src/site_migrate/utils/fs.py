"""Filesystem helpers shared by migration stages."""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Union

from .exceptions import MigrationIOError, MigrationWriteError

PathLike = Union[str, Path]


@dataclass(frozen=True)
class WalkEntry:
    """A single entry discovered while walking a source subtree."""

    path: Path
    relative: str
    is_symlink: bool = False
    is_dir: bool = False


def create_dir_if_not_exists(directory: PathLike) -> bool:
    """Create a directory (and parents) if it is missing.

    Args:
        directory: Directory to create

    Returns:
        True if the directory was created, False if it already existed

    Raises:
        MigrationWriteError: If the directory cannot be created
    """
    directory = Path(directory)
    if directory.is_dir():
        return False
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise MigrationWriteError(
            f'Failed to create directory: {e}', path=directory
        ) from e
    return True


def copy_file(src: PathLike, dest: PathLike) -> None:
    """Copy a file, creating the destination's parent directories.

    Raises:
        MigrationIOError: If the copy fails
    """
    src, dest = Path(src), Path(dest)
    create_dir_if_not_exists(dest.parent)
    try:
        shutil.copyfile(src, dest)
    except OSError as e:
        raise MigrationIOError(
            f'Failed to copy file from {src} to {dest}: {e}', path=src
        ) from e


def read_text(path: PathLike) -> str:
    """Read a UTF-8 text file.

    ``UnicodeDecodeError`` is left to the caller so binary files can be
    copied verbatim instead.

    Raises:
        MigrationIOError: If the file cannot be read
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        raise MigrationIOError(f'Failed to read file: {e}', path=path) from e


def read_text_if_exists(path: PathLike) -> str:
    """Read a small manifest file for detection, returning '' if unreadable."""
    path = Path(path)
    if not path.is_file():
        return ''
    try:
        return path.read_text(encoding='utf-8', errors='replace')
    except OSError:
        return ''


def write_text(path: PathLike, content: str) -> None:
    """Write a UTF-8 text file, creating parent directories.

    Raises:
        MigrationWriteError: If the file cannot be written
    """
    path = Path(path)
    create_dir_if_not_exists(path.parent)
    try:
        with open(path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(content)
    except OSError as e:
        raise MigrationWriteError(f'Failed to write file: {e}', path=path) from e


def write_readme(directory: PathLike, content: str) -> Path:
    """Write ``README.md`` into a directory.

    Returns:
        Path of the written README
    """
    readme_path = Path(directory) / 'README.md'
    write_text(readme_path, content)
    return readme_path


def remove_tree(directory: PathLike) -> None:
    """Recursively delete a directory tree.

    Raises:
        MigrationIOError: If the tree cannot be removed
    """
    directory = Path(directory)
    try:
        if directory.is_symlink() or directory.is_file():
            directory.unlink()
        else:
            shutil.rmtree(directory)
    except OSError as e:
        raise MigrationIOError(
            f'Failed to clean destination directory: {e}', path=directory
        ) from e


def relative_posix(path: PathLike, root: PathLike) -> str:
    """Return ``path`` relative to ``root`` using forward slashes."""
    return PurePosixPath(*Path(path).relative_to(root).parts).as_posix()


def join_posix(*parts: str) -> str:
    """Join ledger path fragments, ignoring empty ones."""
    cleaned = [p.strip('/') for p in parts if p and p.strip('/')]
    return PurePosixPath(*cleaned).as_posix() if cleaned else ''


def is_within(child: PathLike, parent: PathLike) -> bool:
    """Check whether ``child`` is ``parent`` or lies underneath it."""
    child_path = Path(child).resolve()
    parent_path = Path(parent).resolve()
    return child_path == parent_path or parent_path in child_path.parents


def walk_tree(root: PathLike, prune: Iterable[PathLike] = ()) -> Iterator[WalkEntry]:
    """Walk a directory depth-first in name order.

    Regular files are yielded exactly once. Symlinks (to files or
    directories) are yielded with ``is_symlink`` set and never followed.

    Args:
        root: Directory to walk
        prune: Directories below ``root`` that are not entered

    Raises:
        MigrationIOError: If a directory cannot be listed
    """
    root = Path(root)
    pruned = {Path(p).resolve() for p in prune}

    def _walk(directory: Path) -> Iterator[WalkEntry]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise MigrationIOError(
                f'Failed to list directory: {e}', path=directory
            ) from e

        for entry in entries:
            entry_path = Path(entry.path)
            relative = relative_posix(entry_path, root)
            if entry.is_symlink():
                yield WalkEntry(
                    entry_path,
                    relative,
                    is_symlink=True,
                    is_dir=entry_path.is_dir(),
                )
            elif entry.is_dir(follow_symlinks=False):
                if entry_path.resolve() not in pruned:
                    yield from _walk(entry_path)
            elif entry.is_file(follow_symlinks=False):
                yield WalkEntry(entry_path, relative)

    yield from _walk(root)
