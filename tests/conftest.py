"""Shared fixtures for building source sites on disk."""

from pathlib import Path
from typing import Dict, Union

import pytest


def write_site(root: Path, files: Dict[str, Union[str, bytes]]) -> Path:
    """Create files under ``root`` from a mapping of relative path to content."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding='utf-8')
    return root


@pytest.fixture
def make_site(tmp_path):
    """Factory building a source site in a fresh directory."""
    counter = {'n': 0}

    def _make(files: Dict[str, Union[str, bytes]], name: str = 'site') -> Path:
        counter['n'] += 1
        root = tmp_path / f'{name}{counter["n"]}'
        root.mkdir()
        return write_site(root, files)

    return _make


@pytest.fixture
def dest_dir(tmp_path):
    return tmp_path / 'out'
