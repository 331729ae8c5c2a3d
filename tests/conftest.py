"""
Shared fixtures: on-disk trees and a filesystem view with injected failures
"""

import errno
import os
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

# Allow running the suite from a checkout without installing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from xignore.fs import FileSystem


def build_tree(root: Path, entries: Dict[str, Optional[str]]) -> Path:
    """
    Create files and directories under root

    Keys are '/'-separated relative paths; a value of None makes a directory,
    a string makes a file with that content.
    """
    root.mkdir(parents=True, exist_ok=True)
    for rel_path, content in entries.items():
        target = root.joinpath(*rel_path.split('/'))
        if content is None:
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding='utf-8')
    return root


@pytest.fixture
def make_tree(tmp_path_factory):
    """Factory fixture: make_tree({'a/b.txt': '', 'dir': None}, name='tree')"""
    # A neutral base dir keeps the test's own name out of paths that show up in log text
    base = tmp_path_factory.mktemp('case')

    def _make(entries: Dict[str, Optional[str]], name: str = 'tree') -> Path:
        return build_tree(base / name, entries)
    return _make


class FlakyFileSystem(FileSystem):
    """FileSystem whose listing or stat calls fail for chosen paths"""

    def __init__(self, root, unreadable_dirs: Iterable[str] = (),
                 broken_stats: Iterable[str] = ()):
        super().__init__(root)
        self.unreadable_dirs = set(unreadable_dirs)
        self.broken_stats = set(broken_stats)

    def list_dir(self, path):
        if path in self.unreadable_dirs:
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)
        return super().list_dir(path)

    def is_dir(self, path):
        if path in self.broken_stats:
            raise OSError(errno.EIO, os.strerror(errno.EIO), path)
        return super().is_dir(path)


@pytest.fixture
def flaky_fs():
    """Factory for filesystem_factory callables with injected failures"""
    def _factory(unreadable_dirs=(), broken_stats=()):
        return lambda root: FlakyFileSystem(root, unreadable_dirs, broken_stats)
    return _factory
