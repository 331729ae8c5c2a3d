"""
Read-only filesystem view used by the matching engine

Every path handled here is relative to the view's root and uses forward
slashes. The engine never touches the OS directly; it goes through a
FileSystem (or a scoped view of one), which keeps nested scopes and tests
with injected failures on the same code path.
"""

import os
import posixpath
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Dict, List, Tuple, Union

from .errors import MatchIOError
from .utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PathError:
    """A path that could not be classified"""
    path: str
    is_dir: bool
    reason: str = ""


@dataclass
class WalkResult:
    """Paths found by one pre-order walk, plus the entries that failed"""
    paths: List[str] = field(default_factory=list)
    errors: List[PathError] = field(default_factory=list)
    # path -> listed as a directory (symlinks are not followed)
    kinds: Dict[str, bool] = field(default_factory=dict)

    def subtree(self, directory: str) -> "WalkResult":
        """
        Re-base the walk onto a subdirectory

        Args:
            directory: Root-relative directory to use as the new root

        Returns:
            WalkResult holding only descendants of directory, relative to it
        """
        prefix = directory.rstrip('/') + '/'
        cut = len(prefix)
        return WalkResult(
            paths=[p[cut:] for p in self.paths if p.startswith(prefix)],
            errors=[
                PathError(e.path[cut:], e.is_dir, e.reason)
                for e in self.errors if e.path.startswith(prefix)
            ],
            kinds={
                p[cut:]: is_dir for p, is_dir in self.kinds.items() if p.startswith(prefix)
            },
        )


def join_path(parent: str, name: str) -> str:
    """Join root-relative path segments with forward slashes"""
    if not parent:
        return name
    if not name:
        return parent
    return posixpath.join(parent, name)


def path_depth(path: str) -> int:
    """Number of segments in a root-relative path"""
    return len([part for part in path.split('/') if part])


class FileSystem:
    """
    Read-only view of the directory tree rooted at ``root``
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.root)!r})"

    def real_path(self, path: str) -> Path:
        """Host path for a root-relative path"""
        if not path:
            return self.root
        return self.root.joinpath(*path.split('/'))

    def exists(self, path: str) -> bool:
        return os.path.lexists(self.real_path(path))

    def is_dir(self, path: str) -> bool:
        """
        Check whether path refers to a directory, following symlinks

        Raises:
            OSError: If the path cannot be stat'ed
        """
        return stat.S_ISDIR(os.stat(self.real_path(path)).st_mode)

    def size(self, path: str) -> int:
        return os.stat(self.real_path(path)).st_size

    def open_text(self, path: str, encoding: str = 'utf-8-sig') -> IO[str]:
        return open(self.real_path(path), 'r', encoding=encoding)

    def list_dir(self, path: str) -> List[Tuple[str, bool]]:
        """
        List a directory without following symlinks

        Returns:
            Sorted (name, is_directory) pairs

        Raises:
            OSError: If the directory cannot be read
        """
        with os.scandir(self.real_path(path)) as entries:
            return sorted(
                (entry.name, entry.is_dir(follow_symlinks=False))
                for entry in entries
            )

    def walk(self, top: str = "") -> WalkResult:
        """
        Collect every path under top in pre-order

        Directories that cannot be listed are recorded as errors and their
        subtree is skipped; the walk itself never aborts, except when top
        itself cannot be listed.

        Args:
            top: Root-relative directory to start from ("" for the root)

        Returns:
            WalkResult with paths relative to this view's root (top excluded)
        """
        result = WalkResult()
        stack: List[Tuple[str, bool]] = [(top, True)]

        while stack:
            path, is_directory = stack.pop()
            if not is_directory:
                result.paths.append(path)
                result.kinds[path] = False
                continue

            try:
                entries = self.list_dir(path)
            except OSError as e:
                if path == top:
                    raise MatchIOError(path, e) from e
                logger.warning(f"Cannot read directory {path}: {e}")
                result.errors.append(PathError(path, is_dir=True, reason=str(e)))
                continue

            if path != top:
                result.paths.append(path)
                result.kinds[path] = True

            children = [(join_path(path, name), entry_is_dir) for name, entry_is_dir in entries]
            stack.extend(reversed(children))

        logger.trace(f"Walked {self.root}: {len(result.paths)} paths, {len(result.errors)} errors")
        return result

    def scoped(self, directory: str) -> "FileSystem":
        """Return a view rooted at a subdirectory of this one"""
        if not directory:
            return self
        return ScopedFileSystem(self, directory)


class ScopedFileSystem(FileSystem):
    """
    View of a subdirectory that delegates every call to its parent view

    Delegating (instead of re-rooting at the host path) keeps any behaviour
    the parent view overrides in effect for nested scopes.
    """

    def __init__(self, parent: FileSystem, prefix: str):
        self.parent = parent
        self.prefix = prefix.strip('/')
        super().__init__(parent.real_path(self.prefix))

    def __repr__(self) -> str:
        return f"ScopedFileSystem({self.parent!r}, {self.prefix!r})"

    def _outer(self, path: str) -> str:
        return join_path(self.prefix, path)

    def exists(self, path: str) -> bool:
        return self.parent.exists(self._outer(path))

    def is_dir(self, path: str) -> bool:
        return self.parent.is_dir(self._outer(path))

    def size(self, path: str) -> int:
        return self.parent.size(self._outer(path))

    def open_text(self, path: str, encoding: str = 'utf-8-sig') -> IO[str]:
        return self.parent.open_text(self._outer(path), encoding=encoding)

    def list_dir(self, path: str) -> List[Tuple[str, bool]]:
        return self.parent.list_dir(self._outer(path))
