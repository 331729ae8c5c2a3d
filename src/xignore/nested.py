"""
Resolution of ignore-list files found below the root

Each nested ignore file governs the subtree of its own directory. Scopes are
processed as a work list ordered shallowest first, so where two scopes touch
the same path the deeper one writes last and wins.
"""

import posixpath
from typing import Dict, List

from .file_loader import IgnoreFileLoader
from .fs import FileSystem, PathError, WalkResult, join_path, path_depth
from .state_map import StateMap, apply_patterns
from .utils import get_logger

logger = get_logger(__name__)


def find_nested_ignorefiles(state: StateMap, ignorefile: str) -> List[str]:
    """
    Find ignore files below the root among the classified paths

    Args:
        state: Root state map
        ignorefile: Ignore-list file name

    Returns:
        Root-relative ignore file paths, shallowest first (ties by path)
    """
    found = [
        path for path in state
        if posixpath.basename(path) == ignorefile and len(path) > len(ignorefile)
    ]
    return sorted(found, key=lambda path: (path_depth(path), path))


def apply_nested(vfs: FileSystem, state: StateMap, ignorefile: str,
                 walk: WalkResult, loader: IgnoreFileLoader) -> List[PathError]:
    """
    Apply every nested ignore file to the root state map, in place

    Args:
        vfs: Filesystem view of the root
        state: Root state map, updated in place
        ignorefile: Ignore-list file name
        walk: The root walk; scopes take their candidates from it
        loader: Loader used for each nested ignore file

    Returns:
        Root-relative paths that failed inside nested scopes

    Raises:
        IgnorefileError: If a nested ignore file cannot be read
        PatternError: If a nested ignore file holds a malformed rule
        MatchIOError: If directory cascading fails inside a nested scope
    """
    queue = find_nested_ignorefiles(state, ignorefile)
    if queue:
        logger.info(f"Resolving {len(queue)} nested {ignorefile} files")

    errors: Dict[str, PathError] = {}
    for ignore_path in queue:
        scope_dir = posixpath.dirname(ignore_path)
        scope_vfs = vfs.scoped(scope_dir)
        scope_walk = walk.subtree(scope_dir)

        patterns = loader.load_patterns(scope_vfs)
        scope_state = apply_patterns(scope_vfs, scope_walk.paths, patterns, baseline=False)
        logger.debug(f"Scope {scope_dir}: {len(patterns)} patterns, {len(scope_state)} paths touched")

        for path, matched in scope_state.items():
            state[join_path(scope_dir, path)] = matched

        for error in scope_walk.errors:
            root_path = join_path(scope_dir, error.path)
            errors.setdefault(root_path, PathError(root_path, error.is_dir, error.reason))

    for path in errors:
        state.pop(path, None)

    return [errors[path] for path in sorted(errors)]
