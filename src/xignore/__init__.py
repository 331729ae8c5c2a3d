"""
xignore: classify the files under a directory against ignore-list rules

Rules come from an ignore-list file at the root of the tree (``.xignore`` by
default), optionally wrapped by caller-supplied before/after rules and refined
by ignore files found in subdirectories.

    from xignore import MatchesOptions, dir_matches
    result = dir_matches("project", MatchesOptions(nested=True))
    print(result.matched_files)
"""

from .config import MatchesOptions
from .constants import DEFAULT_IGNOREFILE
from .errors import IgnorefileError, MatchIOError, NotFoundError, PatternError, XIgnoreError
from .file_loader import IgnoreFileInfo, IgnoreFileLoader
from .fs import FileSystem, PathError, WalkResult
from .matcher import Matcher, MatchesResult, dir_matches
from .pattern import Pattern

__version__ = "0.3.0"

__all__ = [
    'DEFAULT_IGNOREFILE',
    'FileSystem',
    'IgnoreFileInfo',
    'IgnoreFileLoader',
    'IgnorefileError',
    'MatchIOError',
    'Matcher',
    'MatchesOptions',
    'MatchesResult',
    'NotFoundError',
    'PathError',
    'Pattern',
    'PatternError',
    'WalkResult',
    'XIgnoreError',
    'dir_matches',
]
