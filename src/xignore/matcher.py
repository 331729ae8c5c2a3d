"""
Matcher: classifies every path under a directory against its ignore files
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .config import MatchesOptions
from .errors import NotFoundError
from .file_loader import IgnoreFileLoader, compile_rules
from .fs import FileSystem, PathError
from .nested import apply_nested
from .state_map import StateMap, apply_patterns
from .utils import get_logger, log_with_context

logger = get_logger(__name__)


def _native(paths: Iterable[str]) -> List[str]:
    """Sort slash-separated paths and convert them to host separators"""
    ordered = sorted(paths)
    if os.sep == '/':
        return ordered
    return [p.replace('/', os.sep) for p in ordered]


@dataclass
class MatchesResult:
    """Outcome of one matching call; every list is sorted and disjoint from the others"""
    base_dir: str
    # paths matched by the ignore rules
    matched_files: List[str] = field(default_factory=list)
    unmatched_files: List[str] = field(default_factory=list)
    matched_dirs: List[str] = field(default_factory=list)
    unmatched_dirs: List[str] = field(default_factory=list)
    # paths that could not be classified
    error_files: List[str] = field(default_factory=list)
    error_dirs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def has_errors(self) -> bool:
        return bool(self.error_files or self.error_dirs)


class Matcher:
    """
    Runs the matching algorithm over a read-only filesystem view

    A Matcher keeps no state between calls, so one instance can be reused.
    """

    def __init__(self, filesystem_factory: Callable[[Union[str, Path]], FileSystem] = FileSystem):
        """
        Args:
            filesystem_factory: Builds the filesystem view for a base directory
        """
        self.filesystem_factory = filesystem_factory

    @classmethod
    def system(cls) -> "Matcher":
        """Matcher over the host filesystem"""
        return cls(FileSystem)

    def matches(self, base_dir: Union[str, Path],
                options: Optional[MatchesOptions] = None) -> MatchesResult:
        """
        Classify every file and directory under base_dir

        Args:
            base_dir: Directory to classify
            options: Ignore file name, nesting and injected rules

        Returns:
            MatchesResult with paths relative to base_dir

        Raises:
            NotFoundError: If base_dir is missing or not a directory
            PatternError: If any rule is malformed
            IgnorefileError: If an ignore file cannot be read
            MatchIOError: If directory cascading cannot test a path
        """
        options = options or MatchesOptions()
        base_dir = str(base_dir)
        vfs = self.filesystem_factory(base_dir)
        self._check_base_dir(vfs, base_dir)

        loader = IgnoreFileLoader(options.ignorefile)
        patterns = (
            compile_rules(options.before_patterns, source="before_patterns")
            + loader.load_patterns(vfs)
            + compile_rules(options.after_patterns, source="after_patterns")
        )

        walk = vfs.walk()
        state = apply_patterns(vfs, walk.paths, patterns, baseline=True)

        errors: Dict[str, PathError] = {e.path: e for e in walk.errors}
        if options.nested:
            for error in apply_nested(vfs, state, options.ignorefile, walk, loader):
                errors.setdefault(error.path, error)

        result = self._make_result(vfs, base_dir, state, errors.values(), walk.kinds)
        log_with_context(
            logger, logging.INFO,
            f"Matched {len(result.matched_files)} files and {len(result.matched_dirs)} "
            f"directories under {base_dir}",
            base_dir=base_dir,
            ignorefile=options.ignorefile,
            nested=options.nested,
            matched_files=len(result.matched_files),
            unmatched_files=len(result.unmatched_files),
            matched_dirs=len(result.matched_dirs),
            unmatched_dirs=len(result.unmatched_dirs),
            error_files=len(result.error_files),
            error_dirs=len(result.error_dirs),
        )
        return result

    @staticmethod
    def _check_base_dir(vfs: FileSystem, base_dir: str) -> None:
        try:
            is_dir = vfs.is_dir("")
        except FileNotFoundError as e:
            raise NotFoundError(base_dir) from e
        except OSError as e:
            raise NotFoundError(base_dir, str(e)) from e
        if not is_dir:
            raise NotFoundError(base_dir, "not a directory")

    @staticmethod
    def _make_result(vfs: FileSystem, base_dir: str, state: StateMap,
                     errors: Iterable[PathError],
                     kinds: Optional[Dict[str, bool]] = None) -> MatchesResult:
        """
        Partition the final state into the result lists

        Each path is tested again for being a directory. A path whose test
        fails is reported instead of aborting the call: in error_files when
        the walk listed it as a non-directory, in error_dirs otherwise.
        """
        kinds = kinds or {}
        matched_files, unmatched_files = [], []
        matched_dirs, unmatched_dirs = [], []
        error_files = set()
        error_dirs = set()

        for error in errors:
            (error_dirs if error.is_dir else error_files).add(error.path)

        for path, matched in state.items():
            if not path or path in error_files or path in error_dirs:
                continue
            try:
                is_dir = vfs.is_dir(path)
            except OSError as e:
                logger.warning(f"Cannot classify {path}: {e}")
                (error_dirs if kinds.get(path, True) else error_files).add(path)
                continue
            if is_dir:
                (matched_dirs if matched else unmatched_dirs).append(path)
            else:
                (matched_files if matched else unmatched_files).append(path)

        return MatchesResult(
            base_dir=base_dir,
            matched_files=_native(matched_files),
            unmatched_files=_native(unmatched_files),
            matched_dirs=_native(matched_dirs),
            unmatched_dirs=_native(unmatched_dirs),
            error_files=_native(error_files),
            error_dirs=_native(error_dirs),
        )


def dir_matches(base_dir: Union[str, Path], options: Optional[MatchesOptions] = None) -> MatchesResult:
    """Classify base_dir with a matcher over the host filesystem"""
    return Matcher.system().matches(base_dir, options)
