"""
Per-scope matched/unmatched state and the pattern application algorithm
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import MatchIOError
from .fs import FileSystem
from .pattern import Pattern
from .utils import get_logger

logger = get_logger(__name__)

# Root-relative path -> matched
StateMap = Dict[str, bool]


def _apply_in_order(patterns: Iterable[Pattern], candidates: Sequence[str],
                    state: StateMap) -> List[Tuple[Pattern, List[str]]]:
    """
    Write each pattern's verdict for its matches into state, last write wins

    Returns:
        (pattern, matched paths) for each non-empty pattern, in order
    """
    matches_per_pattern = []
    for pattern in patterns:
        if pattern.is_empty:
            continue
        matched = pattern.match(candidates)
        value = not pattern.exclusion
        for path in matched:
            state[path] = value
        logger.trace(f"Pattern {pattern.raw!r} matched {len(matched)} paths")
        matches_per_pattern.append((pattern, matched))
    return matches_per_pattern


def _resolve_cascade(cascade: Dict[str, Tuple[int, bool]],
                     candidates: Sequence[str]) -> StateMap:
    """
    Give each candidate the verdict of its latest cascading ancestor

    Equivalent to applying a '<dir>/**' pattern per cascade entry in order,
    without matching every candidate against every directory.

    Args:
        cascade: Directory -> (cascade order, verdict)
        candidates: Scope-relative paths
    """
    states: StateMap = {}
    if not cascade:
        return states
    for path in candidates:
        best = None
        parent = path
        cut = parent.rfind('/')
        while cut > 0:
            parent = parent[:cut]
            entry = cascade.get(parent)
            if entry is not None and (best is None or entry[0] > best[0]):
                best = entry
            cut = parent.rfind('/')
        if best is not None:
            states[path] = best[1]
    return states


def apply_patterns(vfs: FileSystem, candidates: Sequence[str],
                   patterns: Sequence[Pattern], baseline: bool = False) -> StateMap:
    """
    Classify the candidates of one scope

    Explicit matches are recorded first; every matched directory then
    contributes a '<dir>/**' pattern with the same exclusion flag. The
    cascaded verdicts are laid down before the explicit ones, so a rule
    naming a path always beats a rule that only matched one of its
    ancestors.

    Args:
        vfs: Filesystem view rooted at the scope
        candidates: Scope-relative paths found under the scope
        patterns: Ordered patterns governing the scope
        baseline: Start every candidate as unmatched (root scope only);
            otherwise only paths touched by a pattern appear in the result

    Returns:
        New state map owned by the caller

    Raises:
        MatchIOError: If a matched path cannot be tested for being a directory
    """
    state: StateMap = dict.fromkeys(candidates, False) if baseline else {}

    file_states: StateMap = {}
    cascade: Dict[str, Tuple[int, bool]] = {}
    cascades = 0
    for pattern, matched in _apply_in_order(patterns, candidates, file_states):
        for path in matched:
            try:
                is_dir = vfs.is_dir(path)
            except OSError as e:
                raise MatchIOError(path, e) from e
            if is_dir:
                cascade[path] = (cascades, not pattern.exclusion)
                cascades += 1

    cascade_states = _resolve_cascade(cascade, candidates)

    state.update(cascade_states)
    state.update(file_states)

    logger.debug(
        f"Applied {len(patterns)} patterns ({cascades} directory cascades) "
        f"to {len(candidates)} paths under {vfs.root}"
    )
    return state
