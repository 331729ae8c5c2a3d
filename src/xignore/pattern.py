"""
Glob patterns: parsing of rule lines and compilation to path matchers

Rules use a small glob dialect that always matches against the full
root-relative path:

    *      any run of characters except '/'
    **     any run of characters including '/'; '**/' at the start of a
           segment also matches zero directories
    ?      one character except '/'
    [...]  character class, '!' or '^' negates, ranges allowed
    \\x     the literal character x

Compilation goes through pathspec: GlobPattern is a RegexPattern subclass
registered as the 'xglob' pattern factory, so a compiled rule is an ordinary
pathspec.PathSpec.
"""

import re
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, List

import pathspec
import pathspec.util
from pathspec.pattern import RegexPattern

from .errors import PatternError

GLOB_FACTORY = 'xglob'

_GLOB_SPECIAL = frozenset('*?[]\\')


def _translate_class(glob: str, start: int):
    """
    Translate the character class opening at glob[start]

    Returns:
        Tuple of (regex fragment, index just past the closing bracket)
    """
    i = start + 1
    n = len(glob)
    negate = False
    if i < n and glob[i] in '!^':
        negate = True
        i += 1

    members = []
    first = True
    while True:
        if i >= n:
            raise PatternError(glob, "unterminated character class")
        c = glob[i]
        if c == ']' and not first:
            break
        first = False
        if c == '\\':
            i += 1
            if i >= n:
                raise PatternError(glob, "trailing escape character")
            members.append(re.escape(glob[i]))
        elif c == '-':
            members.append('-')
        else:
            members.append(re.escape(c))
        i += 1

    # A negated class never matches the separator
    prefix = '^/' if negate else ''
    return f"[{prefix}{''.join(members)}]", i + 1


def glob_to_regex(glob: str) -> str:
    """
    Translate a glob rule into an anchored regular expression

    Args:
        glob: Glob text (without any leading '!')

    Returns:
        Regular expression source matching the full path

    Raises:
        PatternError: On an unterminated class or a trailing escape
    """
    parts = ['(?s)^']
    i = 0
    n = len(glob)
    while i < n:
        c = glob[i]
        if c == '*':
            j = i
            while j < n and glob[j] == '*':
                j += 1
            if j - i == 1:
                parts.append('[^/]*')
                i = j
                continue
            segment_start = i == 0 or glob[i - 1] == '/'
            if segment_start and j < n and glob[j] == '/':
                parts.append('(?:.*/)?')
                i = j + 1
            else:
                parts.append('.*')
                i = j
        elif c == '?':
            parts.append('[^/]')
            i += 1
        elif c == '[':
            fragment, i = _translate_class(glob, i)
            parts.append(fragment)
        elif c == '\\':
            if i + 1 >= n:
                raise PatternError(glob, "trailing escape character")
            parts.append(re.escape(glob[i + 1]))
            i += 2
        else:
            parts.append(re.escape(c))
            i += 1
    parts.append(r'\Z')
    return ''.join(parts)


def escape_glob(path: str) -> str:
    """Escape glob metacharacters so path matches only itself"""
    return ''.join('\\' + c if c in _GLOB_SPECIAL else c for c in path)


class GlobPattern(RegexPattern):
    """pathspec pattern for the xignore glob dialect"""

    __slots__ = ()

    @classmethod
    def pattern_to_regex(cls, pattern):
        if isinstance(pattern, bytes):
            pattern = pattern.decode('utf-8')
        return glob_to_regex(pattern), True


pathspec.util.register_pattern(GLOB_FACTORY, GlobPattern)


@dataclass(frozen=True)
class Pattern:
    """One parsed rule: glob text plus whether it marks paths unmatched"""
    raw: str
    glob: str
    exclusion: bool = False

    @classmethod
    def parse(cls, rule: str) -> "Pattern":
        """
        Parse one rule line

        A rule starting with '!' (and longer than just '!') is an exclusion of
        the remaining glob. Empty and whitespace-only rules give the empty
        pattern, which never matches anything.
        """
        if not rule or not rule.strip():
            return cls(raw=rule, glob="")
        if rule[0] == '!' and len(rule) > 1:
            return cls(raw=rule, glob=rule[1:], exclusion=True)
        return cls(raw=rule, glob=rule)

    @classmethod
    def for_directory(cls, directory: str, exclusion: bool) -> "Pattern":
        """Cascade pattern covering every descendant of directory"""
        glob = escape_glob(directory) + '/**'
        raw = '!' + glob if exclusion else glob
        return cls(raw=raw, glob=glob, exclusion=exclusion)

    def __str__(self) -> str:
        return self.raw

    @property
    def is_empty(self) -> bool:
        return self.glob == ""

    @cached_property
    def spec(self) -> pathspec.PathSpec:
        try:
            return pathspec.PathSpec.from_lines(GLOB_FACTORY, [self.glob])
        except re.error as e:
            raise PatternError(self.glob, str(e)) from e

    def compile(self) -> "Pattern":
        """
        Compile the glob once, raising early on malformed syntax

        Raises:
            PatternError: If the glob is malformed
        """
        if not self.is_empty:
            _ = self.spec
        return self

    def match(self, candidates: Iterable[str]) -> List[str]:
        """
        Return every candidate whose full path matches this pattern

        The exclusion flag is not considered here; callers decide what a
        match means.
        """
        if self.is_empty:
            return []
        return list(self.spec.match_files(candidates))
