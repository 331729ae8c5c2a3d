"""
File loader for parsing and validating ignore-list files
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .constants import (
    BROAD_PATTERNS,
    DEFAULT_IGNOREFILE,
    MAX_IGNORE_FILE_SIZE,
    MAX_PATTERNS_PER_FILE,
)
from .errors import IgnorefileError, PatternError
from .fs import FileSystem
from .pattern import Pattern
from .utils import get_logger

logger = get_logger(__name__)

# A backslash before a name character reads like a Windows path separator
_PATH_BACKSLASH = re.compile(r"\\[A-Za-z0-9_]")


@dataclass
class ValidationWarning:
    """Represents a validation warning in an ignore file"""
    line: int
    pattern: str
    message: str
    level: int = logging.WARNING


@dataclass
class IgnoreFileInfo:
    """Information about a loaded ignore file"""
    path: str
    patterns: List[Pattern] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=lambda: {
        'total_lines': 0,
        'empty_lines': 0,
        'comment_lines': 0,
        'pattern_lines': 0,
    })
    found: bool = True

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def rules(self) -> List[str]:
        return [p.raw for p in self.patterns]


def _strip_trailing_whitespace(line: str) -> str:
    """Drop trailing whitespace, keeping one escaped whitespace character"""
    line = line.rstrip('\r\n')
    rule = line.rstrip()
    if len(rule) < len(line):
        backslashes = len(rule) - len(rule.rstrip('\\'))
        if backslashes % 2:
            rule = line[:len(rule) + 1]
    return rule


def split_rules(lines: Iterable[str], stats: Optional[Dict[str, int]] = None) -> List[tuple]:
    """
    Turn raw ignore-file lines into rule strings

    Trailing whitespace is dropped unless escaped with a backslash, leading
    whitespace is part of the rule.
    Blank lines and lines starting with '#' are skipped.

    Returns:
        List of (line number, rule) tuples
    """
    rules = []
    for line_num, line in enumerate(lines, 1):
        rule = _strip_trailing_whitespace(line)
        if stats is not None:
            stats['total_lines'] = stats.get('total_lines', 0) + 1

        if not rule.strip():
            if stats is not None:
                stats['empty_lines'] = stats.get('empty_lines', 0) + 1
            continue

        if rule.startswith('#'):
            if stats is not None:
                stats['comment_lines'] = stats.get('comment_lines', 0) + 1
            continue

        if stats is not None:
            stats['pattern_lines'] = stats.get('pattern_lines', 0) + 1
        rules.append((line_num, rule))
    return rules


class IgnoreFileLoader:
    """
    Handles loading, parsing, and validating ignore-list files

    Unlike per-path read errors, every problem found here is fatal: a file
    that cannot be read or holds a broken rule leaves the whole scope
    undefined.
    """

    def __init__(self, ignore_filename: str = DEFAULT_IGNOREFILE):
        """
        Initialize loader

        Args:
            ignore_filename: Name of ignore files to look for
        """
        self.ignore_filename = ignore_filename or DEFAULT_IGNOREFILE

    def load_file(self, vfs: FileSystem, path: Optional[str] = None) -> IgnoreFileInfo:
        """
        Load, parse and compile an ignore file

        Args:
            vfs: Filesystem view of the scope the file governs
            path: Path of the ignore file inside the view (defaults to the loader's filename)

        Returns:
            IgnoreFileInfo; a missing file yields one with no patterns and found=False

        Raises:
            IgnorefileError: If the file cannot be read or exceeds the limits
            PatternError: If a rule fails to compile
        """
        path = path or self.ignore_filename
        info = IgnoreFileInfo(path=path)
        source = str(vfs.real_path(path))

        try:
            if not vfs.exists(path) or vfs.is_dir(path):
                logger.debug(f"No ignore file at {source}")
                info.found = False
                return info
            file_size = vfs.size(path)
        except OSError as e:
            raise IgnorefileError(f"Cannot stat {source}: {e}") from e

        if file_size > MAX_IGNORE_FILE_SIZE:
            raise IgnorefileError(
                f"{source}: file too large: {file_size} bytes (max: {MAX_IGNORE_FILE_SIZE})"
            )

        try:
            with vfs.open_text(path) as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise IgnorefileError(f"Error reading {source}: {e}") from e

        rules = split_rules(lines, info.stats)
        if len(rules) > MAX_PATTERNS_PER_FILE:
            raise IgnorefileError(
                f"{source}: too many patterns: {len(rules)} (max: {MAX_PATTERNS_PER_FILE})"
            )

        for line_num, rule in rules:
            info.patterns.append(compile_rule(rule, source, line_num))
            for level, warning_msg in self._check_pattern_warnings(rule):
                info.warnings.append(ValidationWarning(
                    line=line_num,
                    pattern=rule,
                    message=warning_msg,
                    level=level,
                ))

        for warning in info.warnings:
            logger.log(warning.level, f"{source}:{warning.line}: {warning.message}")

        logger.debug(f"Loaded {len(info.patterns)} patterns from {source}")
        return info

    def load_patterns(self, vfs: FileSystem) -> List[Pattern]:
        """Compiled patterns of the scope's ignore file, in file order"""
        return self.load_file(vfs).patterns

    def _check_pattern_warnings(self, rule: str) -> List[Tuple[int, str]]:
        """
        Check a rule for likely mistakes that aren't errors

        Args:
            rule: Rule text as written in the file

        Returns:
            List of (log level, warning message) tuples; broad patterns are
            reported at INFO
        """
        warnings = []
        pattern = rule[1:] if rule.startswith('!') and len(rule) > 1 else rule

        # Escapes are fine, but a backslash used as a path separator is not
        if _PATH_BACKSLASH.search(pattern):
            warnings.append((
                logging.WARNING,
                "Pattern contains backslash. Use forward slashes for paths."
            ))

        if pattern.startswith('/'):
            warnings.append((
                logging.WARNING,
                f"Pattern starts with /. Paths are relative to the ignore file; "
                f"did you mean '{pattern.lstrip('/')}'?"
            ))

        if pattern in BROAD_PATTERNS:
            warnings.append((
                logging.INFO,
                "Very broad pattern - will match many files"
            ))

        if pattern.endswith('/') and len(pattern) > 1:
            warnings.append((
                logging.WARNING,
                f"Pattern ends with / and can never match; use '{pattern.rstrip('/')}' "
                f"to match the directory and its contents"
            ))

        return warnings


def compile_rule(rule: str, source: Optional[str] = None, line: Optional[int] = None) -> Pattern:
    """
    Parse and compile one rule, attributing failures to their source

    Raises:
        PatternError: If the rule's glob is malformed
    """
    try:
        return Pattern.parse(rule).compile()
    except PatternError as e:
        raise PatternError(e.pattern, e.message, source=source, line=line) from e


def compile_rules(rules: Iterable[str], source: str = "<options>") -> List[Pattern]:
    """
    Parse and compile caller-supplied rule strings

    Args:
        rules: Rule strings, in evaluation order
        source: Label used in error messages

    Returns:
        Compiled patterns in the same order
    """
    return [compile_rule(rule, source, index) for index, rule in enumerate(rules, 1)]
