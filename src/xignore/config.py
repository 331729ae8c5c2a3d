"""
Options for a matching call
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import DEFAULT_IGNOREFILE, IGNOREFILE_ENV_VAR, NESTED_ENV_VAR

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def default_ignorefile() -> str:
    """Ignore-list file name used when none is given"""
    return os.environ.get(IGNOREFILE_ENV_VAR) or DEFAULT_IGNOREFILE


@dataclass
class MatchesOptions:
    """Options for Matcher.matches"""
    # Ignore-list file name, like '.gitignore', '.dockerignore' or 'chefignore'
    ignorefile: str = ""
    # Also apply ignore files found in subdirectories
    nested: bool = False
    # Rules evaluated before the ignore file's own (lowest precedence)
    before_patterns: List[str] = field(default_factory=list)
    # Rules evaluated after the ignore file's own (highest precedence)
    after_patterns: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Resolve the default filename and validate it"""
        if not self.ignorefile:
            self.ignorefile = default_ignorefile()
        if '/' in self.ignorefile or os.sep in self.ignorefile or self.ignorefile in ('.', '..'):
            raise ValueError(f"ignorefile must be a bare file name, got {self.ignorefile!r}")
        self.before_patterns = list(self.before_patterns or [])
        self.after_patterns = list(self.after_patterns or [])

    @classmethod
    def from_env(cls, ignorefile: Optional[str] = None, nested: Optional[bool] = None,
                 **kwargs) -> "MatchesOptions":
        """
        Build options, filling unset values from the environment

        Args:
            ignorefile: Overrides XIGNORE_FILENAME
            nested: Overrides XIGNORE_NESTED
            **kwargs: Remaining MatchesOptions fields
        """
        if nested is None:
            nested = os.environ.get(NESTED_ENV_VAR, '').lower() in _TRUE_VALUES
        return cls(ignorefile=ignorefile or "", nested=nested, **kwargs)
