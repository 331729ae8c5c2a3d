"""
Exception types raised by the matching engine
"""

from typing import Optional


class XIgnoreError(Exception):
    """Base class for every error raised by xignore."""
    pass


class NotFoundError(XIgnoreError, FileNotFoundError):
    """Raised when the base directory is missing or is not a directory."""

    def __init__(self, path: str, reason: str = "no such directory"):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class PatternError(XIgnoreError, ValueError):
    """Raised when a glob rule cannot be compiled."""

    def __init__(self, pattern: str, message: str, source: Optional[str] = None,
                 line: Optional[int] = None):
        self.pattern = pattern
        self.message = message
        self.source = source
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        location = ""
        if self.source:
            location = f"{self.source}:{self.line}: " if self.line else f"{self.source}: "
        return f"{location}invalid pattern {self.pattern!r}: {self.message}"


class IgnorefileError(XIgnoreError):
    """Raised when an ignore-list file cannot be read or exceeds the loader limits."""
    pass


class MatchIOError(XIgnoreError, OSError):
    """Raised when a filesystem check the engine cannot skip fails."""

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"{path or '.'}: {cause}")

    def __str__(self) -> str:
        return f"{self.path or '.'}: {self.cause}"
