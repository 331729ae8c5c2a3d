"""
Central configuration for ignore file processing
"""

# Default ignore-list filename, used when the caller does not name one
DEFAULT_IGNOREFILE = ".xignore"

# Environment overrides
IGNOREFILE_ENV_VAR = "XIGNORE_FILENAME"
NESTED_ENV_VAR = "XIGNORE_NESTED"

# Limits for security and performance
MAX_IGNORE_FILE_SIZE = 1024 * 1024  # 1MB
MAX_PATTERNS_PER_FILE = 10000

# Patterns the loader warns about as overly broad
BROAD_PATTERNS = ("*", "**", "**/*")
