"""
This module defines custom exceptions for the indent_config package.

Every error raised on purpose by the package derives from `ConfigError`, so
callers can catch the whole family at once or target a specific failure.
Usage and structural errors also derive from `ValueError`, which keeps them
compatible with code that treated malformed input as a plain value error.
"""
from typing import Optional


class ConfigError(Exception):
    """Base class for all custom exceptions in the indent_config package."""
    pass


class UsageError(ConfigError, ValueError):
    """Raised when a required argument is null or empty, or cannot be written.

    This covers missing file names and source texts as well as keys and values
    that would produce text the parser cannot read back.
    """
    pass


class StructuralError(ConfigError, ValueError):
    """Raised when a line is neither a key-value pair, a comment, nor blank.

    Attributes:
        line_number (int): The 1-based number of the offending line.
        line (str): The offending line, with any trailing comment stripped.
    """
    def __init__(self, line_number: int, line: str):
        super().__init__(f"Invalid sequence on line {line_number}: {line}")
        self.line_number = line_number
        self.line = line


class ConfigIOError(ConfigError):
    """Raised when the underlying file or stream cannot be read or written.

    The lower-level exception is chained as `__cause__`.

    Attributes:
        path (Optional[str]): The file involved, if the failure concerned one.
    """
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NotFoundError(ConfigIOError):
    """Raised when a named config file does not exist at load time."""
    pass
