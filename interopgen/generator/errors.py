"""
Exceptions and error handling for the interop binding generator.

Every failure aborts the whole run: the managed and native pointer tables are
only meaningful as a matched pair built from a complete set of headers, so no
error is recoverable at the level of a single file.
"""

import os
from pathlib import Path


class InteropGenError(Exception):
    """Base exception for every error raised while generating bindings.

    The error carries the source file and line where the problem originated,
    when known, and appends them to the message in a user-friendly way.

    Examples:
        >>> raise InteropGenError("Unsupported type", path="Gfx.h", line=12)
        InteropGenError: Unsupported type in Gfx.h at line 12
    """

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        line: int | None = None,
    ):
        """Initialize the exception with a message and optional location.

        Args:
            message: The error message
            path: Optional file the error refers to
            line: Optional line number within that file
        """
        self.message = message
        self.file_path = str(path) if path is not None else None
        self.lineno = line

        location_info = ""
        if self.file_path:
            location_info = f" in {os.path.basename(self.file_path)}"
            if self.lineno:
                location_info += f" at line {self.lineno}"

        super().__init__(f"{message}{location_info}")


class ScanError(InteropGenError):
    """Raised when the source tree cannot be walked or read."""


class ParseError(InteropGenError):
    """Raised for malformed declarations or types that cannot be bound."""


class NamingCollisionError(InteropGenError):
    """Raised when two methods resolve to the same generated symbol."""


class ConfigurationError(InteropGenError):
    """Raised for invalid generator settings or conflicting inputs."""


class WriteError(InteropGenError):
    """Raised when output directories or artifacts cannot be written."""
