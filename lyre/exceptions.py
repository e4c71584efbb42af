"""Exception types for Lyre.

Exception hierarchy:
    Exception (built-in)
    ├── BuildError - fatal build failure tied to a source file
    ├── MediaError - a media tool step failed (never fatal to a build)
    └── ValueError (built-in)
        └── FrontmatterError - missing or malformed post front matter
"""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class MediaError(Exception):
    """A media processing step failed.

    Attributes:
        path: File the failing step was working on.
        message: Human-readable error message.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class FrontmatterError(ValueError):
    """Raised when a post has no front matter or it cannot be parsed."""
