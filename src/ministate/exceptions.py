"""Error taxonomy for the persistence engine.

Every error raised by ministate derives from ``MiniStateError`` and also from
the closest builtin exception, so callers can catch either:

- ValidationError: malformed call arguments (empty path, unknown strategy)
- SecurityError: a relative path escaped the base resource directory
- UnsupportedFormatError: no adapter registered for the requested format
- DataIOError: stream open/read/write failure, including file-not-found
- ParseError: content is malformed for the given format
- IdentifierError: a record has no usable identifier (recovered by MergeById)
"""

from __future__ import annotations

from pathlib import Path


class MiniStateError(Exception):
    """Base class for all ministate errors."""


class ValidationError(MiniStateError, ValueError):
    """Raised when call arguments are malformed."""


class SecurityError(MiniStateError):
    """Raised when a relative path resolves outside its base directory."""

    def __init__(self, file_path: str, base_dir: str | Path) -> None:
        self.file_path = file_path
        self.base_dir = str(base_dir)
        super().__init__(f"Path traversal detected: '{file_path}' resolves outside base path: '{self.base_dir}'")


class UnsupportedFormatError(MiniStateError, LookupError):
    """Raised when no adapter is registered for an (app, format) pair."""

    def __init__(self, app_name: str, format_name: str, supported: list[str] | None = None) -> None:
        self.app_name = app_name
        self.format_name = format_name
        self.supported = sorted(supported or [])
        available = ", ".join(self.supported) if self.supported else "none"
        super().__init__(f"Format '{format_name}' is not supported by '{app_name}' (available: {available})")


class DataIOError(MiniStateError, OSError):
    """Raised when a stream cannot be opened, read or written."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if isinstance(path, (str, Path)) else None
        super().__init__(message)


class ParseError(MiniStateError, ValueError):
    """Raised when content cannot be decoded by a format adapter."""

    def __init__(self, message: str, *, format_name: str = "", path: str | Path | None = None) -> None:
        self.format_name = format_name
        self.path = Path(path) if isinstance(path, (str, Path)) else None
        super().__init__(message)


class IdentifierError(MiniStateError, LookupError):
    """Raised when an identifier cannot be extracted from a record."""


class MergeFallbackWarning(UserWarning):
    """Emitted when MergeById falls back to appending every imported record."""
