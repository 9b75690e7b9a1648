"""Resolve user-supplied file paths against the base resource directory.

Resolution rules:
- Relative paths are joined onto the base directory and normalized
- Absolute paths bypass the base directory (after normalization)
- Relative paths that climb out of the base directory are rejected

Examples:
    >>> resolve_path("data.json", "resources")
    PosixPath('/current/dir/resources/data.json')
    >>> resolve_path("/tmp/data.json", "resources")
    PosixPath('/tmp/data.json')
    >>> resolve_path("../../etc/passwd", "resources")
    Traceback (most recent call last):
    ...
    ministate.exceptions.SecurityError: Path traversal detected: ...

No I/O is performed: symlinks are not followed and the target does not need
to exist.
"""

from __future__ import annotations

import os
from pathlib import Path

from ministate.exceptions import SecurityError, ValidationError


DEFAULT_RESOURCES_PATH = "resources"


def _normalize(path: Path) -> Path:
    # Lexical normalization only; Path.resolve() would touch the filesystem.
    return Path(os.path.normpath(path))


def resolve_path(file_path: str | Path | None, base_dir: str | Path | None = None) -> Path:
    """Resolve ``file_path`` inside ``base_dir``.

    Args:
        file_path: Relative or absolute path supplied by the caller
        base_dir: Base resource directory; ``DEFAULT_RESOURCES_PATH`` when empty

    Returns:
        Normalized absolute path

    Raises:
        ValidationError: If ``file_path`` is None or empty
        SecurityError: If a relative ``file_path`` escapes ``base_dir``
    """
    if file_path is None or not str(file_path).strip():
        raise ValidationError("File path cannot be null or empty")

    if base_dir is None or not str(base_dir).strip():
        base_dir = DEFAULT_RESOURCES_PATH

    path = Path(file_path)
    if path.is_absolute():
        return _normalize(path)

    base_path = Path(base_dir).expanduser()
    normalized_base = _normalize(base_path.absolute())
    resolved = _normalize(normalized_base / path)

    if resolved != normalized_base and normalized_base not in resolved.parents:
        raise SecurityError(str(file_path), base_dir)

    return resolved

