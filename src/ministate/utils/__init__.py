"""Filesystem helpers shared by the persistence engine."""

from .path_resolver import DEFAULT_RESOURCES_PATH, resolve_path


__all__ = [
    "DEFAULT_RESOURCES_PATH",
    "resolve_path",
]
