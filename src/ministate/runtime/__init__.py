"""Lifecycle wrapper: application base class and runner."""

from ministate.runtime.app import MiniApp
from ministate.runtime.runner import EXIT_FAILURE, EXIT_OK, AppRunner


__all__ = [
    "EXIT_FAILURE",
    "EXIT_OK",
    "AppRunner",
    "MiniApp",
]
