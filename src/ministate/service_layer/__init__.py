"""Service layer - the application context orchestrating import and export.

- Resolves paths inside the base resource directory
- Looks up adapters in the registry
- Applies import strategies to the in-memory records
"""

from .context import AppContext


__all__ = [
    "AppContext",
]
