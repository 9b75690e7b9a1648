"""Domain layer - pure reconciliation rules with no I/O.

This layer contains the import strategies that decide how freshly imported
records are combined with the records already held by a context.
"""

from ministate.domain.strategies import (
    AppendStrategy,
    IdentifierFunc,
    ImportStrategies,
    ImportStrategy,
    MergeByIdStrategy,
    ReplaceStrategy,
    SkipExistingStrategy,
    default_identifier,
    get_strategy,
)


__all__ = [
    "AppendStrategy",
    "IdentifierFunc",
    "ImportStrategies",
    "ImportStrategy",
    "MergeByIdStrategy",
    "ReplaceStrategy",
    "SkipExistingStrategy",
    "default_identifier",
    "get_strategy",
]
