"""ministate - pluggable record persistence for single-user applications.

An ``AppContext`` holds an application's records in memory, moves them to and
from files through format adapters registered in an ``AdapterRegistry`` and
reconciles imported records with an ``ImportStrategy``.
"""

from ministate.adapters import CsvAdapter, FormatAdapter, JsonAdapter, ModelCsvAdapter, YamlAdapter
from ministate.config import Settings
from ministate.domain import (
    AppendStrategy,
    ImportStrategies,
    ImportStrategy,
    MergeByIdStrategy,
    ReplaceStrategy,
    SkipExistingStrategy,
    get_strategy,
)
from ministate.exceptions import (
    DataIOError,
    IdentifierError,
    MergeFallbackWarning,
    MiniStateError,
    ParseError,
    SecurityError,
    UnsupportedFormatError,
    ValidationError,
)
from ministate.registry import AdapterFactoryTable, AdapterRegistry, default_factory_table
from ministate.runtime import AppRunner, MiniApp
from ministate.service_layer import AppContext
from ministate.utils import DEFAULT_RESOURCES_PATH, resolve_path


__version__ = "0.1.0"

__all__ = [
    "DEFAULT_RESOURCES_PATH",
    "AdapterFactoryTable",
    "AdapterRegistry",
    "AppContext",
    "AppRunner",
    "AppendStrategy",
    "CsvAdapter",
    "DataIOError",
    "FormatAdapter",
    "IdentifierError",
    "ImportStrategies",
    "ImportStrategy",
    "JsonAdapter",
    "MergeByIdStrategy",
    "MergeFallbackWarning",
    "MiniApp",
    "MiniStateError",
    "ModelCsvAdapter",
    "ParseError",
    "ReplaceStrategy",
    "SecurityError",
    "Settings",
    "SkipExistingStrategy",
    "UnsupportedFormatError",
    "ValidationError",
    "YamlAdapter",
    "default_factory_table",
    "get_strategy",
    "resolve_path",
]
