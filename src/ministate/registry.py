"""Adapter registry keyed by application name and format name."""

from collections.abc import Callable
import logging
from typing import Any

from ministate.adapters import FormatAdapter, JsonAdapter, ModelCsvAdapter, YamlAdapter
from ministate.exceptions import UnsupportedFormatError, ValidationError


logger = logging.getLogger(__name__)

AdapterFactory = Callable[[Any], FormatAdapter[Any]]


def _normalize_format(format_name: str) -> str:
    if not format_name or not format_name.strip():
        raise ValidationError("Format name cannot be empty")
    return format_name.strip().lower().lstrip(".")


class AdapterRegistry:
    """Index of format adapters per application.

    Each (application, format) pair maps to at most one adapter; registering
    the same pair again replaces the previous adapter. Format lookups are
    case-insensitive.

    Usage:
        registry = AdapterRegistry()
        registry.register("Counter", JsonAdapter(CounterState))

        adapter = registry.lookup("Counter", "JSON")
        formats = registry.supported_formats("Counter")

    The registry is populated during configuration and only read afterwards;
    it performs no locking.
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._adapters: dict[str, dict[str, FormatAdapter[Any]]] = {}

    def register(self, app_name: str, adapter: FormatAdapter[Any]) -> None:
        """Register an adapter under its own format name.

        Args:
            app_name: Owning application name
            adapter: Adapter instance; keyed by ``adapter.get_format_name()``
        """
        self.register_format(app_name, adapter.get_format_name(), adapter)

    def register_format(self, app_name: str, format_name: str, adapter: FormatAdapter[Any]) -> None:
        """Register an adapter under an explicit format name.

        Args:
            app_name: Owning application name
            format_name: Registry key, e.g. "csv" or "json"
            adapter: Adapter instance
        """
        key = _normalize_format(format_name)
        app_adapters = self._adapters.setdefault(app_name, {})
        if key in app_adapters:
            logger.debug("Replacing %s adapter for %s with %r", key, app_name, adapter)
        app_adapters[key] = adapter

    def lookup(self, app_name: str, format_name: str) -> FormatAdapter[Any] | None:
        """Get the adapter for an application and format.

        Returns:
            Adapter instance or None if not registered
        """
        app_adapters = self._adapters.get(app_name)
        if not app_adapters or not format_name:
            return None
        return app_adapters.get(format_name.strip().lower().lstrip("."))

    def require(self, app_name: str, format_name: str) -> FormatAdapter[Any]:
        """Get the adapter for an application and format or raise.

        Raises:
            UnsupportedFormatError: If no adapter is registered for the pair
        """
        adapter = self.lookup(app_name, format_name)
        if adapter is None:
            raise UnsupportedFormatError(app_name, format_name, list(self.supported_formats(app_name)))
        return adapter

    def supported_formats(self, app_name: str) -> set[str]:
        """Return the format names registered for an application."""
        return set(self._adapters.get(app_name, {}))

    def supports(self, app_name: str, format_name: str) -> bool:
        """Check if an application has an adapter for ``format_name``."""
        return self.lookup(app_name, format_name) is not None

    def adapters_for(self, app_name: str) -> list[tuple[str, FormatAdapter[Any]]]:
        """Return (format, adapter) pairs for an application in registration order."""
        return list(self._adapters.get(app_name, {}).items())

    def registered_apps(self) -> set[str]:
        """Return every application name with at least one adapter."""
        return set(self._adapters)

    def clear(self, app_name: str) -> None:
        """Remove every adapter registered for an application."""
        self._adapters.pop(app_name, None)

    def clear_all(self) -> None:
        """Remove every registered adapter."""
        self._adapters.clear()

    def __len__(self) -> int:
        """Return number of registered (application, format) pairs."""
        return sum(len(app_adapters) for app_adapters in self._adapters.values())

    def __contains__(self, app_name: object) -> bool:
        """Check if an application has any adapter registered."""
        return app_name in self._adapters


class AdapterFactoryTable:
    """Explicit table of format name -> adapter factory.

    Lets configuration select adapters by format name without importing
    classes by string. Each factory receives the application's record type.
    """

    def __init__(self, factories: dict[str, AdapterFactory] | None = None) -> None:
        self._factories: dict[str, AdapterFactory] = {}
        for format_name, factory in (factories or {}).items():
            self.add(format_name, factory)

    def add(self, format_name: str, factory: AdapterFactory) -> None:
        """Add or replace the factory for ``format_name``."""
        self._factories[_normalize_format(format_name)] = factory

    def create(self, format_name: str, record_type: Any = dict) -> FormatAdapter[Any]:
        """Build an adapter for ``format_name``.

        Raises:
            UnsupportedFormatError: If no factory is known for the format
        """
        factory = self._factories.get(_normalize_format(format_name))
        if factory is None:
            raise UnsupportedFormatError("<factory table>", format_name, self.formats())
        return factory(record_type)

    def formats(self) -> list[str]:
        """Return the known format names, sorted."""
        return sorted(self._factories)

    def __contains__(self, format_name: object) -> bool:
        return isinstance(format_name, str) and format_name.strip().lower().lstrip(".") in self._factories


def default_factory_table() -> AdapterFactoryTable:
    """Return a fresh table holding the built-in json, yaml and csv factories."""
    return AdapterFactoryTable(
        {
            "json": JsonAdapter,
            "yaml": YamlAdapter,
            "csv": ModelCsvAdapter,
        }
    )
