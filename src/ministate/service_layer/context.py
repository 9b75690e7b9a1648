"""Application context - the persistence engine facade.

The context owns the in-memory record collection and orchestrates:
1. Path resolution inside the base resource directory
2. Adapter lookup in the registry
3. Reading/writing through the adapter
4. Merging imported records with the configured strategy

Operations are synchronous and unsynchronized: populate the registry before
the first import/export and do not mutate one context from several threads
without external locking.
"""

from collections.abc import Iterable
import copy
import logging
from pathlib import Path
from typing import Any

from ministate.domain.strategies import ImportStrategy, ReplaceStrategy
from ministate.exceptions import DataIOError, ValidationError
from ministate.observability import bound, create_span
from ministate.registry import AdapterRegistry
from ministate.utils.path_resolver import DEFAULT_RESOURCES_PATH, resolve_path


logger = logging.getLogger(__name__)


def _discard(staging: Path) -> None:
    if not staging.exists():
        return
    try:
        staging.unlink()
    except OSError:
        logger.warning("Failed to remove staging file %s", staging)


class AppContext:
    """Hold an application's records and move them to and from files.

    Usage:
        registry = AdapterRegistry()
        registry.register("Counter", JsonAdapter(CounterState))
        context = AppContext("Counter", registry, resources_path="data")

        context.import_data("json")  # reads data/Counter.json
        context.set_data([CounterState(value=3)])
        context.export_data("json", path="backup/counter.json")
    """

    def __init__(
        self,
        app_name: str,
        registry: AdapterRegistry | None = None,
        *,
        resources_path: str | Path | None = None,
        default_strategy: ImportStrategy | None = None,
    ):
        if not app_name or not app_name.strip():
            raise ValidationError("Application name cannot be empty")
        self.app_name = app_name
        self.registry = registry if registry is not None else AdapterRegistry()
        self.resources_path = str(resources_path) if resources_path else DEFAULT_RESOURCES_PATH
        self.default_strategy = default_strategy or ReplaceStrategy()
        self._data: list[Any] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def get_data(self) -> list[Any]:
        """Return an independent deep copy of the current records."""
        return copy.deepcopy(self._data)

    def set_data(self, records: Iterable[Any]) -> None:
        """Replace the current records with a deep copy of ``records``."""
        if records is None:
            raise ValidationError("Records cannot be None; use clear_data() to empty the context")
        self._data = copy.deepcopy(list(records))

    def clear_data(self) -> None:
        """Remove every record."""
        self._data = []

    def __len__(self) -> int:
        return len(self._data)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def default_path(self, format_name: str) -> str:
        """Return the conventional file name ``{app_name}.{format}``."""
        return f"{self.app_name}.{format_name.strip().lower()}"

    def resolve(self, path: str | Path | None, format_name: str) -> Path:
        """Resolve ``path`` (or the default file name) inside the resources path."""
        return resolve_path(path if path else self.default_path(format_name), self.resources_path)

    def import_data(
        self,
        format_name: str,
        *,
        path: str | Path | None = None,
        strategy: ImportStrategy | None = None,
    ) -> int:
        """Read records from a file and merge them into the current records.

        Args:
            format_name: Registered format, e.g. "json"
            path: File to read; defaults to ``{app_name}.{format}``
            strategy: Merge strategy; defaults to the context's default strategy

        Returns:
            Number of records read from the file

        Raises:
            ValidationError: If the path is empty
            SecurityError: If a relative path escapes the resources path
            UnsupportedFormatError: If no adapter is registered for the format
            DataIOError: If the file cannot be opened or read
            ParseError: If the file content is malformed
        """
        adapter = self.registry.require(self.app_name, format_name)
        target = self.resolve(path, format_name)
        merge_strategy = strategy or self.default_strategy

        with bound(operation="import", format=adapter.get_format_name()), create_span(
            "ministate.import",
            attributes={
                "ministate.app": self.app_name,
                "ministate.format": adapter.get_format_name(),
                "ministate.path": str(target),
                "ministate.strategy": type(merge_strategy).__name__,
            },
        ) as span:
            try:
                with target.open("rb") as stream:
                    imported = adapter.read(stream)
            except FileNotFoundError as err:
                raise DataIOError(f"File not found: {target}", target) from err
            except DataIOError:
                raise
            except OSError as err:
                raise DataIOError(f"Failed to read {target}: {err}", target) from err

            # Merge into a working copy so a failing strategy leaves the records untouched.
            merged = list(self._data)
            merge_strategy.merge(merged, imported)
            self._data = merged

            span.set_attribute("ministate.records_read", len(imported))
            span.set_attribute("ministate.records_total", len(merged))

        logger.info(
            "Imported %d %s record(s) for %s from %s using %s",
            len(imported),
            adapter.get_format_name(),
            self.app_name,
            target,
            type(merge_strategy).__name__,
        )
        return len(imported)

    def export_data(self, format_name: str, *, path: str | Path | None = None) -> Path:
        """Write the current records to a file.

        Args:
            format_name: Registered format, e.g. "json"
            path: File to write; defaults to ``{app_name}.{format}``

        Returns:
            Resolved path of the written file

        Raises:
            ValidationError: If the path is empty or a record cannot be encoded
            SecurityError: If a relative path escapes the resources path
            UnsupportedFormatError: If no adapter is registered for the format
            DataIOError: If the file cannot be created or written

        The file is replaced only once the adapter has written every record;
        on failure the previous file is left untouched.
        """
        adapter = self.registry.require(self.app_name, format_name)
        target = self.resolve(path, format_name)
        snapshot = list(self._data)

        with bound(operation="export", format=adapter.get_format_name()), create_span(
            "ministate.export",
            attributes={
                "ministate.app": self.app_name,
                "ministate.format": adapter.get_format_name(),
                "ministate.path": str(target),
                "ministate.records_total": len(snapshot),
            },
        ):
            # The previous file stays intact until the staged copy replaces it.
            staging = target.with_name(target.name + ".tmp")
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                with staging.open("wb") as stream:
                    adapter.write(snapshot, stream)
                staging.replace(target)
            except DataIOError:
                raise
            except OSError as err:
                raise DataIOError(f"Failed to write {target}: {err}", target) from err
            finally:
                _discard(staging)

        logger.info(
            "Exported %d %s record(s) for %s to %s",
            len(snapshot),
            adapter.get_format_name(),
            self.app_name,
            target,
        )
        return target

    # ------------------------------------------------------------------
    # Formats
    # ------------------------------------------------------------------

    def supports_format(self, format_name: str) -> bool:
        """Check if an adapter is registered for ``format_name``."""
        return self.registry.supports(self.app_name, format_name)

    def get_supported_formats(self) -> list[str]:
        """Return the registered format names, sorted."""
        return sorted(self.registry.supported_formats(self.app_name))

    def detect_format(self, path: str | Path, *, sniff: bool = False) -> str | None:
        """Detect a file's format from its extension.

        Args:
            path: File path; only its suffix is inspected unless ``sniff`` is set
            sniff: When the extension is unknown, resolve the path and return the
                first registered format whose adapter validates the content

        Returns:
            Registered format name, or None if no format matches
        """
        suffix = Path(path).suffix.lower().lstrip(".")
        adapters = self.registry.adapters_for(self.app_name)
        if suffix:
            for format_name, adapter in adapters:
                if suffix == format_name or suffix in adapter.get_file_extensions():
                    return format_name

        if not sniff:
            return None

        target = resolve_path(path, self.resources_path)
        if not target.is_file():
            return None
        for format_name, adapter in adapters:
            with target.open("rb") as stream:
                if adapter.validate(stream):
                    logger.debug("Detected %s content in %s", format_name, target)
                    return format_name
        return None

    def validate_file(self, format_name: str, *, path: str | Path | None = None) -> bool:
        """Check whether a file can be read with the adapter for ``format_name``.

        Returns False for missing or unreadable files instead of raising.

        Raises:
            UnsupportedFormatError: If no adapter is registered for the format
        """
        adapter = self.registry.require(self.app_name, format_name)
        target = self.resolve(path, format_name)
        try:
            with target.open("rb") as stream:
                return adapter.validate(stream)
        except OSError as err:
            logger.debug("Cannot validate %s: %s", target, err)
            return False

    def __repr__(self) -> str:
        return f"AppContext(app_name={self.app_name!r}, resources_path={self.resources_path!r}, records={len(self)})"
