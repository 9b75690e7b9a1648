"""Import strategies - reconcile imported records into the current collection.

Every strategy mutates ``current`` in place and either completes fully or
applies its documented fallback to the whole imported sequence. Equality is
Python ``==``: structural for dataclasses, pydantic models, dicts and tuples,
identity for plain objects that do not define ``__eq__``.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Mapping, Sequence
import logging
from typing import Any, ClassVar
import warnings

from ministate.exceptions import IdentifierError, MergeFallbackWarning, ValidationError


logger = logging.getLogger(__name__)

IdentifierFunc = Callable[[Any], Hashable]


class ImportStrategy(ABC):
    """Reconcile imported records into the current collection."""

    name: ClassVar[str] = ""

    @abstractmethod
    def merge(self, current: list[Any], imported: Sequence[Any]) -> None:
        """Merge ``imported`` into ``current`` in place."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ReplaceStrategy(ImportStrategy):
    """Discard the current records and keep the imported ones."""

    name: ClassVar[str] = "replace"

    def merge(self, current: list[Any], imported: Sequence[Any]) -> None:
        # Copy first: ``imported`` may be ``current`` itself.
        incoming = list(imported)
        current.clear()
        current.extend(incoming)


class AppendStrategy(ImportStrategy):
    """Add every imported record after the current ones, duplicates included."""

    name: ClassVar[str] = "append"

    def merge(self, current: list[Any], imported: Sequence[Any]) -> None:
        current.extend(list(imported))


class SkipExistingStrategy(ImportStrategy):
    """Add imported records that are not already present."""

    name: ClassVar[str] = "skip_existing"

    def merge(self, current: list[Any], imported: Sequence[Any]) -> None:
        for item in list(imported):
            if item not in current:
                current.append(item)


def default_identifier(record: Any) -> Hashable:
    """Extract a record identifier.

    Tries, in order: the ``"id"`` key of a mapping, an ``id`` attribute and a
    ``get_id()`` method.

    Raises:
        IdentifierError: If none of them is available
    """
    if isinstance(record, Mapping):
        if "id" in record:
            return record["id"]
        raise IdentifierError(f"Mapping record has no 'id' key: {record!r}")

    if hasattr(record, "id"):
        return record.id

    getter = getattr(record, "get_id", None)
    if callable(getter):
        return getter()

    raise IdentifierError(f"{type(record).__name__} record has no 'id' attribute or get_id() method")


class MergeByIdStrategy(ImportStrategy):
    """Replace current records that share an identifier, append the rest.

    Imported records replace the first current record with an equal identifier
    in place, keeping its position. Records with a new identifier are appended
    in import order.

    Identifiers are extracted for every record before anything changes. If
    extraction fails for any record, the whole imported sequence is appended
    instead and a ``MergeFallbackWarning`` is emitted.
    """

    name: ClassVar[str] = "merge_by_id"

    def __init__(self, key: IdentifierFunc | None = None):
        self.key: IdentifierFunc = key or default_identifier

    def merge(self, current: list[Any], imported: Sequence[Any]) -> None:
        incoming = list(imported)
        if not incoming:
            return

        try:
            current_ids = [self.key(item) for item in current]
            incoming_ids = [self.key(item) for item in incoming]
        except Exception as err:
            message = f"MergeById failed: {err}. Appending instead."
            logger.warning(message)
            warnings.warn(message, MergeFallbackWarning, stacklevel=2)
            current.extend(incoming)
            return

        for item, item_id in zip(incoming, incoming_ids, strict=True):
            for index, existing_id in enumerate(current_ids):
                if existing_id == item_id:
                    current[index] = item
                    break
            else:
                current.append(item)
                current_ids.append(item_id)

    def __repr__(self) -> str:
        key_name = getattr(self.key, "__name__", repr(self.key))
        return f"{type(self).__name__}(key={key_name})"


class ImportStrategies:
    """Ready-made strategy instances.

    Usage:
        context.import_data("json", strategy=ImportStrategies.APPEND)
        context.import_data("json", strategy=ImportStrategies.merge_by_id(lambda r: r.sku))
    """

    REPLACE: ClassVar[ImportStrategy] = ReplaceStrategy()
    APPEND: ClassVar[ImportStrategy] = AppendStrategy()
    SKIP_EXISTING: ClassVar[ImportStrategy] = SkipExistingStrategy()

    @staticmethod
    def merge_by_id(key: IdentifierFunc | None = None) -> MergeByIdStrategy:
        return MergeByIdStrategy(key)


_STRATEGY_TYPES: dict[str, Callable[[], ImportStrategy]] = {
    ReplaceStrategy.name: ReplaceStrategy,
    AppendStrategy.name: AppendStrategy,
    SkipExistingStrategy.name: SkipExistingStrategy,
    MergeByIdStrategy.name: MergeByIdStrategy,
}


def get_strategy(name: str) -> ImportStrategy:
    """Build a strategy from its configuration name.

    Accepts ``replace``, ``append``, ``skip_existing`` and ``merge_by_id``
    (case-insensitive, dashes allowed). ``merge_by_id`` uses the default
    identifier function.

    Raises:
        ValidationError: If the name is unknown
    """
    key = name.strip().lower().replace("-", "_")
    factory = _STRATEGY_TYPES.get(key)
    if factory is None:
        raise ValidationError(f"Unknown import strategy '{name}' (available: {', '.join(sorted(_STRATEGY_TYPES))})")
    return factory()
