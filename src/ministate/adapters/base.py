"""Format adapter contract."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
import logging
from typing import Any, BinaryIO, ClassVar, Generic, TypeVar

from ministate.exceptions import DataIOError, ParseError


logger = logging.getLogger(__name__)

T = TypeVar("T")


class FormatAdapter(ABC, Generic[T]):
    """Convert between a sequence of records and one file format.

    Subclasses set ``format_name`` (lower-case, also the default file
    extension) and implement ``read`` and ``write``. Implementations must:

    - return ``[]`` from ``read`` for an empty stream, never ``None``
    - preserve record order in both directions
    - produce byte-identical output when writing the same records twice
    - raise ``DataIOError`` for stream failures and ``ParseError`` for
      malformed content
    """

    format_name: ClassVar[str] = ""
    file_extensions: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def read(self, stream: BinaryIO) -> list[T]:
        """Read every record from ``stream``."""
        raise NotImplementedError

    @abstractmethod
    def write(self, records: Sequence[T], stream: BinaryIO) -> None:
        """Write ``records`` to ``stream``."""
        raise NotImplementedError

    def get_format_name(self) -> str:
        """Return the registry key for this adapter."""
        if not self.format_name:
            raise NotImplementedError(f"{type(self).__name__} must define format_name")
        return self.format_name.lower()

    def get_file_extensions(self) -> tuple[str, ...]:
        """Return the file extensions (without dot) handled by this adapter."""
        extensions = self.file_extensions or (self.get_format_name(),)
        return tuple(ext.lower().lstrip(".") for ext in extensions)

    def validate(self, stream: BinaryIO) -> bool:
        """Return True when ``stream`` can be read by this adapter. Never raises."""
        try:
            self.read(stream)
        except Exception as err:
            logger.debug("%s validation failed: %s", type(self).__name__, err)
            return False
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(format={self.format_name!r})"


def read_text(stream: BinaryIO, *, format_name: str = "", encoding: str = "utf-8") -> str:
    """Read and decode the whole stream.

    Stream failures become DataIOError, undecodable bytes become ParseError.
    """
    try:
        raw: Any = stream.read()
    except OSError as err:
        raise DataIOError(f"Failed to read stream: {err}", getattr(stream, "name", None)) from err
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as err:
        raise ParseError(
            f"Stream is not valid {encoding}: {err}", format_name=format_name, path=getattr(stream, "name", None)
        ) from err


def write_bytes(stream: BinaryIO, payload: bytes) -> None:
    """Write ``payload`` to the stream, mapping stream failures to DataIOError."""
    try:
        stream.write(payload)
        stream.flush()
    except OSError as err:
        raise DataIOError(f"Failed to write stream: {err}", getattr(stream, "name", None)) from err
