"""JSON adapter: the whole record sequence is stored as one JSON array."""

from abc import abstractmethod
from collections.abc import Sequence
from typing import Any, BinaryIO, ClassVar, TypeVar

import orjson
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ministate.adapters.base import FormatAdapter, read_text, write_bytes
from ministate.exceptions import ParseError, ValidationError


T = TypeVar("T")


class DocumentAdapter(FormatAdapter[T]):
    """Shared logic for formats that hold every record in a single document.

    Records are dumped to JSON-compatible python data with a pydantic
    ``TypeAdapter`` for ``list[record_type]`` and validated back on read.
    Subclasses only encode and decode the document text.
    """

    def __init__(self, record_type: Any = dict):
        self.record_type = record_type
        self._list_adapter: TypeAdapter[list[Any]] = TypeAdapter(list[record_type])

    @abstractmethod
    def encode_document(self, data: list[Any]) -> bytes:
        """Encode JSON-compatible data as one document."""
        raise NotImplementedError

    @abstractmethod
    def decode_document(self, text: str) -> Any:
        """Decode one document into python data, raising ParseError when malformed."""
        raise NotImplementedError

    def read(self, stream: BinaryIO) -> list[T]:
        text = read_text(stream, format_name=self.get_format_name())
        if not text.strip():
            return []

        path = getattr(stream, "name", None)
        try:
            document = self.decode_document(text)
        except ParseError as err:
            if err.path is not None or path is None:
                raise
            raise ParseError(str(err), format_name=err.format_name, path=path) from err
        if document is None:
            return []
        if not isinstance(document, list):
            raise ParseError(
                f"Expected a {self.get_format_name()} list of records, got {type(document).__name__}",
                format_name=self.get_format_name(),
                path=path,
            )

        try:
            return self._list_adapter.validate_python(document)
        except PydanticValidationError as err:
            raise ParseError(
                f"Records do not match {self._type_label()}: {err}",
                format_name=self.get_format_name(),
                path=path,
            ) from err

    def write(self, records: Sequence[T], stream: BinaryIO) -> None:
        try:
            data = self._list_adapter.dump_python(list(records), mode="json")
            payload = self.encode_document(data)
        except (TypeError, ValueError) as err:
            raise ValidationError(f"Records cannot be encoded as {self.get_format_name()}: {err}") from err
        write_bytes(stream, payload)

    def _type_label(self) -> str:
        return getattr(self.record_type, "__name__", repr(self.record_type))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(record_type={self._type_label()})"


class JsonAdapter(DocumentAdapter[T]):
    """Pretty-printed JSON array, two-space indent, trailing newline."""

    format_name: ClassVar[str] = "json"

    def encode_document(self, data: list[Any]) -> bytes:
        return orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE)

    def decode_document(self, text: str) -> Any:
        try:
            return orjson.loads(text)
        except orjson.JSONDecodeError as err:
            raise ParseError(f"Malformed JSON: {err}", format_name=self.format_name) from err
