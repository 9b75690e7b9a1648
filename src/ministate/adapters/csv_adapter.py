"""Delimited-text adapters.

``CsvAdapter`` handles the line format: optional header row, configurable
single-character delimiter and minimal quote-aware field splitting. Subclasses
only convert between one record and one row of fields.

``ModelCsvAdapter`` derives the row layout from a flat pydantic model or
dataclass, so most applications do not need a custom subclass.
"""

from abc import abstractmethod
from collections.abc import Sequence
import dataclasses
from types import NoneType
from typing import Any, BinaryIO, ClassVar, TypeVar, get_args, get_type_hints

from pydantic import TypeAdapter

from ministate.adapters.base import FormatAdapter, read_text, write_bytes
from ministate.exceptions import ParseError, ValidationError


T = TypeVar("T")

QUOTE_CHAR = '"'


class CsvAdapter(FormatAdapter[T]):
    """Base adapter for delimited text, one record per line."""

    format_name: ClassVar[str] = "csv"

    header: Sequence[str] = ()
    delimiter: str = ","

    def __init__(self, *, header: Sequence[str] | None = None, delimiter: str | None = None):
        if header is not None:
            self.header = tuple(header)
        if delimiter is not None:
            self.delimiter = delimiter
        if len(self.delimiter) != 1 or self.delimiter == QUOTE_CHAR:
            raise ValidationError(f"Delimiter must be a single non-quote character, got {self.delimiter!r}")

    @abstractmethod
    def to_row(self, record: T) -> Sequence[str]:
        """Convert one record to its row fields."""
        raise NotImplementedError

    @abstractmethod
    def from_row(self, fields: list[str]) -> T:
        """Rebuild one record from its row fields."""
        raise NotImplementedError

    def record_from_fields(self, fields: list[str], quoted: set[int]) -> T:
        """Rebuild one record, knowing which field positions were quoted.

        The default ignores quoting and calls ``from_row``.
        """
        return self.from_row(fields)

    def read(self, stream: BinaryIO) -> list[T]:
        text = read_text(stream, format_name=self.get_format_name())
        records: list[T] = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            if line_number == 1 and self.header:
                continue
            if not line.strip():
                continue
            tokens = self.tokenize(line)
            fields = [value for value, _ in tokens]
            quoted = {position for position, (_, was_quoted) in enumerate(tokens) if was_quoted}
            try:
                records.append(self.record_from_fields(fields, quoted))
            except (ValueError, TypeError, KeyError, IndexError) as err:
                raise ParseError(
                    f"Invalid row at line {line_number}: {err}",
                    format_name=self.get_format_name(),
                    path=getattr(stream, "name", None),
                ) from err
        return records

    def write(self, records: Sequence[T], stream: BinaryIO) -> None:
        lines: list[str] = []
        if self.header:
            lines.append(self.delimiter.join(self.header))
        lines.extend(self.delimiter.join(self.to_row(record)) for record in records)
        payload = "".join(f"{line}\n" for line in lines)
        write_bytes(stream, payload.encode("utf-8"))

    def split_line(self, line: str) -> list[str]:
        """Split one line on the delimiter, ignoring delimiters inside quotes.

        A quote character toggles the inside-quotes state and is dropped.
        Two consecutive quotes inside a quoted field produce one literal quote.
        """
        return [value for value, _ in self.tokenize(line)]

    def tokenize(self, line: str) -> list[tuple[str, bool]]:
        """Like ``split_line`` but pairs each field with whether it contained quotes."""
        fields: list[tuple[str, bool]] = []
        current: list[str] = []
        in_quotes = False
        was_quoted = False
        index = 0
        while index < len(line):
            char = line[index]
            if char == QUOTE_CHAR:
                if in_quotes and line[index + 1 : index + 2] == QUOTE_CHAR:
                    current.append(QUOTE_CHAR)
                    index += 1
                else:
                    in_quotes = not in_quotes
                    was_quoted = True
            elif char == self.delimiter and not in_quotes:
                fields.append(("".join(current), was_quoted))
                current = []
                was_quoted = False
            else:
                current.append(char)
            index += 1
        fields.append(("".join(current), was_quoted))
        return fields

    def quote_field(self, value: str) -> str:
        """Quote ``value`` when it is empty or contains the delimiter or a quote character.

        An unquoted empty field is reserved for missing values.
        """
        if "\n" in value or "\r" in value:
            raise ValidationError(f"Line breaks cannot be stored in {self.get_format_name()} fields: {value!r}")
        if not value or self.delimiter in value or QUOTE_CHAR in value:
            escaped = value.replace(QUOTE_CHAR, QUOTE_CHAR * 2)
            return f"{QUOTE_CHAR}{escaped}{QUOTE_CHAR}"
        return value


def _accepts_none(annotation: Any) -> bool:
    if annotation in (Any, None, NoneType):
        return True
    return NoneType in get_args(annotation)


def _field_names(record_type: type) -> tuple[list[str], set[str], set[str]]:
    """Return (ordered field names, required field names, nullable field names)."""
    model_fields = getattr(record_type, "model_fields", None)
    if isinstance(model_fields, dict):
        names = list(model_fields)
        required = {name for name, info in model_fields.items() if info.is_required()}
        nullable = {name for name, info in model_fields.items() if _accepts_none(info.annotation)}
        return names, required, nullable
    if dataclasses.is_dataclass(record_type):
        hints = get_type_hints(record_type)
        names = []
        required = set()
        nullable = set()
        for field in dataclasses.fields(record_type):
            names.append(field.name)
            if field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING:
                required.add(field.name)
            if _accepts_none(hints.get(field.name, Any)):
                nullable.add(field.name)
        return names, required, nullable
    raise ValidationError(f"{record_type!r} is not a pydantic model or dataclass")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ModelCsvAdapter(CsvAdapter[T]):
    """CSV adapter for flat pydantic models and dataclasses.

    The header row lists the record's field names in declaration order.
    ``None`` is written as an empty field and an empty string as ``""``.
    On read an unquoted empty field becomes ``None`` for columns that accept
    it, is left out for other optional columns so the field default applies,
    and stays ``""`` for required columns.
    """

    def __init__(
        self,
        record_type: type[T],
        *,
        delimiter: str | None = None,
        include_header: bool = True,
    ):
        self.record_type = record_type
        self.columns, self._required, self._nullable = _field_names(record_type)
        self._type_adapter: TypeAdapter[T] = TypeAdapter(record_type)
        super().__init__(header=self.columns if include_header else (), delimiter=delimiter)

    def to_row(self, record: T) -> list[str]:
        data = self._type_adapter.dump_python(record, mode="json")
        row = []
        for column in self.columns:
            value = data.get(column)
            row.append("" if value is None else self.quote_field(_stringify(value)))
        return row

    def from_row(self, fields: list[str]) -> T:
        return self.record_from_fields(fields, set())

    def record_from_fields(self, fields: list[str], quoted: set[int]) -> T:
        if len(fields) != len(self.columns):
            raise ValueError(f"expected {len(self.columns)} fields, got {len(fields)}")
        data: dict[str, Any] = {}
        for position, (column, value) in enumerate(zip(self.columns, fields, strict=True)):
            if value or position in quoted:
                data[column] = value
            elif column in self._nullable:
                data[column] = None
            elif column in self._required:
                data[column] = ""
        return self._type_adapter.validate_python(data)
