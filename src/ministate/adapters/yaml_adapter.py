"""YAML adapter: the whole record sequence is stored as one YAML list."""

from typing import Any, ClassVar, TypeVar

import yaml

from ministate.adapters.json_adapter import DocumentAdapter
from ministate.exceptions import ParseError


T = TypeVar("T")


class YamlAdapter(DocumentAdapter[T]):
    """Block-style YAML list; keys keep their declaration order."""

    format_name: ClassVar[str] = "yaml"
    file_extensions: ClassVar[tuple[str, ...]] = ("yaml", "yml")

    def encode_document(self, data: list[Any]) -> bytes:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
        return text.encode("utf-8")

    def decode_document(self, text: str) -> Any:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as err:
            raise ParseError(f"Malformed YAML: {err}", format_name=self.format_name) from err
