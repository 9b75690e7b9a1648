"""Adapters layer - format adapters for record sequences.

Each adapter converts a list of records to and from one file format. The
engine only talks to the ``FormatAdapter`` contract, so applications can
register their own formats next to the built-in ones.
"""

from .base import FormatAdapter
from .csv_adapter import CsvAdapter, ModelCsvAdapter
from .json_adapter import DocumentAdapter, JsonAdapter
from .yaml_adapter import YamlAdapter


__all__ = [
    "CsvAdapter",
    "DocumentAdapter",
    "FormatAdapter",
    "JsonAdapter",
    "ModelCsvAdapter",
    "YamlAdapter",
]
