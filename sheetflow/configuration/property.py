"""Per-column property configuration records."""

# Module responsibilities:
# - Describe how one entity member (real or synthetic) maps to a sheet column.
# - Classify the member value type into a closed ValueKind via a static table.
# - Offer fluent setters so column settings can be chained after resolution.

from __future__ import annotations

import datetime as dt
import enum
import types
import typing
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional

from sheetflow.core.errors import ConfigError

from .members import PropertyKey

OutputFormatter = Callable[[Any, Any], Any]
InputFormatter = Callable[[Any, Any], Any]


class ValueKind(str, enum.Enum):
    """Closed classification of column value types."""

    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    OTHER = "other"


# Order matters: bool before int, datetime before date (subclass relations).
_KIND_TABLE: tuple[tuple[type, ValueKind], ...] = (
    (str, ValueKind.TEXT),
    (bool, ValueKind.BOOLEAN),
    (int, ValueKind.INTEGER),
    (float, ValueKind.DECIMAL),
    (Decimal, ValueKind.DECIMAL),
    (dt.datetime, ValueKind.DATETIME),
    (dt.date, ValueKind.DATE),
)


def _unwrap_optional(value_type: Any) -> Any:
    origin = typing.get_origin(value_type)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(value_type) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return value_type


def value_kind_of(value_type: Any) -> ValueKind:
    """Classify ``value_type`` (``Optional[X]`` is treated as ``X``)."""

    candidate = _unwrap_optional(value_type)
    if typing.get_origin(candidate) is not None or not isinstance(candidate, type):
        return ValueKind.OTHER
    for base, kind in _KIND_TABLE:
        if issubclass(candidate, base):
            return kind
    return ValueKind.OTHER


@dataclass(eq=False)
class PropertyConfiguration:
    """Column settings bound to one property key."""

    key: PropertyKey
    kind: ValueKind
    column_index: Optional[int] = None
    column_title: Optional[str] = None
    column_width: Optional[int] = None
    column_format: Optional[str] = None
    is_ignored: bool = False
    output_formatter: Optional[OutputFormatter] = field(default=None, repr=False)
    input_formatter: Optional[InputFormatter] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.column_title is None:
            self.column_title = self.key.name

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def value_type(self) -> Any:
        return self.key.value_type

    @property
    def is_synthetic(self) -> bool:
        return self.key.is_synthetic

    def has_column_index(self, index: int) -> "PropertyConfiguration":
        if index < 0:
            raise ConfigError(f"column index must be non-negative, got {index} for [{self.name}]")
        self.column_index = index
        return self

    def has_column_title(self, title: str) -> "PropertyConfiguration":
        self.column_title = title
        return self

    def has_column_width(self, width: int) -> "PropertyConfiguration":
        if width <= 0:
            raise ConfigError(f"column width must be positive, got {width} for [{self.name}]")
        self.column_width = width
        return self

    def has_column_format(self, column_format: str) -> "PropertyConfiguration":
        self.column_format = column_format
        return self

    def ignored(self, ignored: bool = True) -> "PropertyConfiguration":
        self.is_ignored = ignored
        return self

    def has_output_formatter(self, formatter: Optional[OutputFormatter]) -> "PropertyConfiguration":
        """Set ``formatter(entity, value) -> cell value`` applied on export."""

        self.output_formatter = formatter
        return self

    def has_input_formatter(self, formatter: Optional[InputFormatter]) -> "PropertyConfiguration":
        """Set ``formatter(entity, cell value) -> value`` applied on import."""

        self.input_formatter = formatter
        return self

    def apply(self, settings: Mapping[str, Any]) -> "PropertyConfiguration":
        """Apply a mapping of column settings (``title``/``index``/``width``/``format``/``ignored``)."""

        if settings.get("title") is not None:
            self.has_column_title(str(settings["title"]))
        if settings.get("index") is not None:
            self.has_column_index(int(settings["index"]))
        if settings.get("width") is not None:
            self.has_column_width(int(settings["width"]))
        if settings.get("format") is not None:
            self.has_column_format(str(settings["format"]))
        if settings.get("ignored") is not None:
            self.ignored(bool(settings["ignored"]))
        return self


def create_property_configuration(key: PropertyKey) -> PropertyConfiguration:
    """Build an empty configuration for ``key`` tagged with its value kind."""

    return PropertyConfiguration(key=key, kind=value_kind_of(key.value_type))


COLUMN_METADATA_KEY = "sheetflow"


def column_settings_from_metadata(metadata: Mapping[str, Any]) -> Dict[str, Any]:
    """Extract column settings declared via ``dataclasses.field(metadata={"sheetflow": {...}})``."""

    settings = metadata.get(COLUMN_METADATA_KEY)
    if settings is None:
        return {}
    if not isinstance(settings, Mapping):
        raise ConfigError(f"field metadata '{COLUMN_METADATA_KEY}' must be a mapping, got {type(settings).__name__}")
    return dict(settings)


__all__ = [
    "COLUMN_METADATA_KEY",
    "PropertyConfiguration",
    "ValueKind",
    "column_settings_from_metadata",
    "create_property_configuration",
    "value_kind_of",
]
