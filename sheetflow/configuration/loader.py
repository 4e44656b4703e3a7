"""YAML configuration profiles.

Profiles keep the sheet mapping for an entity class outside code. A profile
holds the same settings as the fluent API::

    document:
      author: Finance
      title: Monthly orders
    sheets:
      - {index: 0, name: Orders, start_row: 1, auto_width: true}
    freeze:
      - {col_split: 0, row_split: 1}
    filter: {first_column: 0, last_column: 4}
    columns:
      order_id: {title: Order, index: 0}
      total_with_tax: {type: decimal, title: Total incl. tax, index: 4}

Columns naming a real member of the entity resolve to it; any other column is
declared as a synthetic column of the given ``type``.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from operator import attrgetter
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sheetflow.core.errors import ConfigError, ProfileValidationError
from sheetflow.core.logger import get_logger

from .excel import ExcelConfiguration

logger = get_logger("loader")

COLUMN_TYPES: Dict[str, type] = {
    "str": str,
    "int": int,
    "float": float,
    "decimal": Decimal,
    "bool": bool,
    "date": dt.date,
    "datetime": dt.datetime,
}


class DocumentProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    author: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    company: Optional[str] = None
    category: Optional[str] = None


class SheetProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    index: int
    name: str
    start_row: int = 1
    auto_width: bool = False
    end_row: Optional[int] = None


class FreezeProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    col_split: int
    row_split: int
    leftmost_column: Optional[int] = None
    top_row: Optional[int] = None


class FilterProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_column: int
    last_column: Optional[int] = None


class ColumnProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Optional[str] = None
    title: Optional[str] = None
    index: Optional[int] = Field(default=None, ge=0)
    width: Optional[int] = Field(default=None, gt=0)
    format: Optional[str] = None
    ignored: Optional[bool] = None


class ConfigurationProfile(BaseModel):
    """Complete profile file model."""

    model_config = ConfigDict(extra="forbid")

    document: DocumentProfile = Field(default_factory=DocumentProfile)
    sheets: List[SheetProfile] = Field(default_factory=list)
    freeze: List[FreezeProfile] = Field(default_factory=list)
    filter: Optional[FilterProfile] = None
    columns: Dict[str, ColumnProfile] = Field(default_factory=dict)


def parse_profile(payload: Any) -> ConfigurationProfile:
    """Validate an already-parsed YAML payload."""

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ProfileValidationError("Invalid profile YAML structure (expected mapping)")
    try:
        return ConfigurationProfile.model_validate(payload)
    except ValidationError as exc:
        raise ProfileValidationError(f"Invalid configuration profile: {exc}") from exc


def load_profile(path: Path) -> ConfigurationProfile:
    """Load and validate a profile from a YAML file."""

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration profile not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        try:
            payload = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ProfileValidationError(f"Failed to parse profile YAML {path}: {exc}") from exc
    profile = parse_profile(payload)
    logger.info(
        "Configuration profile loaded",
        extra={"path": str(path), "columns": list(profile.columns)},
    )
    return profile


def _column_type(name: str, column: ColumnProfile) -> type:
    if column.type is None:
        return str
    try:
        return COLUMN_TYPES[column.type]
    except KeyError:
        raise ProfileValidationError(
            f"Column [{name}] has unknown type '{column.type}' (expected one of: {', '.join(COLUMN_TYPES)})"
        ) from None


def apply_profile(configuration: ExcelConfiguration, profile: ConfigurationProfile) -> ExcelConfiguration:
    """Apply every setting of ``profile`` to ``configuration`` and return it."""

    document = profile.document
    for field_name in DocumentProfile.model_fields:
        value = getattr(document, field_name)
        if value is not None:
            getattr(configuration, f"has_{field_name}")(value)

    for sheet in profile.sheets:
        configuration.has_sheet_configuration(
            sheet.index, sheet.name, sheet.start_row, sheet.auto_width, sheet.end_row
        )

    for freeze in profile.freeze:
        configuration.has_freeze_pane(freeze.col_split, freeze.row_split, freeze.leftmost_column, freeze.top_row)

    if profile.filter is not None:
        configuration.has_filter(profile.filter.first_column, profile.filter.last_column)

    real_names = {member.name for member in configuration.real_members()}
    for name, column in profile.columns.items():
        if name in real_names:
            property_configuration = configuration.property(attrgetter(name))
        else:
            property_configuration = configuration.property(name, _column_type(name, column))
        property_configuration.apply(column.model_dump(exclude={"type"}, exclude_none=True))

    return configuration


def load_configuration(entity_type: type, path: Path, **kwargs: Any) -> ExcelConfiguration:
    """Build a configuration for ``entity_type`` from the profile at ``path``.

    Keyword arguments are passed to :class:`ExcelConfiguration`.
    """

    return apply_profile(ExcelConfiguration(entity_type, **kwargs), load_profile(path))


__all__ = [
    "COLUMN_TYPES",
    "ColumnProfile",
    "ConfigurationProfile",
    "DocumentProfile",
    "FilterProfile",
    "FreezeProfile",
    "SheetProfile",
    "apply_profile",
    "load_configuration",
    "load_profile",
    "parse_profile",
]
