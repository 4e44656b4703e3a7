"""Document, sheet, freeze pane and filter settings."""

# Module responsibilities:
# - Provide the mutable setting records aggregated by ExcelConfiguration.
# - Hold the injectable default document setting used when none is supplied.

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_SHEET_NAME = "Sheet0"


@dataclass(slots=True)
class DocumentSetting:
    """Workbook metadata written into the document properties."""

    author: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    company: Optional[str] = None
    category: Optional[str] = None

    def copy(self) -> "DocumentSetting":
        return replace(self)


@dataclass(slots=True)
class SheetSetting:
    """Layout of one sheet, keyed by its zero-based index."""

    sheet_index: int = 0
    sheet_name: str = DEFAULT_SHEET_NAME
    start_row_index: int = 1
    end_row_index: Optional[int] = None
    auto_column_width_enabled: bool = False

    @property
    def header_row_index(self) -> int:
        """Row holding the column titles, directly above the first data row."""

        return self.start_row_index - 1


@dataclass(frozen=True, slots=True)
class FreezeSetting:
    """Pane freeze instruction; anchors default to the split position."""

    col_split: int
    row_split: int
    leftmost_column: Optional[int] = None
    top_row: Optional[int] = None

    @property
    def effective_leftmost_column(self) -> int:
        return self.col_split if self.leftmost_column is None else self.leftmost_column

    @property
    def effective_top_row(self) -> int:
        return self.row_split if self.top_row is None else self.top_row


@dataclass(frozen=True, slots=True)
class FilterSetting:
    """Auto-filter column range on the header row."""

    first_column: int
    last_column: Optional[int] = None


class DefaultSettings:
    """Provider of the default document setting for new configurations.

    Configurations copy ``document_setting`` at construction, so later changes
    to the default only affect configurations created afterwards.
    """

    def __init__(self, document_setting: Optional[DocumentSetting] = None) -> None:
        self.document_setting = document_setting

    def reset(self) -> None:
        self.document_setting = None


default_settings = DefaultSettings()


__all__ = [
    "DEFAULT_SHEET_NAME",
    "DefaultSettings",
    "DocumentSetting",
    "FilterSetting",
    "FreezeSetting",
    "SheetSetting",
    "default_settings",
]
