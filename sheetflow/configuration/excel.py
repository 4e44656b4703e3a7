"""Fluent sheet configuration for one entity class."""

# Module responsibilities:
# - Aggregate document metadata, sheet layouts, freeze panes, the filter range
#   and the row validation predicate for one entity class.
# - Resolve property expressions and names into property keys and keep one
#   PropertyConfiguration per key.
# - Expose the finished state read-only to export engines.

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from sheetflow.core.errors import InvalidPropertyExpressionError, PropertyResolutionError
from sheetflow.core.logger import get_logger

from .members import (
    MemberCache,
    MemberDescriptor,
    PropertyKey,
    SyntheticKey,
    default_member_cache,
    member_name_of,
)
from .property import PropertyConfiguration, column_settings_from_metadata, create_property_configuration
from .settings import (
    DefaultSettings,
    DocumentSetting,
    FilterSetting,
    FreezeSetting,
    SheetSetting,
    default_settings,
)

logger = get_logger("configuration")

TEntity = TypeVar("TEntity")
ValidationPredicate = Callable[[Any], bool]


class ExcelConfiguration(Generic[TEntity]):
    """Configuration aggregate and fluent builder bound to one entity class.

    Every builder method returns the configuration itself so calls can be
    chained; ``property`` returns the resolved PropertyConfiguration instead.
    Instances are meant to be built once and then read by an export engine;
    they are not safe for concurrent mutation.

    Attributes:
        entity_type: The entity class this configuration describes.
        document_setting: Workbook metadata.
        property_configurations: ``PropertyKey -> PropertyConfiguration``.
        sheet_settings: ``sheet index -> SheetSetting``; index 0 always exists.
        freeze_settings: Freeze panes in declaration order.
        filter_setting: Optional auto-filter range.
        validation: Optional row predicate; ``None`` accepts every entity.
    """

    def __init__(
        self,
        entity_type: type,
        setting: Optional[DocumentSetting] = None,
        *,
        defaults: Optional[DefaultSettings] = None,
        member_cache: Optional[MemberCache] = None,
    ) -> None:
        if not isinstance(entity_type, type):
            raise TypeError(f"entity_type must be a class, got {entity_type!r}")
        self.entity_type = entity_type
        self._member_cache = default_member_cache if member_cache is None else member_cache

        if setting is None:
            provider = default_settings if defaults is None else defaults
            if provider.document_setting is not None:
                setting = provider.document_setting.copy()
            else:
                setting = DocumentSetting()
        self.document_setting = setting

        self.property_configurations: Dict[PropertyKey, PropertyConfiguration] = {}
        self.sheet_settings: Dict[int, SheetSetting] = {0: SheetSetting()}
        self.freeze_settings: List[FreezeSetting] = []
        self.filter_setting: Optional[FilterSetting] = None
        self.validation: Optional[ValidationPredicate] = None

    def __repr__(self) -> str:
        return (
            f"ExcelConfiguration(entity_type={self.entity_type.__qualname__}, "
            f"properties={len(self.property_configurations)}, sheets={sorted(self.sheet_settings)})"
        )

    # Document metadata

    def has_author(self, author: str) -> "ExcelConfiguration[TEntity]":
        self.document_setting.author = author
        return self

    def has_title(self, title: str) -> "ExcelConfiguration[TEntity]":
        self.document_setting.title = title
        return self

    def has_description(self, description: str) -> "ExcelConfiguration[TEntity]":
        self.document_setting.description = description
        return self

    def has_subject(self, subject: str) -> "ExcelConfiguration[TEntity]":
        self.document_setting.subject = subject
        return self

    def has_company(self, company: str) -> "ExcelConfiguration[TEntity]":
        self.document_setting.company = company
        return self

    def has_category(self, category: str) -> "ExcelConfiguration[TEntity]":
        self.document_setting.category = category
        return self

    # Freeze panes and filter

    def has_freeze_pane(
        self,
        col_split: int,
        row_split: int,
        leftmost_column: Optional[int] = None,
        top_row: Optional[int] = None,
    ) -> "ExcelConfiguration[TEntity]":
        """Append a freeze pane; coordinates are checked by the export engine."""

        self.freeze_settings.append(FreezeSetting(col_split, row_split, leftmost_column, top_row))
        return self

    def has_filter(self, first_column: int, last_column: Optional[int] = None) -> "ExcelConfiguration[TEntity]":
        """Set the auto-filter range, replacing any earlier one."""

        self.filter_setting = FilterSetting(first_column, last_column)
        return self

    # Sheets

    def has_sheet_configuration(
        self,
        sheet_index: int,
        sheet_name: str,
        start_row_index: int,
        enable_auto_column_width: bool,
        end_row_index: Optional[int] = None,
    ) -> "ExcelConfiguration[TEntity]":
        """Configure the sheet at ``sheet_index``; negative indexes are ignored."""

        if sheet_index < 0:
            logger.debug(
                "Ignoring sheet configuration with negative index",
                extra={"entity": self.entity_type.__qualname__, "sheet_index": sheet_index},
            )
            return self

        sheet_setting = self.sheet_settings.get(sheet_index)
        if sheet_setting is None:
            self.sheet_settings[sheet_index] = SheetSetting(
                sheet_index=sheet_index,
                sheet_name=sheet_name,
                start_row_index=start_row_index,
                end_row_index=end_row_index,
                auto_column_width_enabled=enable_auto_column_width,
            )
        else:
            sheet_setting.sheet_name = sheet_name
            sheet_setting.start_row_index = start_row_index
            sheet_setting.end_row_index = end_row_index
            sheet_setting.auto_column_width_enabled = enable_auto_column_width
        return self

    # Validation

    def with_data_validation(self, predicate: Optional[ValidationPredicate]) -> "ExcelConfiguration[TEntity]":
        self.validation = predicate
        return self

    def is_valid(self, entity: TEntity) -> bool:
        """Apply the validation predicate; without one every entity is valid."""

        if self.validation is None:
            return True
        return bool(self.validation(entity))

    # Property store

    def get_property_configuration(self, key: PropertyKey) -> PropertyConfiguration:
        try:
            return self.property_configurations[key]
        except KeyError:
            raise PropertyResolutionError(
                f"no configuration registered for [{key.name}] on {self.entity_type.__qualname__}"
            ) from None

    def _get_or_create(
        self, key: PropertyKey, factory: Callable[[PropertyKey], PropertyConfiguration]
    ) -> PropertyConfiguration:
        configuration = self.property_configurations.get(key)
        if configuration is None:
            configuration = factory(key)
            self.property_configurations[key] = configuration
        return configuration

    def _find_registered(self, name: str) -> Optional[PropertyConfiguration]:
        for key, configuration in self.property_configurations.items():
            if key.name == name:
                return configuration
        return None

    def real_members(self) -> tuple[MemberDescriptor, ...]:
        """Reflected members of the entity class, memoized by the member cache."""

        return self._member_cache.get_members(self.entity_type)

    def _new_real_configuration(self, member: MemberDescriptor) -> PropertyConfiguration:
        configuration = create_property_configuration(member.key())
        return configuration.apply(column_settings_from_metadata(member.metadata))

    def _configure_real_member(self, member: MemberDescriptor) -> PropertyConfiguration:
        return self._get_or_create(member.key(), lambda _: self._new_real_configuration(member))

    def iter_export_columns(self) -> List[PropertyConfiguration]:
        """Return the non-ignored columns in export order.

        Read-only: the property store is not modified, so several exporters can
        call this concurrently on a finished configuration. Real members that
        were never resolved get a detached default configuration; a column
        declared under the same name replaces the real member. Columns with an
        explicit index come first, sorted by index; the rest follow member
        declaration order, then synthetic columns in declaration order.
        """

        members = self.real_members()
        registered = list(self.property_configurations.values())
        registered_names = {configuration.name for configuration in registered}
        columns = registered + [
            self._new_real_configuration(member) for member in members if member.name not in registered_names
        ]

        positions = {member.name: idx for idx, member in enumerate(members)}
        ordered = []
        for registration, configuration in enumerate(columns):
            if configuration.is_ignored:
                continue
            if configuration.is_synthetic:
                position = len(members) + registration
            else:
                position = positions.get(configuration.name, len(members) + registration)
            ordered.append((configuration.column_index is None, configuration.column_index or 0, position, configuration))
        ordered.sort(key=lambda item: item[:3])
        return [item[3] for item in ordered]

    # Property resolution; kept last so the name does not shadow the builtin above.

    def property(self, member: Any, value_type: Any = None) -> PropertyConfiguration:
        """Resolve a column by expression or by name.

        ``property(lambda e: e.amount)`` resolves an existing member: declared
        columns are searched first, then the entity's real members; an unknown
        member raises PropertyResolutionError.

        ``property("amount_with_tax", Decimal)`` looks the name up among
        declared columns and otherwise declares a synthetic column of
        ``value_type`` (``object`` when omitted). A name already declared is
        returned as is, whatever ``value_type`` is passed.

        ``value_type`` is only accepted together with a name.
        """

        if isinstance(member, str):
            return self._resolve_by_name(member, object if value_type is None else value_type)
        if value_type is not None:
            raise InvalidPropertyExpressionError(
                "value_type is only accepted with a column name; an expression resolves the member's own type"
            )
        return self._resolve_by_expression(member)

    def _resolve_by_expression(self, expression: Callable[[Any], Any]) -> PropertyConfiguration:
        name = member_name_of(expression)
        configuration = self._find_registered(name)
        if configuration is not None:
            return configuration

        for real_member in self.real_members():
            if real_member.name == name:
                logger.debug(
                    "Resolved real member",
                    extra={"entity": self.entity_type.__qualname__, "member": name},
                )
                return self._configure_real_member(real_member)

        raise PropertyResolutionError(f"the property [{name}] does not exist on {self.entity_type.__qualname__}")

    def _resolve_by_name(self, name: str, value_type: Any) -> PropertyConfiguration:
        configuration = self._find_registered(name)
        if configuration is not None:
            return configuration

        key = SyntheticKey(declaring_type=self.entity_type, value_type=value_type, name=name)
        logger.info(
            "Declared synthetic column",
            extra={"entity": self.entity_type.__qualname__, "member": name, "value_type": repr(value_type)},
        )
        return self._get_or_create(key, create_property_configuration)


__all__ = ["ExcelConfiguration", "ValidationPredicate"]
