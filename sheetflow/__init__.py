"""`sheetflow` top-level package exports the fluent sheet configuration API."""

# Module responsibilities:
# - Re-export the configuration builder, setting records and property keys so
#   export engines and callers have a stable API surface.
# - Provide the package version.

from __future__ import annotations

from .configuration.excel import ExcelConfiguration
from .configuration.loader import apply_profile, load_configuration, load_profile
from .configuration.members import (
    MemberCache,
    MemberDescriptor,
    PropertyKey,
    RealKey,
    SyntheticKey,
    default_member_cache,
)
from .configuration.property import PropertyConfiguration, ValueKind
from .configuration.registry import ConfigurationRegistry, settings_for
from .configuration.settings import (
    DefaultSettings,
    DocumentSetting,
    FilterSetting,
    FreezeSetting,
    SheetSetting,
    default_settings,
)
from .core.cache import MemoCache
from .core.errors import (
    ConfigError,
    InvalidPropertyExpressionError,
    ProfileValidationError,
    PropertyResolutionError,
    SheetFlowError,
)

__all__ = [
    "ExcelConfiguration",
    "ConfigurationRegistry",
    "settings_for",
    "apply_profile",
    "load_configuration",
    "load_profile",
    "MemberDescriptor",
    "PropertyKey",
    "RealKey",
    "SyntheticKey",
    "PropertyConfiguration",
    "ValueKind",
    "DefaultSettings",
    "DocumentSetting",
    "FilterSetting",
    "FreezeSetting",
    "SheetSetting",
    "default_settings",
    "MemberCache",
    "MemoCache",
    "default_member_cache",
    "SheetFlowError",
    "ConfigError",
    "PropertyResolutionError",
    "InvalidPropertyExpressionError",
    "ProfileValidationError",
]

__version__ = "0.1.0"
