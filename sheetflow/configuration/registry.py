"""Per-entity configuration registry."""

from __future__ import annotations

from typing import Optional

from sheetflow.core.cache import MemoCache
from sheetflow.core.logger import get_logger

from .excel import ExcelConfiguration
from .members import MemberCache
from .settings import DefaultSettings

logger = get_logger("registry")


class ConfigurationRegistry:
    """Hands out one shared ExcelConfiguration per entity class.

    The configuration for a class is created at most once, even when several
    threads ask for it concurrently.
    """

    def __init__(
        self,
        *,
        defaults: Optional[DefaultSettings] = None,
        member_cache: Optional[MemberCache] = None,
    ) -> None:
        self._defaults = defaults
        self._member_cache = member_cache
        self._configurations: MemoCache[type, ExcelConfiguration] = MemoCache()

    def for_type(self, entity_type: type) -> ExcelConfiguration:
        return self._configurations.get_or_add(entity_type, self._create)

    def _create(self, entity_type: type) -> ExcelConfiguration:
        logger.debug("Creating configuration", extra={"entity": getattr(entity_type, "__qualname__", repr(entity_type))})
        return ExcelConfiguration(entity_type, defaults=self._defaults, member_cache=self._member_cache)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._configurations

    def clear(self) -> None:
        self._configurations.clear()


default_registry = ConfigurationRegistry()


def settings_for(entity_type: type) -> ExcelConfiguration:
    """Return the shared configuration for ``entity_type`` from the default registry."""

    return default_registry.for_type(entity_type)


__all__ = ["ConfigurationRegistry", "default_registry", "settings_for"]
