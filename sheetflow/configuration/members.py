"""Member reflection and property keys for entity classes."""

# Module responsibilities:
# - Reflect the real (declared) members of an entity class in declaration order.
# - Define the two property key variants: RealKey for reflected members and
#   SyntheticKey for computed columns without a backing member.
# - Extract the accessed member name from a property expression.

from __future__ import annotations

import dataclasses
import inspect
import typing
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Tuple, Union

from sheetflow.core.cache import MemoCache
from sheetflow.core.errors import InvalidPropertyExpressionError
from sheetflow.core.logger import get_logger

logger = get_logger("members")

_EMPTY_METADATA: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class MemberDescriptor:
    """A real member reflected from an entity class."""

    declaring_type: type
    name: str
    value_type: Any
    source: str = field(default="annotation", compare=False)
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    def key(self) -> "RealKey":
        return RealKey(declaring_type=self.declaring_type, name=self.name, value_type=self.value_type)


@dataclass(frozen=True)
class RealKey:
    """Key of a reflected member; identity is (declaring type, member name)."""

    declaring_type: type
    name: str
    value_type: Any = field(default=object, compare=False)

    is_synthetic: ClassVar[bool] = False


@dataclass(frozen=True)
class SyntheticKey:
    """Key of a virtual column; identity is (declaring type, value type, name)."""

    declaring_type: type
    value_type: Any
    name: str

    is_synthetic: ClassVar[bool] = True


PropertyKey = Union[RealKey, SyntheticKey]


def _is_class_var(hint: Any) -> bool:
    return hint is ClassVar or typing.get_origin(hint) is ClassVar


def _annotations_of(entity_type: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(entity_type)
    except (NameError, TypeError):
        # Unresolvable forward references: keep the names, drop the types.
        merged: Dict[str, Any] = {}
        for klass in reversed(entity_type.__mro__):
            for name, hint in inspect.get_annotations(klass).items():
                if isinstance(hint, str):
                    merged[name] = ClassVar if hint.startswith(("ClassVar", "typing.ClassVar")) else object
                else:
                    merged[name] = hint
        return merged


def _property_type(attr: Any) -> Any:
    getter = attr.fget if isinstance(attr, property) else attr.func
    if getter is None:
        return object
    try:
        return typing.get_type_hints(getter).get("return", object)
    except (NameError, TypeError):
        return object


def discover_members(entity_type: type) -> Tuple[MemberDescriptor, ...]:
    """Reflect the public members of ``entity_type`` in declaration order.

    Dataclass fields come first, then remaining class annotations (base classes
    first), then ``property``/``cached_property`` attributes. Names starting with
    an underscore and ``ClassVar`` annotations are skipped.
    """

    if not isinstance(entity_type, type):
        raise TypeError(f"entity_type must be a class, got {entity_type!r}")

    hints = _annotations_of(entity_type)
    members: Dict[str, MemberDescriptor] = {}

    def _add(name: str, value_type: Any, source: str, metadata: Mapping[str, Any] = _EMPTY_METADATA) -> None:
        if name.startswith("_") or name in members:
            return
        members[name] = MemberDescriptor(
            declaring_type=entity_type,
            name=name,
            value_type=value_type,
            source=source,
            metadata=metadata,
        )

    if dataclasses.is_dataclass(entity_type):
        for dc_field in dataclasses.fields(entity_type):
            hint = hints.get(dc_field.name, object)
            _add(dc_field.name, hint, "field", dc_field.metadata)

    for name, hint in hints.items():
        if _is_class_var(hint):
            continue
        _add(name, hint, "annotation")

    for klass in reversed(entity_type.__mro__):
        # pydantic.BaseModel exposes model_* helpers as properties.
        if klass is object or klass.__module__.startswith("pydantic."):
            continue
        for name, attr in vars(klass).items():
            if isinstance(attr, (property, cached_property)):
                _add(name, _property_type(attr), "property")

    return tuple(members.values())


class _MemberRecorder:
    """Stand-in entity that records attribute access."""

    __slots__ = ("_sheetflow_accessed",)

    def __init__(self) -> None:
        self._sheetflow_accessed: List[str] = []

    def __getattr__(self, name: str) -> "_MemberRecorder":
        self._sheetflow_accessed.append(name)
        return self


def member_name_of(expression: Callable[[Any], Any]) -> str:
    """Return the member name accessed by ``expression``.

    ``expression`` is a single-argument callable that accesses exactly one
    attribute of its argument, e.g. ``lambda order: order.total`` or
    ``operator.attrgetter("total")``.
    """

    if not callable(expression):
        raise InvalidPropertyExpressionError(f"property expression must be callable, got {expression!r}")

    recorder = _MemberRecorder()
    try:
        result = expression(recorder)
    except Exception as exc:
        raise InvalidPropertyExpressionError(
            f"property expression {expression!r} must be a plain member access"
        ) from exc

    accessed = recorder._sheetflow_accessed
    if result is not recorder or len(accessed) != 1:
        raise InvalidPropertyExpressionError(
            f"property expression must access exactly one member, accessed {accessed!r}"
        )
    return accessed[0]


class MemberCache(MemoCache[type, Tuple[MemberDescriptor, ...]]):
    """Process-lifetime cache of the real members reflected from entity classes."""

    def get_members(self, entity_type: type) -> Tuple[MemberDescriptor, ...]:
        """Return the ordered real members of ``entity_type``."""

        return self.get_or_add(entity_type, self._reflect)

    @staticmethod
    def _reflect(entity_type: type) -> Tuple[MemberDescriptor, ...]:
        members = discover_members(entity_type)
        logger.debug(
            "Reflected entity members",
            extra={"entity": entity_type.__qualname__, "members": [m.name for m in members]},
        )
        return members


default_member_cache = MemberCache()


__all__ = [
    "MemberCache",
    "MemberDescriptor",
    "PropertyKey",
    "RealKey",
    "SyntheticKey",
    "default_member_cache",
    "discover_members",
    "member_name_of",
]
