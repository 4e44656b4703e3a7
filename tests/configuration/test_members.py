from __future__ import annotations

import operator
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import ClassVar, Optional

import pytest

from sheetflow.configuration.members import (
    RealKey,
    SyntheticKey,
    discover_members,
    member_name_of,
)
from sheetflow.configuration.property import ValueKind, value_kind_of
from sheetflow.core.errors import InvalidPropertyExpressionError


@dataclass
class Order:
    order_id: str
    placed_on: date
    total: Decimal
    note: Optional[str] = None
    currency: ClassVar[str] = "CNY"
    _secret: str = field(default="", repr=False)

    @property
    def is_large(self) -> bool:
        return self.total > 1000


class BaseRecord:
    id: int
    created_on: date


class Customer(BaseRecord):
    name: str
    vip: bool


def test_discover_dataclass_members_in_declaration_order() -> None:
    members = discover_members(Order)

    assert [m.name for m in members] == ["order_id", "placed_on", "total", "note", "is_large"]
    by_name = {m.name: m for m in members}
    assert by_name["total"].value_type is Decimal
    assert by_name["is_large"].value_type is bool
    assert by_name["is_large"].source == "property"
    assert all(m.declaring_type is Order for m in members)


def test_discover_annotated_class_lists_base_members_first() -> None:
    members = discover_members(Customer)

    assert [m.name for m in members] == ["id", "created_on", "name", "vip"]


def test_discover_rejects_non_class() -> None:
    with pytest.raises(TypeError):
        discover_members(Order("A-1", date(2024, 5, 1), Decimal("1")))  # type: ignore[arg-type]


def test_member_name_of_lambda_and_attrgetter() -> None:
    assert member_name_of(lambda o: o.total) == "total"
    assert member_name_of(operator.attrgetter("placed_on")) == "placed_on"
    assert member_name_of(lambda o: o.does_not_exist) == "does_not_exist"


@pytest.mark.parametrize(
    "expression",
    [
        lambda o: o,
        lambda o: o.customer.name,
        lambda o: o.total + 1,
        "total",
    ],
)
def test_member_name_of_rejects_non_member_access(expression) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(InvalidPropertyExpressionError):
        member_name_of(expression)


def test_real_key_identity_is_structural() -> None:
    assert RealKey(Order, "total", Decimal) == RealKey(Order, "total", float)
    assert RealKey(Order, "total") != RealKey(Customer, "total")
    assert hash(RealKey(Order, "total", Decimal)) == hash(RealKey(Order, "total"))


def test_synthetic_key_never_equals_real_key() -> None:
    synthetic = SyntheticKey(Order, Decimal, "total")

    assert synthetic != RealKey(Order, "total", Decimal)
    assert synthetic == SyntheticKey(Order, Decimal, "total")
    assert synthetic != SyntheticKey(Order, str, "total")
    assert synthetic.is_synthetic and not RealKey(Order, "total").is_synthetic


@pytest.mark.parametrize(
    ("value_type", "kind"),
    [
        (str, ValueKind.TEXT),
        (bool, ValueKind.BOOLEAN),
        (int, ValueKind.INTEGER),
        (float, ValueKind.DECIMAL),
        (Decimal, ValueKind.DECIMAL),
        (date, ValueKind.DATE),
        (Optional[int], ValueKind.INTEGER),
        (object, ValueKind.OTHER),
        (Order, ValueKind.OTHER),
    ],
)
def test_value_kind_of(value_type, kind) -> None:  # type: ignore[no-untyped-def]
    assert value_kind_of(value_type) is kind
