"""Shared plumbing for application services"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Type, TypeVar

from rahnu_gateway.domain.exceptions import ValidationError
from rahnu_gateway.domain.repositories import Storage
from rahnu_gateway.utils.date_utils import utcnow

Clock = Callable[[], datetime]
EnumT = TypeVar("EnumT", bound=Enum)


def parse_enum(enum_cls: Type[EnumT], value: object, field_name: str) -> EnumT:
    """Coerce a raw value into enum_cls or raise ValidationError naming the field"""
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}", [field_name]) from e


class Service:
    """Base class: a storage unit of work plus an injectable clock"""

    def __init__(self, storage: Storage, clock: Clock = utcnow):
        self.storage = storage
        self.clock = clock

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.clock().date()


def reject_nulls(fields: Dict[str, Any], nullable: Iterable[str]) -> None:
    """Raise ValidationError when a required field is explicitly set to None"""
    cleared = sorted(name for name, value in fields.items() if value is None and name not in nullable)
    if cleared:
        raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}", cleared)
