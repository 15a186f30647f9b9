"""
Value model and native type conversion for the Datastore SDK.

This module provides:
- Value: the recursive tagged union of everything Datastore can store
- into_value: native Python object -> Value
- from_value: Value -> native Python object of a requested type

Example:
    >>> value = into_value({"name": "Ada", "tags": ["math", "engines"]})
    >>> from_value(value, dict[str, Value])["name"]
    StringValue(value='Ada')
    >>> from_value(into_value([1, 2, 3]), list[int])
    [1, 2, 3]

Supported targets for from_value:
    Value (and any Value variant), str, int, float, bool, bytes, datetime,
    Key, GeoPoint, Optional[T], list[T], tuple[T, ...], dict[str, T], and
    classes defining __from_value__ (see datastore_sdk.record).

Invariants:
    - into_value never raises ConvertError; unsupported objects are a
      programming error and raise TypeError
    - from_value raises UnexpectedPropertyTypeError with static type names
      when the variant does not match the target
    - Timestamps are civil (naive) datetimes; aware datetimes are
      normalized to UTC
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Optional, Union, get_args, get_origin

from .errors import UnexpectedPropertyTypeError
from .key import Key

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class Value:
    """Base class of all Datastore values."""

    __slots__ = ()

    type_name: ClassVar[str] = "value"


@dataclass(frozen=True)
class OptionValue(Value):
    """A nullable value; `inner` None is the stored NULL."""

    type_name: ClassVar[str] = "option"

    inner: Optional[Value] = None


@dataclass(frozen=True)
class BooleanValue(Value):
    type_name: ClassVar[str] = "bool"

    value: bool


@dataclass(frozen=True)
class IntegerValue(Value):
    type_name: ClassVar[str] = "integer"

    value: int

    def __post_init__(self) -> None:
        if not _INT64_MIN <= self.value <= _INT64_MAX:
            raise ValueError(f"Integer {self.value} does not fit in 64 bits")


@dataclass(frozen=True)
class DoubleValue(Value):
    type_name: ClassVar[str] = "double"

    value: float


@dataclass(frozen=True)
class TimestampValue(Value):
    type_name: ClassVar[str] = "timestamp"

    value: datetime


@dataclass(frozen=True)
class KeyValue(Value):
    type_name: ClassVar[str] = "key"

    value: Key


@dataclass(frozen=True)
class StringValue(Value):
    type_name: ClassVar[str] = "string"

    value: str


@dataclass(frozen=True)
class BlobValue(Value):
    type_name: ClassVar[str] = "blob"

    value: bytes


@dataclass(frozen=True)
class GeoPointValue(Value):
    type_name: ClassVar[str] = "geopoint"

    latitude: float
    longitude: float


@dataclass(frozen=True)
class EntityValue(Value):
    """A record: property name -> value. Property order is irrelevant."""

    type_name: ClassVar[str] = "entity"

    properties: dict[str, Value] = field(default_factory=dict)


@dataclass(frozen=True)
class ArrayValue(Value):
    type_name: ClassVar[str] = "array"

    values: list[Value] = field(default_factory=list)


@dataclass(frozen=True)
class GeoPoint:
    """A point on Earth, in degrees."""

    latitude: float
    longitude: float


def _civil(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def into_value(obj: Any) -> Value:
    """Convert a native Python object to a Value.

    Args:
        obj: Object to convert

    Returns:
        The equivalent Value

    Raises:
        TypeError: If the object's type has no Value representation
        ValueError: If an integer does not fit in 64 bits
    """
    if isinstance(obj, Value):
        return obj

    hook = getattr(obj, "__into_value__", None)
    if hook is not None and not isinstance(obj, type):
        return hook()

    if obj is None:
        return OptionValue(None)
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return BooleanValue(obj)
    if isinstance(obj, int):
        return IntegerValue(int(obj))
    if isinstance(obj, float):
        return DoubleValue(obj)
    if isinstance(obj, str):
        return StringValue(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BlobValue(bytes(obj))
    if isinstance(obj, datetime):
        return TimestampValue(_civil(obj))
    if isinstance(obj, Key):
        return KeyValue(obj)
    if isinstance(obj, GeoPoint):
        return GeoPointValue(obj.latitude, obj.longitude)
    if isinstance(obj, Mapping):
        properties: dict[str, Value] = {}
        for name, item in obj.items():
            if not isinstance(name, str):
                raise TypeError(f"Property names must be str, got {type(name).__name__}")
            properties[name] = into_value(item)
        return EntityValue(properties)
    if isinstance(obj, (list, tuple)):
        return ArrayValue([into_value(item) for item in obj])

    raise TypeError(f"Cannot convert {type(obj).__name__} to a Datastore value")


_PRIMITIVES: dict[type, type[Value]] = {
    str: StringValue,
    int: IntegerValue,
    float: DoubleValue,
    bool: BooleanValue,
    bytes: BlobValue,
    datetime: TimestampValue,
    Key: KeyValue,
}


def _mismatch(expected: type[Value], value: Value) -> UnexpectedPropertyTypeError:
    return UnexpectedPropertyTypeError(expected=expected.type_name, got=value.type_name)


def _optional_inner(target: Any) -> Any:
    """Return T for Optional[T] / T | None targets, else a sentinel None."""
    origin = get_origin(target)
    if origin is not Union and origin is not types.UnionType:
        return None
    args = [arg for arg in get_args(target) if arg is not type(None)]
    if len(args) != len(get_args(target)) - 1 or len(args) != 1:
        raise TypeError(f"Unsupported union target: {target!r}")
    return args[0]


def from_value(value: Value, target: Any = Value) -> Any:
    """Reconstruct a native Python object of type `target` from a Value.

    Args:
        value: Value to convert
        target: Requested type (see module docstring)

    Returns:
        Object of the requested type

    Raises:
        UnexpectedPropertyTypeError: If the variant does not match the target
        MissingPropertyError: If a record field has no matching property
        TypeError: If the target type is not supported
    """
    if not isinstance(value, Value):
        raise TypeError(f"Expected a Value, got {type(value).__name__}")

    if target is Value or target is Any:
        return value

    inner = _optional_inner(target)
    if inner is not None:
        if isinstance(value, OptionValue):
            if value.inner is None:
                return None
            return from_value(value.inner, inner)
        return from_value(value, inner)

    origin = get_origin(target)
    if origin is not None:
        args = get_args(target)
        if origin is list:
            if not isinstance(value, ArrayValue):
                raise _mismatch(ArrayValue, value)
            item_type = args[0] if args else Value
            return [from_value(item, item_type) for item in value.values]
        if origin is tuple:
            if not isinstance(value, ArrayValue):
                raise _mismatch(ArrayValue, value)
            if len(args) == 2 and args[1] is Ellipsis:
                return tuple(from_value(item, args[0]) for item in value.values)
            if len(args) != len(value.values):
                raise _mismatch(ArrayValue, value)
            return tuple(from_value(item, arg) for item, arg in zip(value.values, args))
        if origin is dict or origin is Mapping:
            if not isinstance(value, EntityValue):
                raise _mismatch(EntityValue, value)
            item_type = args[1] if len(args) == 2 else Value
            return {name: from_value(item, item_type) for name, item in value.properties.items()}
        raise TypeError(f"Unsupported conversion target: {target!r}")

    if target is list:
        return from_value(value, list[Value])
    if target is dict:
        return from_value(value, dict[str, Value])

    if isinstance(target, type) and issubclass(target, Value):
        if not isinstance(value, target):
            raise _mismatch(target, value)
        return value

    hook = getattr(target, "__from_value__", None)
    if hook is not None:
        return hook(value)

    if target is GeoPoint:
        if not isinstance(value, GeoPointValue):
            raise _mismatch(GeoPointValue, value)
        return GeoPoint(value.latitude, value.longitude)

    variant = _PRIMITIVES.get(target)
    if variant is None:
        raise TypeError(f"Unsupported conversion target: {target!r}")
    if not isinstance(value, variant):
        raise _mismatch(variant, value)
    return value.value
