"""
Record and enum derivation for the Datastore SDK.

Decorating a dataclass with @record makes it convertible to and from an
EntityValue; decorating an Enum with @enum_value makes it convertible to
and from a StringValue. Wire names follow a casing policy (camelCase by
default) unless overridden per field or per variant.

Example:
    >>> @record(rename_all="snake_case")
    ... @dataclass
    ... class User:
    ...     first_name: str
    ...     email: str = renamed("mail")
    ...     age: int | None = None
    >>>
    >>> into_value(User("Ada", "ada@example.com"))
    EntityValue(properties={'first_name': ..., 'mail': ..., 'age': OptionValue(inner=None)})

    >>> @enum_value(rename_all="SCREAMING-KEBAB-CASE", renames={"LEGACY": "old"})
    ... class Status(Enum):
    ...     IN_PROGRESS = 1
    ...     LEGACY = 2

Invariants:
    - Record properties are consumed in declared field order
    - Fields without defaults are required; missing ones raise MissingPropertyError
    - Unknown enum variant names raise DecodeError
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any

from .casing import Casing, transform
from .errors import DecodeError, MissingPropertyError, UnexpectedPropertyTypeError
from .value import EntityValue, StringValue, Value, from_value, into_value

RENAME_METADATA_KEY = "datastore_rename"


@dataclass(frozen=True)
class RecordField:
    """Conversion metadata for one record field.

    Attributes:
        attribute: Python attribute name
        wire_name: Property name stored in Datastore
        type: Resolved type hint used for reconstruction
        required: Whether the property must be present
    """

    attribute: str
    wire_name: str
    type: Any
    required: bool


def renamed(name: str, **kwargs: Any) -> Any:
    """Declare a dataclass field stored under an explicit property name.

    Accepts the same keyword arguments as dataclasses.field().

    Example:
        >>> email: str = renamed("mail", default="")
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[RENAME_METADATA_KEY] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def _coerce_casing(rename_all: Casing | str) -> Casing:
    if isinstance(rename_all, Casing):
        return rename_all
    return Casing.from_str(rename_all)


def record_fields(cls: type) -> tuple[RecordField, ...]:
    """Return the conversion metadata of a @record class, in declared order."""
    cached = cls.__dict__.get("__datastore_fields__")
    if cached is not None:
        return cached

    casing = cls.__datastore_casing__
    hints = typing.get_type_hints(cls)
    fields = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        wire_name = f.metadata.get(RENAME_METADATA_KEY) or transform(f.name, casing)
        required = f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        fields.append(RecordField(f.name, wire_name, hints.get(f.name, Any), required))

    result = tuple(fields)
    cls.__datastore_fields__ = result
    return result


def record(cls: type | None = None, *, rename_all: Casing | str = Casing.CAMEL) -> Any:
    """Class decorator making a dataclass convertible to/from an EntityValue.

    Args:
        cls: Dataclass to decorate
        rename_all: Casing applied to field names without an explicit rename

    Returns:
        The decorated class
    """
    casing = _coerce_casing(rename_all)

    def wrap(cls: type) -> type:
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"@record requires a dataclass, got {cls.__name__}")

        cls.__datastore_casing__ = casing
        cls.__datastore_fields__ = None

        def __into_value__(self: Any) -> Value:
            return EntityValue(
                {f.wire_name: into_value(getattr(self, f.attribute)) for f in record_fields(type(self))}
            )

        def __from_value__(klass: type, value: Value) -> Any:
            if not isinstance(value, EntityValue):
                raise UnexpectedPropertyTypeError(expected="entity", got=value.type_name)

            properties = dict(value.properties)
            kwargs: dict[str, Any] = {}
            for f in record_fields(klass):
                if f.wire_name in properties:
                    kwargs[f.attribute] = from_value(properties.pop(f.wire_name), f.type)
                elif f.required:
                    suggestions = get_close_matches(f.wire_name, list(properties), n=3)
                    raise MissingPropertyError(f.wire_name, suggestions)
            return klass(**kwargs)

        cls.__into_value__ = __into_value__
        cls.__from_value__ = classmethod(__from_value__)
        return cls

    if cls is None:
        return wrap
    return wrap(cls)


def enum_value(
    cls: type[Enum] | None = None,
    *,
    rename_all: Casing | str = Casing.CAMEL,
    renames: dict[str, str] | None = None,
) -> Any:
    """Class decorator making an Enum convertible to/from a StringValue.

    Args:
        cls: Enum to decorate
        rename_all: Casing applied to member names without an explicit rename
        renames: Member name -> wire name overrides

    Returns:
        The decorated enum
    """
    casing = _coerce_casing(rename_all)
    overrides = dict(renames or {})

    def wrap(cls: type[Enum]) -> type[Enum]:
        if not issubclass(cls, Enum):
            raise TypeError(f"@enum_value requires an Enum, got {cls.__name__}")

        unknown = set(overrides) - set(cls.__members__)
        if unknown:
            raise ValueError(f"Unknown members in renames for {cls.__name__}: {sorted(unknown)}")

        to_wire = {
            member: overrides.get(member.name) or transform(member.name, casing)
            for member in cls
        }
        from_wire = {wire: member for member, wire in to_wire.items()}

        def __into_value__(self: Enum) -> Value:
            return StringValue(to_wire[self])

        def __from_value__(klass: type[Enum], value: Value) -> Enum:
            if not isinstance(value, StringValue):
                raise UnexpectedPropertyTypeError(expected="string", got=value.type_name)
            try:
                return from_wire[value.value]
            except KeyError:
                raise DecodeError(
                    f"Unknown variant '{value.value}' for enum {klass.__name__}",
                    field_name=klass.__name__,
                ) from None

        cls.__into_value__ = __into_value__
        cls.__from_value__ = classmethod(__from_value__)
        cls.__datastore_variants__ = dict(to_wire)
        return cls

    if cls is None:
        return wrap
    return wrap(cls)
