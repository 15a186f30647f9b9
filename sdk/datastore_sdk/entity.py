"""
Entities for the Datastore SDK.

An entity is a key paired with a record value (an EntityValue).

Example:
    >>> entity = Entity(Key("User", "ada"), {"name": "Ada", "age": 36})
    >>> entity["name"]
    StringValue(value='Ada')
    >>> entity.into(dict[str, Value])["age"]
    IntegerValue(value=36)
"""

from __future__ import annotations

from typing import Any, Iterator

from .errors import UnexpectedPropertyTypeError
from .key import Key
from .value import EntityValue, Value, from_value, into_value


def _as_record(properties: Any) -> EntityValue:
    value = into_value(properties)
    if not isinstance(value, EntityValue):
        raise UnexpectedPropertyTypeError(expected="entity", got=value.type_name)
    # Item assignment mutates the top-level mapping, so never share the caller's
    return EntityValue(dict(value.properties))


class Entity:
    """A Datastore entity: a key and its properties.

    Raises:
        UnexpectedPropertyTypeError: If the properties do not convert to a record
    """

    def __init__(self, key: Key, properties: Any) -> None:
        self._key = key
        self._properties = _as_record(properties)

    @property
    def key(self) -> Key:
        return self._key

    @key.setter
    def key(self, key: Key) -> None:
        self._key = key

    @property
    def properties(self) -> EntityValue:
        return self._properties

    @properties.setter
    def properties(self, properties: Any) -> None:
        self._properties = _as_record(properties)

    def __getitem__(self, name: str) -> Value:
        return self._properties.properties[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._properties.properties[name] = into_value(value)

    def __delitem__(self, name: str) -> None:
        del self._properties.properties[name]

    def __contains__(self, name: object) -> bool:
        return name in self._properties.properties

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties.properties)

    def get(self, name: str, default: Any = None) -> Any:
        """Get a property value, or `default` if absent."""
        return self._properties.properties.get(name, default)

    def into(self, target: Any) -> Any:
        """Reconstruct the properties as an instance of `target`."""
        return from_value(self._properties, target)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self._key == other._key and self._properties == other._properties

    def __repr__(self) -> str:
        return f"Entity(key={self._key!r}, properties={self._properties.properties!r})"


def into_entity(obj: Any) -> Entity:
    """Accept an Entity or a (Key, properties) pair."""
    if isinstance(obj, Entity):
        return obj
    if isinstance(obj, tuple) and len(obj) == 2 and isinstance(obj[0], Key):
        return Entity(obj[0], obj[1])
    raise TypeError(f"Cannot convert {type(obj).__name__} to an Entity")
