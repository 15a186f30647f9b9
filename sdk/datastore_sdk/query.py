"""
Query builder for the Datastore SDK.

A Query is an immutable description of a kind query. Each builder method
returns a new Query, so partially built queries can be shared and extended.

Example:
    >>> query = (
    ...     Query("users")
    ...     .filter(Filter.equal("age", 10))
    ...     .order(Order.desc("age"))
    ...     .limit(5)
    ... )

Multiple filters are combined with AND. Orderings apply in the order added.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from .key import Key
from .value import KeyValue, Value, into_value

KEY_PROPERTY = "__key__"


class FilterOperator(Enum):
    """Comparison operators supported by property filters."""

    EQUAL = "="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    IN = "in"
    NOT_IN = "not_in"
    HAS_ANCESTOR = "has_ancestor"


class Direction(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


@dataclass(frozen=True)
class Filter:
    """A property filter.

    Attributes:
        property_name: Property compared (``__key__`` for ancestor filters)
        operator: Comparison operator
        value: Value compared against
    """

    property_name: str
    operator: FilterOperator
    value: Value

    @classmethod
    def _make(cls, name: str, operator: FilterOperator, value: Any) -> Filter:
        return cls(name, operator, into_value(value))

    @classmethod
    def equal(cls, name: str, value: Any) -> Filter:
        return cls._make(name, FilterOperator.EQUAL, value)

    @classmethod
    def not_equal(cls, name: str, value: Any) -> Filter:
        return cls._make(name, FilterOperator.NOT_EQUAL, value)

    @classmethod
    def less_than(cls, name: str, value: Any) -> Filter:
        return cls._make(name, FilterOperator.LESS_THAN, value)

    @classmethod
    def less_than_or_equal(cls, name: str, value: Any) -> Filter:
        return cls._make(name, FilterOperator.LESS_THAN_OR_EQUAL, value)

    @classmethod
    def greater_than(cls, name: str, value: Any) -> Filter:
        return cls._make(name, FilterOperator.GREATER_THAN, value)

    @classmethod
    def greater_than_or_equal(cls, name: str, value: Any) -> Filter:
        return cls._make(name, FilterOperator.GREATER_THAN_OR_EQUAL, value)

    @classmethod
    def in_(cls, name: str, values: Any) -> Filter:
        return cls._make(name, FilterOperator.IN, values)

    @classmethod
    def not_in(cls, name: str, values: Any) -> Filter:
        return cls._make(name, FilterOperator.NOT_IN, values)

    @classmethod
    def has_ancestor(cls, key: Key) -> Filter:
        """Restrict results to descendants of `key`."""
        return cls(KEY_PROPERTY, FilterOperator.HAS_ANCESTOR, KeyValue(key))


@dataclass(frozen=True)
class Order:
    """A result ordering on one property."""

    property_name: str
    direction: Direction = Direction.ASCENDING

    @classmethod
    def asc(cls, name: str) -> Order:
        return cls(name, Direction.ASCENDING)

    @classmethod
    def desc(cls, name: str) -> Order:
        return cls(name, Direction.DESCENDING)


class Query:
    """An immutable Datastore query over one kind."""

    def __init__(self, kind: str) -> None:
        if not kind:
            raise ValueError("Query kind cannot be empty")
        self._kind = kind
        self._eventual = False
        self._keys_only = False
        self._offset = 0
        self._limit: Optional[int] = None
        self._namespace: Optional[str] = None
        self._projections: tuple[str, ...] = ()
        self._distinct_on: tuple[str, ...] = ()
        self._ordering: tuple[Order, ...] = ()
        self._filters: tuple[Filter, ...] = ()
        self._cursor: Optional[bytes] = None

    def _evolve(self, **changes: Any) -> Query:
        clone = copy.copy(self)
        for name, value in changes.items():
            setattr(clone, f"_{name}", value)
        return clone

    def eventually_consistent(self) -> Query:
        """Accept eventually consistent results (only affects ancestor queries)."""
        return self._evolve(eventual=True)

    def keys_only(self) -> Query:
        """Only fetch keys. Has no effect on projection queries."""
        return self._evolve(keys_only=True)

    def offset(self, offset: int) -> Query:
        """Skip `offset` results before returning any."""
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        return self._evolve(offset=offset)

    def limit(self, limit: int) -> Query:
        """Return at most `limit` results."""
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        return self._evolve(limit=limit)

    def ancestor(self, key: Key) -> Query:
        """Append an ancestor filter."""
        return self.filter(Filter.has_ancestor(key))

    def namespace(self, namespace: str) -> Query:
        return self._evolve(namespace=namespace or None)

    def project(self, properties: Iterable[str]) -> Query:
        """Only yield the given properties (replaces earlier projections)."""
        return self._evolve(projections=tuple(properties))

    def distinct_on(self, properties: Iterable[str]) -> Query:
        """De-duplicate results on the given properties (replaces earlier ones)."""
        return self._evolve(distinct_on=tuple(properties))

    def filter(self, filter: Filter) -> Query:
        return self._evolve(filters=self._filters + (filter,))

    def order(self, order: Order) -> Query:
        return self._evolve(ordering=self._ordering + (order,))

    def cursor(self, cursor: bytes) -> Query:
        """Resume from a cursor returned by an earlier query."""
        return self._evolve(cursor=bytes(cursor))

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def is_eventual(self) -> bool:
        return self._eventual

    @property
    def is_keys_only(self) -> bool:
        return self._keys_only

    @property
    def filters(self) -> tuple[Filter, ...]:
        return self._filters

    @property
    def ordering(self) -> tuple[Order, ...]:
        return self._ordering

    @property
    def projections(self) -> tuple[str, ...]:
        return self._projections

    @property
    def distinct_properties(self) -> tuple[str, ...]:
        return self._distinct_on

    @property
    def skip(self) -> int:
        return self._offset

    @property
    def max_results(self) -> Optional[int]:
        return self._limit

    @property
    def partition(self) -> Optional[str]:
        """Namespace the query runs in."""
        return self._namespace

    @property
    def start_cursor(self) -> Optional[bytes]:
        return self._cursor

    def _state(self) -> tuple[Any, ...]:
        return (
            self._kind,
            self._eventual,
            self._keys_only,
            self._offset,
            self._limit,
            self._namespace,
            self._projections,
            self._distinct_on,
            self._ordering,
            self._filters,
            self._cursor,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self._state() == other._state()

    def __repr__(self) -> str:
        parts = [repr(self._kind)]
        if self._namespace:
            parts.append(f"namespace={self._namespace!r}")
        if self._filters:
            parts.append(f"filters={list(self._filters)!r}")
        if self._ordering:
            parts.append(f"ordering={list(self._ordering)!r}")
        if self._limit is not None:
            parts.append(f"limit={self._limit}")
        if self._offset:
            parts.append(f"offset={self._offset}")
        return f"Query({', '.join(parts)})"
