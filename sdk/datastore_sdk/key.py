"""
Entity keys for the Datastore SDK.

A key names an entity: a kind, an ID (integer, string name, or absent for an
incomplete key), an optional parent key and an optional namespace.

Example:
    >>> company = Key("Company", "acme")
    >>> employee = Key("Employee", 42, parent=company)
    >>> incomplete = Key("Employee").with_parent(company)
    >>> incomplete.is_incomplete()
    True

Invariants:
    - Keys are immutable; builders return new keys
    - The ancestor chain is acyclic (a parent must exist before its child)
    - A whole chain shares one namespace
    - is_new / is_deleted are mutation hints and never affect equality
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from typing import Optional, Union

KeyID = Union[int, str, None]

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Key:
    """An entity key.

    Attributes:
        kind: Kind of the entity (non-empty)
        id: Integer ID, string name, or None when incomplete
        parent: Parent key, if any
        namespace: Namespace for multi-tenancy, None for the default one
        is_new: Force an insert mutation even though the ID is set
        is_deleted: Inside a transaction, compile a put as a delete
    """

    kind: str
    id: KeyID = None
    parent: Optional[Key] = None
    namespace: Optional[str] = None
    is_new: bool = field(default=False, compare=False)
    is_deleted: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if not self.kind:
            raise ValueError("Key kind cannot be empty")
        if isinstance(self.id, bool) or not isinstance(self.id, (int, str, type(None))):
            raise TypeError(f"Key id must be int, str or None, got {type(self.id).__name__}")
        if isinstance(self.id, int) and not _INT64_MIN <= self.id <= _INT64_MAX:
            raise ValueError(f"Key id {self.id} does not fit in 64 bits")
        if self.namespace == "":
            object.__setattr__(self, "namespace", None)

        if self.parent is not None:
            if self.namespace is None:
                object.__setattr__(self, "namespace", self.parent.namespace)
            elif self.parent.namespace != self.namespace:
                object.__setattr__(self, "parent", self.parent.with_namespace(self.namespace))

    def with_id(self, id: KeyID) -> Key:
        """Return a copy of this key with the given ID."""
        return replace(self, id=id)

    def with_parent(self, parent: Key) -> Key:
        """Return a copy of this key under the given ancestor."""
        return replace(self, parent=parent)

    def with_namespace(self, namespace: Optional[str]) -> Key:
        """Return a copy of this key (and its ancestors) in the given namespace."""
        parent = self.parent.with_namespace(namespace) if self.parent is not None else None
        return replace(self, namespace=namespace or None, parent=parent)

    def mark_new(self) -> Key:
        """Return a copy flagged so that a put inserts instead of upserting."""
        return replace(self, is_new=True)

    def mark_delete(self) -> Key:
        """Return a copy flagged so that a transactional put deletes the entity."""
        return replace(self, is_deleted=True)

    def is_incomplete(self) -> bool:
        """Whether the key is missing its ID."""
        return self.id is None

    def ancestors(self) -> Iterator[Key]:
        """Iterate over ancestors, nearest first."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def path(self) -> list[Key]:
        """Keys from the root ancestor down to this key."""
        chain = [self, *self.ancestors()]
        chain.reverse()
        return chain

    def __str__(self) -> str:
        segments = "/".join(f"{k.kind}:{k.id if k.id is not None else '?'}" for k in self.path())
        if self.namespace:
            return f"{self.namespace}|{segments}"
        return segments
