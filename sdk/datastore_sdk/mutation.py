"""
Mutation compilation for commits.

Each entity written is compiled to one of three mutation kinds:
- insert: the key is incomplete or explicitly marked new (fails if it exists)
- upsert: the key is complete (overwrite or create)
- delete: inside a transaction, the key is marked for deletion
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

from . import _generated as pb
from ._codec import entity_to_proto, key_from_proto, key_to_proto
from .entity import Entity
from .errors import DecodeError
from .index_excluded import IndexExcluded
from .key import Key


class MutationKind(Enum):
    INSERT = "insert"
    UPSERT = "upsert"
    DELETE = "delete"


def classify_mutation(key: Key, *, transactional: bool = False) -> MutationKind:
    """Decide the mutation kind for a put of an entity with this key.

    The deletion mark only applies inside transactions.
    """
    if transactional and key.is_deleted:
        return MutationKind.DELETE
    if key.is_new or key.is_incomplete():
        return MutationKind.INSERT
    return MutationKind.UPSERT


def compile_put(
    project_id: str,
    entity: Entity,
    index_excluded: IndexExcluded,
    *,
    transactional: bool = False,
) -> tuple[MutationKind, pb.Mutation]:
    kind = classify_mutation(entity.key, transactional=transactional)
    mutation = pb.Mutation()
    if kind is MutationKind.DELETE:
        mutation.delete.CopyFrom(key_to_proto(project_id, entity.key))
    elif kind is MutationKind.INSERT:
        mutation.insert.CopyFrom(entity_to_proto(project_id, entity, index_excluded))
    else:
        mutation.upsert.CopyFrom(entity_to_proto(project_id, entity, index_excluded))
    return kind, mutation


def compile_delete(project_id: str, key: Key) -> tuple[MutationKind, pb.Mutation]:
    mutation = pb.Mutation()
    mutation.delete.CopyFrom(key_to_proto(project_id, key))
    return MutationKind.DELETE, mutation


def mutation_keys(
    response: pb.CommitResponse,
    kinds: Sequence[MutationKind],
) -> list[Optional[Key]]:
    """Keys assigned by the backend, one per put-type mutation, in order.

    Delete mutations contribute nothing. A key is only present when the
    backend allocated one (the entity's key was incomplete).

    Raises:
        DecodeError: If the results do not line up with the sent mutations
    """
    results = list(response.mutation_results)
    if len(results) != len(kinds):
        raise DecodeError(
            f"Commit returned {len(results)} mutation results for {len(kinds)} mutations",
            field_name="mutation_results",
        )

    return [
        key_from_proto(result.key) if result.HasField("key") else None
        for result, kind in zip(results, kinds)
        if kind is not MutationKind.DELETE
    ]
