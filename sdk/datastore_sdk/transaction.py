"""
Transactions for the Datastore SDK.

A Transaction collects mutations locally and sends them in one commit.
Reads inside the transaction go through its id and see a consistent snapshot.

Example:
    >>> tx = await client.begin_transaction()
    >>> user = await tx.get(Key("User", "ada"))
    >>> user["active"] = True
    >>> await tx.put(user)
    >>> await tx.commit()

Invariants:
    - Mutations are classified when appended, and sent in append order
    - After commit or rollback every operation raises TransactionError
    - A failed commit leaves the transaction active so it can be rolled back
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional

from . import _generated as pb
from .entity import Entity, into_entity
from .errors import TransactionError
from .key import Key
from .mutation import MutationKind, compile_delete, compile_put, mutation_keys
from .query import Query

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger(__name__)


class TransactionState(Enum):
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """An open Datastore transaction.

    Created by Client.begin_transaction(); not constructed directly.
    """

    def __init__(self, client: Client, transaction_id: bytes) -> None:
        self._client = client
        self._id = transaction_id
        self._state = TransactionState.ACTIVE
        self._mutations: list[tuple[MutationKind, pb.Mutation]] = []

    @property
    def id(self) -> bytes:
        """Opaque transaction identifier, usable as previous_transaction."""
        return self._id

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def pending_mutations(self) -> int:
        return len(self._mutations)

    def _ensure_active(self, operation: str) -> None:
        if self._state is not TransactionState.ACTIVE:
            raise TransactionError(
                f"Cannot {operation}: transaction is {self._state.value}",
                transaction_id=self._id,
                state=self._state.value,
            )

    # --- Reads ---

    async def get(self, key: Key, into: Any = Entity) -> Any:
        results = await self.get_all([key], into=into)
        return results[0] if results else None

    async def get_all(self, keys: Iterable[Key], into: Any = Entity) -> list[Any]:
        self._ensure_active("get")
        return await self._client._lookup(list(keys), into=into, transaction=self._id)

    async def query(self, query: Query) -> list[Entity]:
        self._ensure_active("query")
        return await self._client._run_query(query, transaction=self._id)

    # --- Writes ---

    async def put(self, entity: Any) -> None:
        """Stage a write.

        The entity's key decides the mutation: a key marked for deletion
        deletes, a new or incomplete key inserts, anything else upserts.
        """
        await self.put_all([entity])

    async def put_all(self, entities: Iterable[Any]) -> None:
        self._ensure_active("put")
        compiled = [
            compile_put(
                self._client.project_id,
                into_entity(entity),
                self._client.index_excluded,
                transactional=True,
            )
            for entity in entities
        ]
        self._mutations.extend(compiled)

    async def delete(self, key: Key) -> None:
        await self.delete_all([key])

    async def delete_all(self, keys: Iterable[Key]) -> None:
        self._ensure_active("delete")
        self._mutations.extend(compile_delete(self._client.project_id, key) for key in keys)

    # --- Completion ---

    async def commit(self) -> list[Optional[Key]]:
        """Send all staged mutations atomically.

        Returns:
            One allocated key (or None) per staged put, in staging order.
            Deletes contribute no entry.

        Raises:
            TransactionError: If the transaction is no longer active
        """
        self._ensure_active("commit")

        response = await self._client._commit(
            [mutation for _, mutation in self._mutations],
            transaction=self._id,
        )
        keys = mutation_keys(response, [kind for kind, _ in self._mutations])

        self._state = TransactionState.COMMITTED
        self._mutations.clear()
        logger.debug(f"Committed transaction {self._id.hex()}")
        return keys

    async def rollback(self) -> None:
        """Abandon the transaction and its staged mutations."""
        self._ensure_active("rollback")
        await self._client._rollback(self._id)
        self._state = TransactionState.ROLLED_BACK
        self._mutations.clear()

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self._id.hex()}, state={self._state.value}, "
            f"pending_mutations={len(self._mutations)})"
        )
