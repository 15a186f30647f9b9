"""
Datastore Client for Python SDK.

This module provides the main client interface:
- Client: Connection to the Datastore service, tied to one project
- TransactionMode: Options for beginning a transaction

Example:
    >>> async with Client.from_env() as client:
    ...     key = await client.put(Entity(Key("Task"), {"title": "My Task"}))
    ...     task = await client.get(key)
    ...     tasks = await client.query(Query("Task").limit(10))

Invariants:
    - Every RPC carries a bearer token fetched just before dispatch
    - Lookups are retried with exactly the deferred keys until none remain
    - Queries are reissued with the latest end cursor while results are unfinished
    - Writes outside a transaction are committed non-transactionally
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Optional

from . import _generated as pb
from ._codec import compile_query, entity_from_proto, key_to_proto, read_options
from ._grpc_client import GrpcClient
from .auth import CredentialsTokenSupplier, StaticTokenSupplier, TokenSupplier
from .config import DatastoreConfig
from .entity import Entity, into_entity
from .errors import ConnectionError, DecodeError, RoundLimitExceededError
from .index_excluded import IndexExcluded
from .key import Key
from .mutation import compile_delete, compile_put, mutation_keys
from .query import Query
from .transaction import Transaction

logger = logging.getLogger(__name__)


class TransactionMode(Enum):
    """How a transaction is begun."""

    DEFAULT = "default"
    READ_ONLY = "read_only"
    READ_WRITE = "read_write"


class Client:
    """Client for the Datastore service.

    Provides a Python API over the Datastore v1 RPCs. Handles connection
    management, bearer authorization, deferred lookups and query pagination.

    Example:
        >>> client = Client("my-project", token_supplier=StaticTokenSupplier())
        >>> async with client:
        ...     users = await client.query(Query("User").filter(Filter.equal("age", 10)))
    """

    def __init__(
        self,
        project_id: str,
        *,
        token_supplier: TokenSupplier,
        transport: Any = None,
        index_excluded: IndexExcluded | None = None,
        config: DatastoreConfig | None = None,
    ) -> None:
        """Initialize client.

        Args:
            project_id: Project all requests are addressed to
            token_supplier: Source of bearer tokens
            transport: Optional RPC transport (defaults to a GrpcClient)
            index_excluded: Index exclusion policy (defaults to INDEX_EXCLUDED)
            config: Optional configuration (endpoint, limits)
        """
        self.project_id = project_id
        self.config = config or DatastoreConfig(project_id=project_id)
        self._token_supplier = token_supplier
        self._transport = transport or GrpcClient(
            self.config.address,
            secure=self.config.secure,
            max_message_size=self.config.max_message_size,
        )

        if index_excluded is not None:
            self.index_excluded = index_excluded
        elif config is not None and config.index_excluded_path:
            self.index_excluded = IndexExcluded.from_file(config.index_excluded_path)
        elif config is None:
            self.index_excluded = IndexExcluded.from_env()
        else:
            self.index_excluded = IndexExcluded.empty()

        self._connected = False

    @classmethod
    def from_env(cls) -> Client:
        """Create a client from environment variables.

        Uses a static token against an emulator, otherwise the service
        account file in GOOGLE_APPLICATION_CREDENTIALS, otherwise
        Application Default Credentials.
        """
        config = DatastoreConfig.from_env()

        token_supplier: TokenSupplier
        if config.emulator_host:
            token_supplier = StaticTokenSupplier()
        elif config.credentials_path:
            token_supplier = CredentialsTokenSupplier.from_service_account_file(
                config.credentials_path
            )
        else:
            token_supplier = CredentialsTokenSupplier.from_default()

        return cls(config.project_id, token_supplier=token_supplier, config=config)

    async def connect(self) -> None:
        """Connect to the service."""
        if self._connected:
            return

        try:
            await self._transport.connect()
            self._connected = True
        except Exception as e:
            raise ConnectionError(
                f"Failed to connect: {e}",
                address=self.config.address,
            ) from e

    async def close(self) -> None:
        """Close the connection."""
        if self._connected:
            await self._transport.close()
            self._connected = False

    async def __aenter__(self) -> Client:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # --- Reads ---

    async def get(self, key: Key, into: Any = Entity) -> Any:
        """Get a single entity by key.

        Args:
            key: Key to look up
            into: Entity, or a type to reconstruct the properties as

        Returns:
            The entity (or reconstructed value) if found, None otherwise
        """
        results = await self.get_all([key], into=into)
        return results[0] if results else None

    async def get_all(self, keys: Iterable[Key], into: Any = Entity) -> list[Any]:
        """Get many entities by key.

        Results follow the order of `keys`. Keys with no entity are omitted.
        """
        return await self._lookup(list(keys), into=into)

    async def query(self, query: Query) -> list[Entity]:
        """Run a query, following cursors until all results are read."""
        return await self._run_query(query)

    # --- Writes ---

    async def put(self, entity: Any) -> Optional[Key]:
        """Write one entity.

        Returns:
            The allocated key when the entity's key was incomplete, else None
        """
        keys = await self.put_all([entity])
        return keys[0] if keys else None

    async def put_all(self, entities: Iterable[Any]) -> list[Optional[Key]]:
        """Write entities in a single non-transactional commit.

        Entities whose key is new or incomplete are inserted, the rest upserted.

        Returns:
            One allocated key (or None) per entity, in input order
        """
        compiled = [
            compile_put(self.project_id, into_entity(entity), self.index_excluded)
            for entity in entities
        ]
        if not compiled:
            return []

        response = await self._commit([mutation for _, mutation in compiled])
        return mutation_keys(response, [kind for kind, _ in compiled])

    async def delete(self, key: Key) -> None:
        await self.delete_all([key])

    async def delete_all(self, keys: Iterable[Key]) -> None:
        """Delete entities in a single non-transactional commit."""
        compiled = [compile_delete(self.project_id, key) for key in keys]
        if not compiled:
            return

        await self._commit([mutation for _, mutation in compiled])

    # --- Transactions ---

    async def begin_transaction(
        self,
        mode: TransactionMode = TransactionMode.DEFAULT,
        previous_transaction: bytes | None = None,
    ) -> Transaction:
        """Begin a transaction.

        Args:
            mode: DEFAULT sends no options, READ_ONLY and READ_WRITE send
                the matching transaction options
            previous_transaction: Id of a failed read-write transaction being
                retried (READ_WRITE only)

        Returns:
            An active Transaction

        Example:
            >>> tx = await client.begin_transaction(TransactionMode.READ_WRITE)
            >>> await tx.put(Entity(Key("Task", 1), {"done": True}))
            >>> await tx.commit()
        """
        if previous_transaction is not None and mode is not TransactionMode.READ_WRITE:
            raise ValueError("previous_transaction requires TransactionMode.READ_WRITE")

        request = pb.BeginTransactionRequest(project_id=self.project_id)
        if mode is TransactionMode.READ_ONLY:
            request.transaction_options.read_only.SetInParent()
        elif mode is TransactionMode.READ_WRITE:
            request.transaction_options.read_write.SetInParent()
            if previous_transaction is not None:
                request.transaction_options.read_write.previous_transaction = (
                    previous_transaction
                )

        response = await self._transport.begin_transaction(request, await self._metadata())
        logger.debug(f"Began {mode.value} transaction {response.transaction.hex()}")
        return Transaction(self, response.transaction)

    # --- Internals shared with Transaction ---

    async def _metadata(self) -> list[tuple[str, str]]:
        token = await self._token_supplier.token()
        return [("authorization", f"Bearer {token}")]

    async def _lookup(
        self,
        keys: list[Key],
        *,
        into: Any = Entity,
        transaction: bytes | None = None,
    ) -> list[Any]:
        pending = [key_to_proto(self.project_id, key) for key in keys]
        found: dict[Key, Entity] = {}

        rounds = 0
        while pending:
            rounds += 1
            if rounds > self.config.max_rounds:
                raise RoundLimitExceededError(
                    f"Lookup still had {len(pending)} deferred keys after "
                    f"{self.config.max_rounds} rounds",
                    operation="lookup",
                    rounds=self.config.max_rounds,
                )

            request = pb.LookupRequest(project_id=self.project_id, keys=pending)
            if transaction is not None:
                request.read_options.CopyFrom(read_options(transaction))

            response = await self._transport.lookup(request, await self._metadata())
            for result in response.found:
                entity = entity_from_proto(result.entity)
                found[entity.key] = entity

            pending = list(response.deferred)
            logger.debug(
                f"Lookup round {rounds}: {len(response.found)} found, "
                f"{len(response.missing)} missing, {len(pending)} deferred"
            )

        results = []
        for key in keys:
            entity = found.pop(key, None)
            if entity is None:
                continue
            results.append(entity if into is Entity else entity.into(into))
        return results

    async def _run_query(
        self,
        query: Query,
        *,
        transaction: bytes | None = None,
    ) -> list[Entity]:
        compiled = compile_query(self.project_id, query)
        partition = pb.PartitionId(project_id=self.project_id)
        if query.partition:
            partition.namespace_id = query.partition
        options = read_options(transaction, query.is_eventual)

        entities: list[Entity] = []
        cursor = compiled.start_cursor
        rounds = 0
        while True:
            rounds += 1
            if rounds > self.config.max_rounds:
                raise RoundLimitExceededError(
                    f"Query on {query.kind} unfinished after {self.config.max_rounds} rounds",
                    operation="run_query",
                    rounds=self.config.max_rounds,
                )

            request = pb.RunQueryRequest(
                project_id=self.project_id,
                partition_id=partition,
                read_options=options,
                query=compiled,
            )
            request.query.start_cursor = cursor

            response = await self._transport.run_query(request, await self._metadata())
            batch = response.batch
            entities.extend(entity_from_proto(result.entity) for result in batch.entity_results)

            try:
                more_results = pb.MoreResultsType(batch.more_results)
            except ValueError as e:
                raise DecodeError(
                    f"Unknown more_results value {batch.more_results}",
                    field_name="more_results",
                ) from e

            logger.debug(
                f"Query on {query.kind} page {rounds}: "
                f"{len(batch.entity_results)} results, {more_results.name}"
            )

            if more_results != pb.MoreResultsType.NOT_FINISHED:
                return entities

            if batch.end_cursor == cursor:
                raise RoundLimitExceededError(
                    f"Query on {query.kind} reported unfinished results without "
                    "advancing its cursor",
                    operation="run_query",
                    rounds=rounds,
                )
            cursor = batch.end_cursor

    async def _commit(
        self,
        mutations: list[pb.Mutation],
        *,
        transaction: bytes | None = None,
    ) -> pb.CommitResponse:
        request = pb.CommitRequest(project_id=self.project_id, mutations=mutations)
        if transaction is not None:
            request.mode = pb.CommitMode.TRANSACTIONAL
            request.transaction = transaction
        else:
            request.mode = pb.CommitMode.NON_TRANSACTIONAL

        response = await self._transport.commit(request, await self._metadata())
        logger.debug(f"Committed {len(mutations)} mutations")
        return response

    async def _rollback(self, transaction: bytes) -> None:
        request = pb.RollbackRequest(project_id=self.project_id, transaction=transaction)
        await self._transport.rollback(request, await self._metadata())
        logger.debug(f"Rolled back transaction {transaction.hex()}")


