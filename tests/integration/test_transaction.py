"""
Integration tests for transactions against a scripted transport.

Tests cover:
- Reads scoped to the transaction
- Mutation staging and classification
- Commit results
- Terminal states and failed commits
"""

import grpc
import pytest
import pytest_asyncio

from sdk.datastore_sdk import _generated as pb
from sdk.datastore_sdk.client import TransactionMode
from sdk.datastore_sdk.entity import Entity
from sdk.datastore_sdk.errors import TransactionError
from sdk.datastore_sdk.key import Key
from sdk.datastore_sdk.query import Query
from sdk.datastore_sdk.transaction import TransactionState

TX_ID = b"\x01tx"


def sent(rpc):
    """Requests passed to a mocked RPC, in call order."""
    return [call.args[0] for call in rpc.call_args_list]


class CommitAborted(grpc.RpcError):
    pass


@pytest_asyncio.fixture
async def tx(client, transport, wire):
    """An active transaction."""
    transport.begin_transaction.side_effect = [wire.begin(TX_ID)]
    return await client.begin_transaction()


class TestTransactionReads:
    """Tests for reads inside a transaction."""

    @pytest.mark.asyncio
    async def test_get_uses_transaction(self, tx, transport, wire):
        key = Key("users", "ada")
        transport.lookup.side_effect = [wire.lookup(found=[(key, {"age": 36})])]

        entity = await tx.get(key)

        assert entity.key == key
        assert sent(transport.lookup)[0].read_options.transaction == TX_ID
        assert tx.pending_mutations == 0

    @pytest.mark.asyncio
    async def test_query_uses_transaction(self, tx, transport, wire):
        transport.run_query.side_effect = [
            wire.page([(Key("users", 1), {})], pb.MoreResultsType.NO_MORE_RESULTS)
        ]

        entities = await tx.query(Query("users").eventually_consistent())

        assert len(entities) == 1
        options = sent(transport.run_query)[0].read_options
        assert options.WhichOneof("consistency_type") == "transaction"
        assert options.transaction == TX_ID


class TestTransactionWrites:
    """Tests for staging and committing mutations."""

    @pytest.mark.asyncio
    async def test_staging_sends_nothing(self, tx, transport):
        await tx.put(Entity(Key("users", "ada"), {"age": 36}))
        await tx.delete(Key("users", "bob"))

        assert tx.pending_mutations == 2
        transport.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_classification(self, tx, transport, wire):
        """Deleted keys delete, new or incomplete keys insert, others upsert."""
        await tx.put_all(
            [
                Entity(Key("users", "gone").mark_delete(), {}),
                Entity(Key("users"), {}),
                Entity(Key("users", "fresh").mark_new(), {}),
                Entity(Key("users", "ada"), {"age": 37}),
            ]
        )
        await tx.delete(Key("users", "bob"))
        transport.commit.side_effect = [
            wire.commit([None, Key("users", 99), None, None, None])
        ]

        keys = await tx.commit()

        request = sent(transport.commit)[0]
        assert request.mode == pb.CommitMode.TRANSACTIONAL
        assert request.transaction == TX_ID
        assert [m.WhichOneof("operation") for m in request.mutations] == [
            "delete",
            "insert",
            "insert",
            "upsert",
            "delete",
        ]
        # Deletes contribute no key
        assert keys == [Key("users", 99), None, None]
        assert tx.state is TransactionState.COMMITTED

    @pytest.mark.asyncio
    async def test_empty_commit(self, tx, transport, wire):
        transport.commit.side_effect = [wire.commit([])]

        assert await tx.commit() == []
        assert list(sent(transport.commit)[0].mutations) == []

    @pytest.mark.asyncio
    async def test_rollback(self, tx, transport):
        await tx.put(Entity(Key("users", "ada"), {}))

        await tx.rollback()

        assert sent(transport.rollback)[0].transaction == TX_ID
        assert tx.state is TransactionState.ROLLED_BACK
        assert tx.pending_mutations == 0
        transport.commit.assert_not_called()


class TestTransactionLifecycle:
    """Tests for terminal states."""

    @pytest.mark.parametrize(
        "operation",
        [
            lambda tx: tx.get(Key("users", 1)),
            lambda tx: tx.get_all([Key("users", 1)]),
            lambda tx: tx.query(Query("users")),
            lambda tx: tx.put(Entity(Key("users", 1), {})),
            lambda tx: tx.put_all([]),
            lambda tx: tx.delete(Key("users", 1)),
            lambda tx: tx.delete_all([]),
            lambda tx: tx.commit(),
            lambda tx: tx.rollback(),
        ],
    )
    @pytest.mark.asyncio
    async def test_operations_after_commit(self, tx, transport, wire, operation):
        transport.commit.side_effect = [wire.commit([])]
        await tx.commit()

        with pytest.raises(TransactionError) as exc:
            await operation(tx)

        assert exc.value.state == "committed"
        assert exc.value.transaction_id == TX_ID

    @pytest.mark.asyncio
    async def test_operations_after_rollback(self, tx, transport):
        await tx.rollback()

        with pytest.raises(TransactionError):
            await tx.put(Entity(Key("users", 1), {}))
        with pytest.raises(TransactionError):
            await tx.commit()
        with pytest.raises(TransactionError):
            await tx.rollback()

    @pytest.mark.asyncio
    async def test_failed_commit_stays_active(self, tx, transport):
        """A failed commit can still be rolled back."""
        await tx.put(Entity(Key("users", "ada"), {}))
        transport.commit.side_effect = CommitAborted()

        with pytest.raises(CommitAborted):
            await tx.commit()

        assert tx.state is TransactionState.ACTIVE
        await tx.rollback()
        assert tx.state is TransactionState.ROLLED_BACK

    @pytest.mark.asyncio
    async def test_retry_with_previous_transaction(self, client, tx, transport, wire):
        transport.begin_transaction.side_effect = [wire.begin(b"retry")]

        retry = await client.begin_transaction(
            TransactionMode.READ_WRITE, previous_transaction=tx.id
        )

        assert retry.id == b"retry"
        options = sent(transport.begin_transaction)[-1].transaction_options
        assert options.read_write.previous_transaction == TX_ID
