"""
Fixtures for client integration tests.

The client runs against an AsyncMock transport scripted with real
Datastore v1 response messages, so requests can be inspected exactly as
they would be sent over the wire.
"""

from unittest.mock import AsyncMock

import pytest

from sdk.datastore_sdk import _generated as pb
from sdk.datastore_sdk._codec import entity_to_proto, key_to_proto
from sdk.datastore_sdk.auth import StaticTokenSupplier
from sdk.datastore_sdk.client import Client
from sdk.datastore_sdk.config import DatastoreConfig
from sdk.datastore_sdk.entity import Entity
from sdk.datastore_sdk.index_excluded import IndexExcluded

PROJECT = "test-project"
TOKEN = "test-token"


class Wire:
    """Builders for scripted backend responses."""

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id

    def entity(self, key, properties=None):
        return entity_to_proto(self.project_id, Entity(key, properties or {}), IndexExcluded.empty())

    def lookup(self, found=(), missing=(), deferred=()):
        response = pb.LookupResponse()
        for key, properties in found:
            response.found.add().entity.CopyFrom(self.entity(key, properties))
        for key in missing:
            response.missing.add().entity.CopyFrom(self.entity(key))
        response.deferred.extend(key_to_proto(self.project_id, key) for key in deferred)
        return response

    def page(self, entities, more_results, end_cursor=b""):
        response = pb.RunQueryResponse()
        batch = response.batch
        for key, properties in entities:
            batch.entity_results.add().entity.CopyFrom(self.entity(key, properties))
        batch.more_results = more_results
        batch.end_cursor = end_cursor
        return response

    def commit(self, keys=()):
        """Commit response with one result per entry; None means no allocated key."""
        response = pb.CommitResponse()
        for key in keys:
            result = response.mutation_results.add()
            if key is not None:
                result.key.CopyFrom(key_to_proto(self.project_id, key))
        return response

    def begin(self, transaction_id):
        return pb.BeginTransactionResponse(transaction=transaction_id)


@pytest.fixture
def wire():
    return Wire(PROJECT)


@pytest.fixture
def transport():
    """Transport whose RPCs are AsyncMocks; tests script side effects."""
    transport = AsyncMock()
    transport.rollback = AsyncMock(return_value=pb.RollbackResponse())
    return transport


@pytest.fixture
def client(transport):
    return Client(
        PROJECT,
        token_supplier=StaticTokenSupplier(TOKEN),
        transport=transport,
        index_excluded=IndexExcluded({"users": {"bio": True}}),
        config=DatastoreConfig(project_id=PROJECT, max_rounds=20),
    )
