# mypy: ignore-errors
"""Datastore v1 wire messages for the SDK.

The message definitions come from google-cloud-datastore. Only the raw
protobuf classes are exposed here (unwrapped from their proto-plus
wrappers) so the rest of the SDK works with plain protobuf messages.

This module is internal to the SDK. Users should not import from here.
"""

from google.cloud.datastore_v1 import types as _types
from google.protobuf import struct_pb2, timestamp_pb2, wrappers_pb2
from google.type import latlng_pb2

# Entities
PartitionId = _types.PartitionId.pb()
Key = _types.Key.pb()
PathElement = _types.Key.PathElement.pb()
ArrayValue = _types.ArrayValue.pb()
Value = _types.Value.pb()
Entity = _types.Entity.pb()

# Queries
EntityResult = _types.EntityResult.pb()
Query = _types.Query.pb()
KindExpression = _types.KindExpression.pb()
PropertyReference = _types.PropertyReference.pb()
Projection = _types.Projection.pb()
PropertyOrder = _types.PropertyOrder.pb()
Filter = _types.Filter.pb()
CompositeFilter = _types.CompositeFilter.pb()
PropertyFilter = _types.PropertyFilter.pb()
QueryResultBatch = _types.QueryResultBatch.pb()

# Requests / responses
LookupRequest = _types.LookupRequest.pb()
LookupResponse = _types.LookupResponse.pb()
RunQueryRequest = _types.RunQueryRequest.pb()
RunQueryResponse = _types.RunQueryResponse.pb()
BeginTransactionRequest = _types.BeginTransactionRequest.pb()
BeginTransactionResponse = _types.BeginTransactionResponse.pb()
CommitRequest = _types.CommitRequest.pb()
CommitResponse = _types.CommitResponse.pb()
RollbackRequest = _types.RollbackRequest.pb()
RollbackResponse = _types.RollbackResponse.pb()
Mutation = _types.Mutation.pb()
MutationResult = _types.MutationResult.pb()
ReadOptions = _types.ReadOptions.pb()
TransactionOptions = _types.TransactionOptions.pb()
ReadWrite = _types.TransactionOptions.ReadWrite.pb()
ReadOnly = _types.TransactionOptions.ReadOnly.pb()

# Well-known types
Timestamp = timestamp_pb2.Timestamp
Int32Value = wrappers_pb2.Int32Value
LatLng = latlng_pb2.LatLng
NULL_VALUE = struct_pb2.NULL_VALUE

# Enums
PropertyFilterOperator = _types.PropertyFilter.Operator
CompositeFilterOperator = _types.CompositeFilter.Operator
PropertyOrderDirection = _types.PropertyOrder.Direction
ReadConsistency = _types.ReadOptions.ReadConsistency
CommitMode = _types.CommitRequest.Mode
MoreResultsType = _types.QueryResultBatch.MoreResultsType

_SERVICE = "/google.datastore.v1.Datastore"


class DatastoreStub:
    """Async client stub for the google.datastore.v1.Datastore service."""

    def __init__(self, channel):
        self.Lookup = channel.unary_unary(
            f"{_SERVICE}/Lookup",
            request_serializer=LookupRequest.SerializeToString,
            response_deserializer=LookupResponse.FromString,
        )
        self.RunQuery = channel.unary_unary(
            f"{_SERVICE}/RunQuery",
            request_serializer=RunQueryRequest.SerializeToString,
            response_deserializer=RunQueryResponse.FromString,
        )
        self.BeginTransaction = channel.unary_unary(
            f"{_SERVICE}/BeginTransaction",
            request_serializer=BeginTransactionRequest.SerializeToString,
            response_deserializer=BeginTransactionResponse.FromString,
        )
        self.Commit = channel.unary_unary(
            f"{_SERVICE}/Commit",
            request_serializer=CommitRequest.SerializeToString,
            response_deserializer=CommitResponse.FromString,
        )
        self.Rollback = channel.unary_unary(
            f"{_SERVICE}/Rollback",
            request_serializer=RollbackRequest.SerializeToString,
            response_deserializer=RollbackResponse.FromString,
        )


__all__ = [
    "PartitionId",
    "Key",
    "PathElement",
    "ArrayValue",
    "Value",
    "Entity",
    "EntityResult",
    "Query",
    "KindExpression",
    "PropertyReference",
    "Projection",
    "PropertyOrder",
    "Filter",
    "CompositeFilter",
    "PropertyFilter",
    "QueryResultBatch",
    "LookupRequest",
    "LookupResponse",
    "RunQueryRequest",
    "RunQueryResponse",
    "BeginTransactionRequest",
    "BeginTransactionResponse",
    "CommitRequest",
    "CommitResponse",
    "RollbackRequest",
    "RollbackResponse",
    "Mutation",
    "MutationResult",
    "ReadOptions",
    "TransactionOptions",
    "ReadWrite",
    "ReadOnly",
    "Timestamp",
    "Int32Value",
    "LatLng",
    "NULL_VALUE",
    "PropertyFilterOperator",
    "CompositeFilterOperator",
    "PropertyOrderDirection",
    "ReadConsistency",
    "CommitMode",
    "MoreResultsType",
    "DatastoreStub",
]
