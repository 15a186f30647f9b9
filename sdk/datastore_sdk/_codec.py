"""
Conversion between SDK types and Datastore v1 wire messages.

This module is internal to the SDK. It compiles keys, values, entities and
queries into protobuf messages and decodes responses back.

Invariants:
    - Key paths are emitted root ancestor first
    - A single namespace (the key's own) covers the whole path
    - exclude_from_indexes is never set on an array itself, only on its elements
    - Unknown wire shapes raise DecodeError
"""

from __future__ import annotations

from typing import Optional

from . import _generated as pb
from .errors import DecodeError
from .entity import Entity
from .index_excluded import IndexExcluded
from .key import Key
from .query import KEY_PROPERTY, Direction, FilterOperator, Query
from .value import (
    ArrayValue,
    BlobValue,
    BooleanValue,
    DoubleValue,
    EntityValue,
    GeoPointValue,
    IntegerValue,
    KeyValue,
    OptionValue,
    StringValue,
    TimestampValue,
    Value,
)

_OPERATORS = {
    FilterOperator.EQUAL: pb.PropertyFilterOperator.EQUAL,
    FilterOperator.NOT_EQUAL: pb.PropertyFilterOperator.NOT_EQUAL,
    FilterOperator.LESS_THAN: pb.PropertyFilterOperator.LESS_THAN,
    FilterOperator.LESS_THAN_OR_EQUAL: pb.PropertyFilterOperator.LESS_THAN_OR_EQUAL,
    FilterOperator.GREATER_THAN: pb.PropertyFilterOperator.GREATER_THAN,
    FilterOperator.GREATER_THAN_OR_EQUAL: pb.PropertyFilterOperator.GREATER_THAN_OR_EQUAL,
    FilterOperator.IN: pb.PropertyFilterOperator.IN,
    FilterOperator.NOT_IN: pb.PropertyFilterOperator.NOT_IN,
    FilterOperator.HAS_ANCESTOR: pb.PropertyFilterOperator.HAS_ANCESTOR,
}

_DIRECTIONS = {
    Direction.ASCENDING: pb.PropertyOrderDirection.ASCENDING,
    Direction.DESCENDING: pb.PropertyOrderDirection.DESCENDING,
}


# --- Keys ---


def key_to_proto(project_id: str, key: Key) -> pb.Key:
    """Encode a key as a root-first path in the key's partition."""
    key_pb = pb.Key()
    key_pb.partition_id.project_id = project_id
    if key.namespace:
        key_pb.partition_id.namespace_id = key.namespace

    for segment in key.path():
        element = key_pb.path.add()
        element.kind = segment.kind
        if isinstance(segment.id, int):
            element.id = segment.id
        elif isinstance(segment.id, str):
            element.name = segment.id

    return key_pb


def key_from_proto(key_pb: pb.Key) -> Key:
    """Decode a wire key, folding path elements into a parent chain."""
    namespace = key_pb.partition_id.namespace_id or None

    key: Optional[Key] = None
    for element in key_pb.path:
        if not element.kind:
            raise DecodeError("Key path element has no kind", field_name="kind")
        id_type = element.WhichOneof("id_type")
        if id_type is None:
            key_id = None
        elif id_type == "id":
            key_id = element.id
        elif id_type == "name":
            key_id = element.name
        else:
            raise DecodeError(f"Unknown key id type '{id_type}'", field_name="id_type")
        key = Key(element.kind, key_id, parent=key, namespace=namespace)

    if key is None:
        raise DecodeError("Key has an empty path", field_name="path")
    return key


# --- Values ---


def value_to_proto(project_id: str, value: Value, exclude_from_indexes: bool = False) -> pb.Value:
    """Encode a value, flagging it (and nested values) as excluded if asked."""
    if isinstance(value, OptionValue) and value.inner is not None:
        return value_to_proto(project_id, value.inner, exclude_from_indexes)

    value_pb = pb.Value()
    if isinstance(value, OptionValue):
        value_pb.null_value = pb.NULL_VALUE
    elif isinstance(value, BooleanValue):
        value_pb.boolean_value = value.value
    elif isinstance(value, IntegerValue):
        value_pb.integer_value = value.value
    elif isinstance(value, DoubleValue):
        value_pb.double_value = value.value
    elif isinstance(value, TimestampValue):
        value_pb.timestamp_value.SetInParent()
        value_pb.timestamp_value.FromDatetime(value.value)
    elif isinstance(value, KeyValue):
        value_pb.key_value.CopyFrom(key_to_proto(project_id, value.value))
    elif isinstance(value, StringValue):
        value_pb.string_value = value.value
    elif isinstance(value, BlobValue):
        value_pb.blob_value = value.value
    elif isinstance(value, GeoPointValue):
        value_pb.geo_point_value.SetInParent()
        value_pb.geo_point_value.latitude = value.latitude
        value_pb.geo_point_value.longitude = value.longitude
    elif isinstance(value, EntityValue):
        value_pb.entity_value.SetInParent()
        for name, item in value.properties.items():
            value_pb.entity_value.properties[name].CopyFrom(
                value_to_proto(project_id, item, exclude_from_indexes)
            )
    elif isinstance(value, ArrayValue):
        value_pb.array_value.SetInParent()
        value_pb.array_value.values.extend(
            value_to_proto(project_id, item, exclude_from_indexes) for item in value.values
        )
        return value_pb
    else:
        raise TypeError(f"Cannot encode {type(value).__name__}")

    if exclude_from_indexes:
        value_pb.exclude_from_indexes = True
    return value_pb


def value_from_proto(value_pb: pb.Value) -> Value:
    """Decode a wire value."""
    kind = value_pb.WhichOneof("value_type")
    if kind == "null_value":
        return OptionValue(None)
    if kind == "boolean_value":
        return BooleanValue(value_pb.boolean_value)
    if kind == "integer_value":
        return IntegerValue(value_pb.integer_value)
    if kind == "double_value":
        return DoubleValue(value_pb.double_value)
    if kind == "timestamp_value":
        return TimestampValue(value_pb.timestamp_value.ToDatetime())
    if kind == "key_value":
        return KeyValue(key_from_proto(value_pb.key_value))
    if kind == "string_value":
        return StringValue(value_pb.string_value)
    if kind == "blob_value":
        return BlobValue(bytes(value_pb.blob_value))
    if kind == "geo_point_value":
        return GeoPointValue(value_pb.geo_point_value.latitude, value_pb.geo_point_value.longitude)
    if kind == "entity_value":
        return EntityValue(
            {name: value_from_proto(item) for name, item in value_pb.entity_value.properties.items()}
        )
    if kind == "array_value":
        return ArrayValue([value_from_proto(item) for item in value_pb.array_value.values])
    raise DecodeError(f"Unknown value type '{kind}'", field_name="value_type")


# --- Entities ---


def entity_to_proto(project_id: str, entity: Entity, index_excluded: IndexExcluded) -> pb.Entity:
    """Encode an entity, applying the index exclusion policy per property."""
    entity_pb = pb.Entity()
    entity_pb.key.CopyFrom(key_to_proto(project_id, entity.key))

    kind = entity.key.kind
    for name, value in entity.properties.properties.items():
        excluded = index_excluded.is_excluded(kind, name)
        entity_pb.properties[name].CopyFrom(value_to_proto(project_id, value, excluded))

    return entity_pb


def entity_from_proto(entity_pb: pb.Entity) -> Entity:
    if not entity_pb.HasField("key"):
        raise DecodeError("Entity result without a key", field_name="key")
    properties = {name: value_from_proto(item) for name, item in entity_pb.properties.items()}
    return Entity(key_from_proto(entity_pb.key), EntityValue(properties))


# --- Queries ---


def compile_query(project_id: str, query: Query) -> pb.Query:
    """Compile a Query into its wire form.

    The start cursor is the query's resume cursor, or empty.
    """
    query_pb = pb.Query()
    query_pb.kind.add().name = query.kind

    projections = query.projections
    if not projections and query.is_keys_only:
        projections = (KEY_PROPERTY,)
    for name in projections:
        query_pb.projection.add().property.name = name

    if query.filters:
        composite = query_pb.filter.composite_filter
        composite.op = pb.CompositeFilterOperator.AND
        for f in query.filters:
            property_filter = composite.filters.add().property_filter
            property_filter.property.name = f.property_name
            property_filter.op = _OPERATORS[f.operator]
            property_filter.value.CopyFrom(value_to_proto(project_id, f.value))

    for order in query.ordering:
        order_pb = query_pb.order.add()
        order_pb.property.name = order.property_name
        order_pb.direction = _DIRECTIONS[order.direction]

    query_pb.offset = query.skip
    if query.max_results is not None:
        query_pb.limit.SetInParent()
        query_pb.limit.value = query.max_results

    query_pb.start_cursor = query.start_cursor or b""

    for name in query.distinct_properties:
        query_pb.distinct_on.add().name = name

    return query_pb


def read_options(
    transaction: Optional[bytes] = None,
    eventual: bool = False,
) -> pb.ReadOptions:
    """Read options scoped to a transaction, or a consistency level."""
    if transaction is not None:
        return pb.ReadOptions(transaction=transaction)
    if eventual:
        return pb.ReadOptions(read_consistency=pb.ReadConsistency.EVENTUAL)
    return pb.ReadOptions(read_consistency=pb.ReadConsistency.STRONG)
