"""
Datastore Python SDK - asyncio client library for Cloud Datastore.

This SDK provides a typed interface to the Datastore v1 gRPC service:
- Value model (Value variants, into_value / from_value conversion)
- Record derivation for dataclasses and enums (@record, @enum_value)
- Keys, entities and queries
- Client for reads, writes and paginated queries
- Transaction for atomic read-modify-write

Example:
    >>> from dataclasses import dataclass
    >>> from datastore_sdk import Client, Entity, Filter, Key, Query, record
    >>>
    >>> @record
    ... @dataclass
    ... class User:
    ...     display_name: str
    ...     age: int
    >>>
    >>> async with Client.from_env() as client:
    ...     await client.put(Entity(Key("users", "ada"), User("Ada", 36)))
    ...     ada = await client.get(Key("users", "ada"), into=User)
    ...     teens = await client.query(Query("users").filter(Filter.equal("age", 13)))

Invariants:
    - Every request is authorized with a bearer token
    - Reads follow deferred keys and query cursors to completion
    - Writes are atomic per commit

Version: 1.0.0
"""

__version__ = "1.0.0"

from .auth import CredentialsTokenSupplier, StaticTokenSupplier, TokenSupplier
from .casing import Casing
from .client import Client, TransactionMode
from .config import DatastoreConfig
from .entity import Entity
from .errors import (
    AuthorizationError,
    ConnectionError,
    ConvertError,
    DatastoreError,
    DecodeError,
    MissingPropertyError,
    RoundLimitExceededError,
    TransactionError,
    UnexpectedPropertyTypeError,
)
from .index_excluded import IndexExcluded
from .key import Key, KeyID
from .mutation import MutationKind
from .query import Direction, Filter, FilterOperator, Order, Query
from .record import enum_value, record, renamed
from .transaction import Transaction, TransactionState
from .value import (
    ArrayValue,
    BlobValue,
    BooleanValue,
    DoubleValue,
    EntityValue,
    GeoPoint,
    GeoPointValue,
    IntegerValue,
    KeyValue,
    OptionValue,
    StringValue,
    TimestampValue,
    Value,
    from_value,
    into_value,
)

__all__ = [
    # Version
    "__version__",
    # Values
    "Value",
    "OptionValue",
    "BooleanValue",
    "IntegerValue",
    "DoubleValue",
    "TimestampValue",
    "KeyValue",
    "StringValue",
    "BlobValue",
    "GeoPointValue",
    "EntityValue",
    "ArrayValue",
    "GeoPoint",
    "into_value",
    "from_value",
    # Records
    "Casing",
    "record",
    "enum_value",
    "renamed",
    # Keys, entities, queries
    "Key",
    "KeyID",
    "Entity",
    "IndexExcluded",
    "Query",
    "Filter",
    "FilterOperator",
    "Order",
    "Direction",
    # Client
    "Client",
    "DatastoreConfig",
    "Transaction",
    "TransactionMode",
    "TransactionState",
    "MutationKind",
    # Auth
    "TokenSupplier",
    "CredentialsTokenSupplier",
    "StaticTokenSupplier",
    # Errors
    "DatastoreError",
    "ConvertError",
    "MissingPropertyError",
    "UnexpectedPropertyTypeError",
    "DecodeError",
    "AuthorizationError",
    "ConnectionError",
    "TransactionError",
    "RoundLimitExceededError",
]
