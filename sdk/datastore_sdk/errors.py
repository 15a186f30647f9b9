"""
Error types for the Datastore SDK.

This module defines all exception types raised by the SDK:
- DatastoreError: Base exception
- ConvertError: Value conversion failures
  - MissingPropertyError: Required record property absent
  - UnexpectedPropertyTypeError: Value variant does not match the target
- DecodeError: Unrecognized shape or enumerated value from the backend
- AuthorizationError: Token supplier failure
- ConnectionError: Server connection issues
- TransactionError: Operation on a finished transaction
- RoundLimitExceededError: Continuation loop that never terminates

Backend status errors (grpc.RpcError) are not wrapped and reach the caller
as raised by the transport.

Invariants:
    - All errors inherit from DatastoreError
    - Errors include context for debugging
    - Conversion errors carry static type-name labels
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class DatastoreError(Exception):
    """Base exception for all Datastore SDK errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "DATASTORE_ERROR"
        self.details = details or {}


class ConvertError(DatastoreError):
    """Base class for failures reconstructing native values from a Value."""


class MissingPropertyError(ConvertError):
    """An expected record property was missing.

    Includes suggestions for similarly named properties that were present,
    which usually points at a casing mismatch.

    Attributes:
        property_name: The wire name that was looked up
        suggestions: Similar property names found in the record
    """

    def __init__(
        self,
        property_name: str,
        suggestions: Optional[List[str]] = None,
    ) -> None:
        suggestions = suggestions or []
        msg = f"expected property `{property_name}` was missing"
        if suggestions:
            msg += f". Did you mean: {', '.join(suggestions)}?"

        super().__init__(
            msg,
            code="MISSING_PROPERTY",
            details={
                "property_name": property_name,
                "suggestions": suggestions,
            },
        )
        self.property_name = property_name
        self.suggestions = suggestions


class UnexpectedPropertyTypeError(ConvertError):
    """A value had a different variant than the one expected.

    Attributes:
        expected: Type name of the expected variant (e.g. "integer")
        got: Type name of the encountered variant (e.g. "string")
    """

    def __init__(self, expected: str, got: str) -> None:
        super().__init__(
            f"expected property type `{expected}`, got `{got}`",
            code="UNEXPECTED_PROPERTY_TYPE",
            details={"expected": expected, "got": got},
        )
        self.expected = expected
        self.got = got


class DecodeError(DatastoreError):
    """A wire message had a shape or enumerated value this SDK does not know.

    Raised when:
    - A value has no recognized variant set
    - A query batch reports an unknown more-results state
    - An enum property holds an unknown variant name
    - A commit response does not line up with the sent mutations
    """

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="DECODE_ERROR",
            details={"field": field_name},
        )
        self.field_name = field_name


class AuthorizationError(DatastoreError):
    """The token supplier could not produce a bearer token."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="AUTHORIZATION_ERROR")


class ConnectionError(DatastoreError):
    """Failed to connect to the Datastore service.

    Raised when:
    - Server is unreachable
    - Channel could not be created
    """

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="CONNECTION_ERROR",
            details={"address": address},
        )
        self.address = address


class TransactionError(DatastoreError):
    """Transaction used outside its valid lifetime.

    Raised when:
    - put/get/query/commit/rollback is called after commit
    - put/get/query/commit/rollback is called after rollback
    """

    def __init__(
        self,
        message: str,
        transaction_id: Optional[bytes] = None,
        state: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="TRANSACTION_ERROR",
            details={
                "transaction_id": transaction_id.hex() if transaction_id else None,
                "state": state,
            },
        )
        self.transaction_id = transaction_id
        self.state = state


class RoundLimitExceededError(DatastoreError):
    """A multi-round protocol exchange did not terminate.

    Raised when a query keeps reporting unfinished results without moving its
    cursor, or a lookup or query exceeds the configured number of rounds.
    """

    def __init__(self, message: str, operation: str, rounds: int) -> None:
        super().__init__(
            message,
            code="ROUND_LIMIT_EXCEEDED",
            details={"operation": operation, "rounds": rounds},
        )
        self.operation = operation
        self.rounds = rounds
