"""
Bearer token suppliers for the Datastore SDK.

Every request carries an OAuth2 bearer token. A token supplier hands out
the current token, refreshing it when the cached one is missing or expired.

- TokenSupplier: protocol implemented by all suppliers
- CredentialsTokenSupplier: google-auth credentials (service account / ADC)
- StaticTokenSupplier: fixed token, for emulators and tests

Invariants:
    - At most one refresh is in flight per supplier
    - Callers that see a valid cached token never wait on the lock
    - Refresh failures surface as AuthorizationError
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol, Sequence, runtime_checkable

import google.auth
import google.auth.exceptions
import google.auth.transport.requests
from google.oauth2 import service_account

from .errors import AuthorizationError

logger = logging.getLogger(__name__)

SCOPES = (
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/datastore",
)


@runtime_checkable
class TokenSupplier(Protocol):
    """Source of bearer tokens."""

    async def token(self) -> str:
        """Return a currently valid access token (without the "Bearer " prefix)."""
        ...


class StaticTokenSupplier:
    """Supplier that always returns the same token."""

    def __init__(self, token: str = "owner") -> None:
        self._token = token

    async def token(self) -> str:
        return self._token


class CredentialsTokenSupplier:
    """Supplier backed by google-auth credentials.

    Example:
        >>> supplier = CredentialsTokenSupplier.from_service_account_file("key.json")
        >>> token = await supplier.token()
    """

    def __init__(self, credentials: Any, request: Any = None) -> None:
        """Initialize the supplier.

        Args:
            credentials: google.auth.credentials.Credentials instance
            request: Transport request used to refresh (defaults to requests)
        """
        self._credentials = credentials
        self._request = request or google.auth.transport.requests.Request()
        self._lock = asyncio.Lock()

    @classmethod
    def from_service_account_file(
        cls,
        path: str,
        scopes: Sequence[str] = SCOPES,
    ) -> CredentialsTokenSupplier:
        """Load service account credentials from a JSON key file."""
        try:
            credentials = service_account.Credentials.from_service_account_file(
                path, scopes=list(scopes)
            )
        except (OSError, ValueError) as e:
            raise AuthorizationError(f"Failed to load credentials from {path}: {e}") from e
        return cls(credentials)

    @classmethod
    def from_default(cls, scopes: Sequence[str] = SCOPES) -> CredentialsTokenSupplier:
        """Use Application Default Credentials."""
        try:
            credentials, _ = google.auth.default(scopes=list(scopes))
        except google.auth.exceptions.GoogleAuthError as e:
            raise AuthorizationError(f"No default credentials available: {e}") from e
        return cls(credentials)

    async def token(self) -> str:
        if self._credentials.valid:
            return self._credentials.token

        async with self._lock:
            # Another caller may have refreshed while we waited
            if not self._credentials.valid:
                logger.debug("Refreshing access token")
                try:
                    await asyncio.to_thread(self._credentials.refresh, self._request)
                except google.auth.exceptions.GoogleAuthError as e:
                    raise AuthorizationError(f"Failed to refresh access token: {e}") from e
            return self._credentials.token
