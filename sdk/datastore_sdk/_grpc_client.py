"""
Internal gRPC transport for the Datastore SDK.

This module provides the low-level gRPC communication layer.
It is internal to the SDK and should not be used directly by users.

Users should use Client instead, which compiles requests and attaches
authorization metadata before calling into this transport.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import grpc
from grpc import aio as grpc_aio

from . import _generated as pb

logger = logging.getLogger(__name__)

Metadata = Sequence[tuple[str, str]]


class GrpcClient:
    """Internal gRPC transport for the Datastore service.

    This class owns the channel and stub and exposes one coroutine per RPC.
    Responses and grpc.RpcError exceptions are passed through untouched.

    This is an internal class - users should use Client instead.
    """

    def __init__(
        self,
        address: str,
        *,
        secure: bool = True,
        credentials: grpc.ChannelCredentials | None = None,
        max_message_size: int = 50 * 1024 * 1024,
    ) -> None:
        """Initialize the gRPC transport.

        Args:
            address: Server address (host:port)
            secure: Whether to use TLS
            credentials: Optional TLS credentials
            max_message_size: Maximum send/receive message size in bytes
        """
        self._address = address
        self._secure = secure
        self._credentials = credentials
        self._max_message_size = max_message_size
        self._channel: grpc_aio.Channel | None = None
        self._stub: pb.DatastoreStub | None = None

    @property
    def address(self) -> str:
        return self._address

    async def connect(self) -> None:
        """Open the channel."""
        if self._channel is not None:
            return

        options = [
            ("grpc.max_send_message_length", self._max_message_size),
            ("grpc.max_receive_message_length", self._max_message_size),
        ]

        if self._secure:
            self._channel = grpc_aio.secure_channel(
                self._address,
                self._credentials or grpc.ssl_channel_credentials(),
                options=options,
            )
        else:
            self._channel = grpc_aio.insecure_channel(self._address, options=options)

        self._stub = pb.DatastoreStub(self._channel)
        logger.debug(f"Connected to Datastore at {self._address}")

    async def close(self) -> None:
        """Close the channel."""
        if self._channel:
            await self._channel.close()
            self._channel = None
            self._stub = None
            logger.debug("Disconnected from Datastore")

    async def __aenter__(self) -> GrpcClient:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_connected(self) -> pb.DatastoreStub:
        """Ensure we're connected and return the stub."""
        if self._stub is None:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._stub

    async def lookup(self, request: pb.LookupRequest, metadata: Metadata) -> pb.LookupResponse:
        stub = self._ensure_connected()
        return await stub.Lookup(request, metadata=metadata)

    async def run_query(self, request: pb.RunQueryRequest, metadata: Metadata) -> pb.RunQueryResponse:
        stub = self._ensure_connected()
        return await stub.RunQuery(request, metadata=metadata)

    async def begin_transaction(
        self,
        request: pb.BeginTransactionRequest,
        metadata: Metadata,
    ) -> pb.BeginTransactionResponse:
        stub = self._ensure_connected()
        return await stub.BeginTransaction(request, metadata=metadata)

    async def commit(self, request: pb.CommitRequest, metadata: Metadata) -> pb.CommitResponse:
        stub = self._ensure_connected()
        return await stub.Commit(request, metadata=metadata)

    async def rollback(self, request: pb.RollbackRequest, metadata: Metadata) -> pb.RollbackResponse:
        stub = self._ensure_connected()
        return await stub.Rollback(request, metadata=metadata)
