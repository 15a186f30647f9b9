"""
Unit tests for the internal gRPC transport.

Tests cover:
- Channel lifecycle
- Calls before connecting
"""

import pytest

from sdk.datastore_sdk import _generated as pb
from sdk.datastore_sdk._grpc_client import GrpcClient


class TestGrpcClient:
    """Tests for GrpcClient."""

    @pytest.mark.asyncio
    async def test_call_before_connect(self):
        transport = GrpcClient("localhost:8081", secure=False)

        with pytest.raises(RuntimeError, match="Not connected"):
            await transport.lookup(pb.LookupRequest(), [])

    @pytest.mark.asyncio
    async def test_connect_and_close(self):
        """Channels are created lazily and torn down on close."""
        transport = GrpcClient("localhost:8081", secure=False)

        async with transport:
            assert transport._stub is not None
            await transport.connect()

        assert transport._channel is None
        assert transport._stub is None

    def test_address(self):
        assert GrpcClient("datastore.googleapis.com:443").address == "datastore.googleapis.com:443"
