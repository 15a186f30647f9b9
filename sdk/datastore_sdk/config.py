"""
Configuration for the Datastore SDK.

All configuration can be supplied via environment variables. This module
provides a typed configuration class with validation.

Environment variables:
    DATASTORE_PROJECT_ID / GOOGLE_CLOUD_PROJECT: Project to address
    DATASTORE_ENDPOINT: Service endpoint (host:port)
    DATASTORE_EMULATOR_HOST: Emulator address; enables an insecure channel
    GOOGLE_APPLICATION_CREDENTIALS: Service account key file
    INDEX_EXCLUDED: YAML file with index exclusions
    DATASTORE_MAX_ROUNDS: Upper bound on pagination / lookup rounds per call
    DATASTORE_MAX_MESSAGE_SIZE: gRPC message size limit in bytes

Invariants:
    - All settings have defaults suitable for the production endpoint
    - Credentials are never logged
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "datastore.googleapis.com:443"
DEFAULT_MAX_ROUNDS = 10_000
DEFAULT_MAX_MESSAGE_SIZE = 50 * 1024 * 1024  # 50MB


@dataclass(frozen=True)
class DatastoreConfig:
    """Client configuration.

    Attributes:
        project_id: Project the client is tied to
        endpoint: Service address (host:port) used with TLS
        emulator_host: Emulator address (host:port); used without TLS when set
        credentials_path: Service account JSON key file
        index_excluded_path: YAML index exclusion file
        max_rounds: Maximum pagination / deferred lookup rounds per call
        max_message_size: Maximum gRPC message size in bytes
    """

    project_id: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    emulator_host: Optional[str] = None
    credentials_path: Optional[str] = None
    index_excluded_path: Optional[str] = None
    max_rounds: int = DEFAULT_MAX_ROUNDS
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE

    def __post_init__(self) -> None:
        if self.max_rounds <= 0:
            raise ValueError(f"max_rounds must be positive, got {self.max_rounds}")
        if self.max_message_size <= 0:
            raise ValueError(f"max_message_size must be positive, got {self.max_message_size}")

    @property
    def address(self) -> str:
        """Address the channel connects to."""
        return self.emulator_host or self.endpoint

    @property
    def secure(self) -> bool:
        return self.emulator_host is None

    @classmethod
    def from_env(cls) -> DatastoreConfig:
        """Load configuration from environment variables."""
        project_id = os.getenv("DATASTORE_PROJECT_ID") or os.getenv("GOOGLE_CLOUD_PROJECT", "")
        if not project_id:
            logger.warning("No project configured (DATASTORE_PROJECT_ID / GOOGLE_CLOUD_PROJECT)")

        return cls(
            project_id=project_id,
            endpoint=os.getenv("DATASTORE_ENDPOINT", DEFAULT_ENDPOINT),
            emulator_host=os.getenv("DATASTORE_EMULATOR_HOST") or None,
            credentials_path=os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None,
            index_excluded_path=os.getenv("INDEX_EXCLUDED") or None,
            max_rounds=int(os.getenv("DATASTORE_MAX_ROUNDS", str(DEFAULT_MAX_ROUNDS))),
            max_message_size=int(
                os.getenv("DATASTORE_MAX_MESSAGE_SIZE", str(DEFAULT_MAX_MESSAGE_SIZE))
            ),
        )
