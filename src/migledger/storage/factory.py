"""Storage backend factory.

Instantiates the KeyValueStorePort implementation selected by
config.storage.backend.
"""

from typing import Any

from migledger.config.models import Config


class StorageBackendFactory:
    """Factory for creating store instances.

    Reads config.storage.backend and returns the matching adapter. The
    returned store still needs ``await store.initialize()``.
    """

    def __init__(self, config: Config) -> None:
        self._config = config

    @property
    def backend(self) -> str:
        """Return the configured backend name."""
        return self._config.storage.backend

    def create_store(self) -> Any:
        """Create the key-value store implementation.

        Returns:
            An object implementing KeyValueStorePort.
        """
        if self.backend == "sqlite":
            from migledger.storage.sqlite_store import SQLiteStore

            return SQLiteStore(
                self._config.storage.sqlite_path,
                busy_timeout_seconds=self._config.storage.sqlite_busy_timeout_seconds,
            )
        else:
            from migledger.storage.dynamodb_store import DynamoDBStore

            return DynamoDBStore(self._config.dynamodb)
