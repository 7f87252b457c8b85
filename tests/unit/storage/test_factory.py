"""Tests for StorageBackendFactory."""

from pathlib import Path

from migledger.config.models import Config, DynamoDBConfig, StorageConfig
from migledger.storage.dynamodb_store import DynamoDBStore
from migledger.storage.factory import StorageBackendFactory
from migledger.storage.sqlite_store import SQLiteStore


class TestStorageBackendFactory:
    """Tests for backend selection."""

    def test_default_backend_is_dynamodb(self) -> None:
        factory = StorageBackendFactory(Config())
        assert factory.backend == "dynamodb"
        assert isinstance(factory.create_store(), DynamoDBStore)

    def test_sqlite_backend(self, tmp_path: Path) -> None:
        config = Config(
            storage=StorageConfig(
                backend="sqlite",
                sqlite_path=tmp_path / "ledger.db",
                sqlite_busy_timeout_seconds=2.0,
            )
        )
        store = StorageBackendFactory(config).create_store()
        assert isinstance(store, SQLiteStore)
        assert store.db_path == (tmp_path / "ledger.db").resolve()
        assert store.busy_timeout_seconds == 2.0

    def test_dynamodb_store_gets_dynamodb_section(self) -> None:
        config = Config(dynamodb=DynamoDBConfig(region="us-east-1"))
        store = StorageBackendFactory(config).create_store()
        assert store._config.region == "us-east-1"
