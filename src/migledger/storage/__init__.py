"""
Storage layer for migledger.

This module provides the key-value store adapters:
- DynamoDBStore: Amazon DynamoDB through boto3
- SQLiteStore: a local SQLite file through aiosqlite

The storage layer follows an async-first design for all I/O operations.
"""

from migledger.storage.dynamodb_store import DynamoDBStore
from migledger.storage.factory import StorageBackendFactory
from migledger.storage.sqlite_store import SQLiteStore

__all__ = [
    "DynamoDBStore",
    "SQLiteStore",
    "StorageBackendFactory",
]
