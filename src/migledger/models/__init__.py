"""Domain models for migledger."""

from migledger.models.records import LockRecord, MigrationRecord

__all__ = [
    "LockRecord",
    "MigrationRecord",
]
