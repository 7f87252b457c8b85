"""Migration ledger and distributed lock over a conditional-write key-value store."""

__version__ = "0.1.0"

from migledger.errors import (
    DirtyStateError,
    MigLedgerError,
    MigrationAlreadyExistsError,
    MigrationNotFoundError,
    NoCurrentMigrationError,
    StorageError,
)
from migledger.target import MigrationTarget

__all__ = [
    "DirtyStateError",
    "MigLedgerError",
    "MigrationAlreadyExistsError",
    "MigrationNotFoundError",
    "MigrationTarget",
    "NoCurrentMigrationError",
    "StorageError",
    "__version__",
]
