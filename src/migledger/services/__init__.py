"""migledger services layer.

Services hold the ledger and lock semantics on top of a key-value store port.
"""

from migledger.services.ledger import MigrationLedger
from migledger.services.lock import LockHandle, MigrationLock

__all__ = [
    "LockHandle",
    "MigrationLedger",
    "MigrationLock",
]
