"""Port interfaces for migledger.

Ports define the contracts that adapters must implement. The ledger and
the lock depend only on these abstractions, not on a concrete backend.
"""

from migledger.ports.store import KEY_ATTRIBUTE, Condition, KeyValueStorePort

__all__ = [
    "KEY_ATTRIBUTE",
    "Condition",
    "KeyValueStorePort",
]
