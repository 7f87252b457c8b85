"""migledger error types.

All custom exceptions inherit from MigLedgerError to allow
catching any migledger-specific error.

Expected ledger states (already exists, not found, dirty, no current)
are raised as their own types so orchestrators can branch on them.
Everything else coming out of the backend is a StorageError.
"""


class MigLedgerError(Exception):
    """Base exception for all migledger errors."""

    pass


class ConfigurationError(MigLedgerError):
    """Invalid configuration."""

    pass


class StorageError(MigLedgerError):
    """Backend store operation failed."""

    pass


class RecordDecodeError(StorageError):
    """A stored item could not be decoded into a record."""

    def __init__(self, message: str, item: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.item = item


class ConditionFailedError(MigLedgerError):
    """A conditional write was rejected because its precondition did not hold."""

    def __init__(self, message: str, table: str, key: str) -> None:
        super().__init__(message)
        self.table = table
        self.key = key


class MigrationAlreadyExistsError(MigLedgerError):
    """A migration with the same ID is already recorded."""

    def __init__(self, migration_id: str) -> None:
        super().__init__(f"migration already exists: {migration_id}")
        self.migration_id = migration_id


class MigrationNotFoundError(MigLedgerError):
    """No migration with the given ID is recorded."""

    def __init__(self, migration_id: str) -> None:
        super().__init__(f"migration not found: {migration_id}")
        self.migration_id = migration_id


class DirtyStateError(MigLedgerError):
    """The ledger holds a migration that was started but never finished."""

    def __init__(self, migration_id: str) -> None:
        super().__init__(f"dirty migration found: {migration_id}")
        self.migration_id = migration_id


class NoCurrentMigrationError(MigLedgerError):
    """No migration has been applied yet."""

    def __init__(self) -> None:
        super().__init__("no current migration")
