"""Migration ledger.

Records one item per migration ID in the migrations table. A migration is
written dirty when it is added or started and made clean when it finishes,
so a runner that dies mid-migration leaves a dirty record behind. While any
record is dirty the ledger refuses to report what has been applied.
"""

from loguru import logger

from migledger.config.options import LedgerOptions
from migledger.errors import (
    ConditionFailedError,
    DirtyStateError,
    MigrationAlreadyExistsError,
    MigrationNotFoundError,
    NoCurrentMigrationError,
    StorageError,
)
from migledger.models.records import MigrationRecord
from migledger.ports.store import Condition, KeyValueStorePort


class MigrationLedger:
    """
    Durable record of applied and in-progress migrations.

    Every state transition is a single conditional write; nothing is
    cached between calls.
    """

    def __init__(self, store: KeyValueStorePort, options: LedgerOptions) -> None:
        self._store = store
        self._options = options

    @property
    def table_name(self) -> str:
        return self._options.table_name

    # =========================================================================
    # Provisioning
    # =========================================================================

    async def provision(self) -> None:
        """
        Create the migrations table and the lock table if they are missing.

        Safe to call repeatedly and from several runners at once.
        """
        try:
            existing = await self._store.list_tables()
        except StorageError as e:
            raise StorageError(f"failed to list tables: {e}") from e

        for table, label in (
            (self._options.table_name, "migrations table"),
            (self._options.lock_table_name, "migrations lock table"),
        ):
            if table in existing:
                logger.debug("{} {} already exists", label.capitalize(), table)
                continue
            try:
                await self._store.create_table(table)
            except StorageError as e:
                raise StorageError(f"failed to create {label}: {e}") from e
            logger.info("Created {} {}", label, table)

    async def deprovision(self) -> None:
        """
        Delete the migrations table and the lock table.

        Stops at the first failure; a table already deleted stays deleted.
        """
        for table, label in (
            (self._options.table_name, "migrations table"),
            (self._options.lock_table_name, "migrations lock table"),
        ):
            try:
                await self._store.delete_table(table)
            except StorageError as e:
                raise StorageError(f"failed to delete {label}: {e}") from e
            logger.info("Deleted {} {}", label, table)

    # =========================================================================
    # Queries
    # =========================================================================

    async def records(self) -> list[MigrationRecord]:
        """Return every record, dirty ones included, sorted by ID."""
        try:
            items = await self._store.scan(self._options.table_name)
        except StorageError as e:
            raise StorageError(f"failed to scan migrations table: {e}") from e

        records = [MigrationRecord.from_item(item) for item in items]
        return sorted(records, key=lambda r: r.id)

    async def list_done(self) -> list[str]:
        """
        Return the IDs of all cleanly applied migrations, sorted ascending.

        Raises:
            DirtyStateError: If any recorded migration is dirty.
        """
        done = []
        for record in await self.records():
            if record.dirty:
                raise DirtyStateError(record.id)
            done.append(record.id)
        return done

    async def current(self) -> str:
        """
        Return the greatest applied migration ID.

        Raises:
            NoCurrentMigrationError: If nothing has been applied.
            DirtyStateError: If any recorded migration is dirty.
        """
        done = await self.list_done()
        if not done:
            raise NoCurrentMigrationError()
        return done[-1]

    # =========================================================================
    # Transitions
    # =========================================================================

    async def add(self, migration_id: str) -> None:
        """Record a new migration as dirty."""
        record = MigrationRecord(id=migration_id, dirty=True)
        try:
            await self._store.put_item(
                self._options.table_name,
                record.to_item(),
                condition=Condition.KEY_NOT_EXISTS,
            )
        except ConditionFailedError as e:
            raise MigrationAlreadyExistsError(migration_id) from e
        except StorageError as e:
            raise StorageError(f"failed to add migration {migration_id}: {e}") from e
        logger.debug("Added migration {}", migration_id)

    async def remove(self, migration_id: str) -> None:
        """Delete a migration's record."""
        try:
            await self._store.delete_item(
                self._options.table_name,
                migration_id,
                condition=Condition.KEY_EXISTS,
            )
        except ConditionFailedError as e:
            raise MigrationNotFoundError(migration_id) from e
        except StorageError as e:
            raise StorageError(f"failed to remove migration {migration_id}: {e}") from e
        logger.debug("Removed migration {}", migration_id)

    async def start_migration(self, migration_id: str) -> None:
        """Mark a recorded migration as started (dirty)."""
        await self._set_dirty(migration_id, True, "start")
        logger.debug("Started migration {}", migration_id)

    async def finish_migration(self, migration_id: str) -> None:
        """Mark a recorded migration as finished (clean)."""
        await self._set_dirty(migration_id, False, "finish")
        logger.debug("Finished migration {}", migration_id)

    async def _set_dirty(self, migration_id: str, dirty: bool, verb: str) -> None:
        try:
            await self._store.update_item(
                self._options.table_name,
                migration_id,
                {"dirty": dirty},
                condition=Condition.KEY_EXISTS,
            )
        except ConditionFailedError as e:
            raise MigrationNotFoundError(migration_id) from e
        except StorageError as e:
            raise StorageError(f"failed to {verb} migration {migration_id}: {e}") from e
