"""Migration target: the ledger and the lock for one migration set.

This is what an orchestrator holds. It is built once from a store and a
list of options, and forwards to MigrationLedger and MigrationLock.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from migledger.config.models import Config
from migledger.config.options import LedgerOptions, Option, resolve_options
from migledger.models.records import MigrationRecord
from migledger.ports.store import KeyValueStorePort
from migledger.services.ledger import MigrationLedger
from migledger.services.lock import LockHandle, MigrationLock


class MigrationTarget:
    """
    Ledger and lock sharing one store and one set of names.

    Typical use::

        target = MigrationTarget(store, with_table_name("app_migrations"))
        await target.provision()
        async with target.locked():
            for migration_id in pending:
                await target.add(migration_id)
                ...  # run the migration
                await target.finish_migration(migration_id)
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        *options: Option,
        base: LedgerOptions | None = None,
    ) -> None:
        self.options = resolve_options(*options, base=base)
        self.store = store
        self.ledger = MigrationLedger(store, self.options)
        self.lock = MigrationLock(store, self.options)

    @classmethod
    def from_config(
        cls, store: KeyValueStorePort, config: Config, *options: Option
    ) -> "MigrationTarget":
        """Build a target whose defaults come from the ``ledger`` config section."""
        return cls(store, *options, base=config.ledger)

    async def provision(self) -> None:
        await self.ledger.provision()

    async def deprovision(self) -> None:
        await self.ledger.deprovision()

    async def list_done(self) -> list[str]:
        return await self.ledger.list_done()

    async def current(self) -> str:
        return await self.ledger.current()

    async def records(self) -> list[MigrationRecord]:
        return await self.ledger.records()

    async def add(self, migration_id: str) -> None:
        await self.ledger.add(migration_id)

    async def remove(self, migration_id: str) -> None:
        await self.ledger.remove(migration_id)

    async def start_migration(self, migration_id: str) -> None:
        await self.ledger.start_migration(migration_id)

    async def finish_migration(self, migration_id: str) -> None:
        await self.ledger.finish_migration(migration_id)

    async def acquire(self) -> LockHandle:
        return await self.lock.acquire()

    async def force_release(self) -> None:
        await self.lock.force_release()

    async def is_locked(self) -> bool:
        return await self.lock.is_locked()

    @asynccontextmanager
    async def locked(self) -> AsyncIterator[LockHandle]:
        """
        Hold the migration lock for the duration of the block.

        The lock is released whether the block succeeds or raises.
        """
        handle = await self.lock.acquire()
        try:
            yield handle
        finally:
            await handle.release()
