"""Advisory migration lock on top of conditional writes.

The lock is a single item in the lock table: present means held, absent
means free. Acquiring polls a conditional insert at a fixed interval until
it succeeds; releasing deletes the item. There is no owner, lease or
fencing token, so a holder that dies without releasing keeps the lock
until an operator force-releases it.
"""

import asyncio

from loguru import logger

from migledger.config.options import LedgerOptions
from migledger.errors import ConditionFailedError, StorageError
from migledger.models.records import LockRecord
from migledger.ports.store import KEY_ATTRIBUTE, Condition, KeyValueStorePort
from migledger.utils.retry import poll_until_true


class LockHandle:
    """Proof of a successful acquisition, used once to free the lock."""

    def __init__(self, store: KeyValueStorePort, lock_table_name: str, lock_id: str) -> None:
        self._store = store
        self.lock_table_name = lock_table_name
        self.lock_id = lock_id
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def release(self) -> None:
        """
        Delete the lock item.

        The delete is unconditional, so releasing a lock that is no longer
        present does not fail. A second call on the same handle does nothing,
        which keeps a stale handle from freeing a lock someone else took since.
        """
        if self._released:
            logger.warning(
                "Migration lock {} already released by this handle; ignoring", self.lock_id
            )
            return

        try:
            await self._store.delete_item(self.lock_table_name, self.lock_id)
        except StorageError as e:
            raise StorageError(f"failed to release migration lock: {e}") from e

        self._released = True
        logger.info("Released migration lock {}", self.lock_id)


class MigrationLock:
    """
    Mutual exclusion between runners sharing one lock table.

    Not re-entrant: acquiring twice from the same process waits forever,
    because a held lock looks the same whoever holds it.
    """

    def __init__(self, store: KeyValueStorePort, options: LedgerOptions) -> None:
        self._store = store
        self._options = options

    @property
    def lock_table_name(self) -> str:
        return self._options.lock_table_name

    @property
    def lock_id(self) -> str:
        return self._options.lock_id

    async def acquire(self) -> LockHandle:
        """
        Wait until the lock is free and take it.

        Contention only delays the caller; it never raises. Any other backend
        fault aborts immediately. Cancelling the calling task stops the wait;
        a write already sent is allowed to complete, and undone if it took
        the lock.

        Returns:
            A handle whose ``release()`` frees the lock.

        Raises:
            StorageError: If the backend fails for a reason other than
                the lock being held.
        """
        poll = poll_until_true(self._options.lock_retry_interval_seconds)
        try:
            await poll(self._try_acquire)()
        except StorageError as e:
            raise StorageError(f"failed to lock before migrating: {e}") from e

        logger.info("Acquired migration lock {}", self.lock_id)
        return LockHandle(self._store, self.lock_table_name, self.lock_id)

    async def force_release(self) -> None:
        """Delete the lock item regardless of who holds it."""
        try:
            await self._store.delete_item(self.lock_table_name, self.lock_id)
        except StorageError as e:
            raise StorageError(f"failed to force release migration lock: {e}") from e
        logger.warning("Force released migration lock {}", self.lock_id)

    async def is_locked(self) -> bool:
        """Return whether the lock item is currently present."""
        try:
            items = await self._store.scan(self.lock_table_name)
        except StorageError as e:
            raise StorageError(f"failed to scan migrations lock table: {e}") from e
        return any(item.get(KEY_ATTRIBUTE) == self.lock_id for item in items)

    async def _try_acquire(self) -> bool:
        attempt = asyncio.ensure_future(self._insert())
        try:
            return await asyncio.shield(attempt)
        except asyncio.CancelledError:
            # Further cancellations must not interrupt the cleanup
            settle = asyncio.ensure_future(self._settle_cancelled(attempt))
            while not settle.done():
                try:
                    await asyncio.shield(settle)
                except asyncio.CancelledError:
                    logger.debug("Lock {} still settling; cancellation deferred", self.lock_id)
            raise

    async def _insert(self) -> bool:
        try:
            await self._store.put_item(
                self.lock_table_name,
                LockRecord(id=self.lock_id).to_item(),
                condition=Condition.KEY_NOT_EXISTS,
            )
        except ConditionFailedError:
            return False
        return True

    async def _settle_cancelled(self, attempt: "asyncio.Future[bool]") -> None:
        """Wait out a write interrupted by cancellation and undo it if it won."""
        try:
            acquired = await attempt
        except StorageError as e:
            logger.warning("Cancelled lock attempt on {} failed: {}", self.lock_id, e)
            return

        if not acquired:
            return

        logger.warning("Lock {} taken after acquire was cancelled; releasing it", self.lock_id)
        try:
            await self._store.delete_item(self.lock_table_name, self.lock_id)
        except StorageError as e:
            logger.error("Failed to release lock {} after cancellation: {}", self.lock_id, e)
