"""Port interface for the key-value store backing the ledger and the lock."""

from enum import StrEnum
from typing import Any, Protocol

KEY_ATTRIBUTE = "id"


class Condition(StrEnum):
    """Preconditions a conditional write can be guarded by."""

    KEY_NOT_EXISTS = "key_not_exists"
    KEY_EXISTS = "key_exists"


class KeyValueStorePort(Protocol):
    """Protocol for a table-oriented key-value store.

    Every item is a flat mapping of attribute name to value, keyed by the
    string attribute ``id``. The only synchronization primitive relied on
    is the atomicity of a single conditional write.

    Implementations raise ConditionFailedError when a condition does not
    hold and StorageError for every other backend fault. A store may raise
    ValueError for a condition it does not implement on a given write.
    """

    async def list_tables(self) -> set[str]:
        """Return the names of all existing tables."""
        ...

    async def create_table(self, table: str) -> None:
        """Create a table keyed by ``id``. An existing table is not an error."""
        ...

    async def delete_table(self, table: str) -> None:
        """Delete a table and all of its items."""
        ...

    async def scan(self, table: str) -> list[dict[str, Any]]:
        """Return every item in the table."""
        ...

    async def put_item(
        self,
        table: str,
        item: dict[str, Any],
        condition: Condition | None = None,
    ) -> None:
        """Insert a whole item.

        Stores must support ``KEY_NOT_EXISTS``; other conditions are optional.
        """
        ...

    async def update_item(
        self,
        table: str,
        key: str,
        changes: dict[str, Any],
        condition: Condition | None = None,
    ) -> None:
        """Set the given attributes on an existing item.

        Stores must support ``KEY_EXISTS``; other conditions are optional.
        """
        ...

    async def delete_item(
        self,
        table: str,
        key: str,
        condition: Condition | None = None,
    ) -> None:
        """Delete an item.

        Stores must support ``KEY_EXISTS`` and no condition. Deleting a missing
        key without a condition is not an error.
        """
        ...

    async def close(self) -> None:
        """Release any resources held by the store."""
        ...
