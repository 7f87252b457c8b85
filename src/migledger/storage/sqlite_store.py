"""SQLite-backed key-value store.

Each logical table is a SQL table of ``(id TEXT PRIMARY KEY, attributes TEXT)``
where ``attributes`` is a JSON object holding every attribute except the key.
The connection runs in autocommit mode, so every conditional write below is a
single atomic statement and several processes can share one database file.
"""

import json
from pathlib import Path
from typing import Any

import aiosqlite
from loguru import logger

from migledger.errors import ConditionFailedError, StorageError
from migledger.ports.store import KEY_ATTRIBUTE, Condition


def _quote(table: str) -> str:
    """Quote a table name as an SQL identifier."""
    return '"' + table.replace('"', '""') + '"'


def _split_item(item: dict[str, Any]) -> tuple[str, str]:
    """Split an item into its key and the JSON-encoded remaining attributes."""
    key = item.get(KEY_ATTRIBUTE)
    if not isinstance(key, str):
        raise ValueError(f"item must carry a string '{KEY_ATTRIBUTE}' attribute")
    attributes = {k: v for k, v in item.items() if k != KEY_ATTRIBUTE}
    return key, json.dumps(attributes)


def _require_condition(
    operation: str, condition: Condition | None, *supported: Condition | None
) -> None:
    """Reject preconditions this store does not implement for ``operation``."""
    if condition not in supported:
        raise ValueError(f"{operation} does not support condition {condition}")


class SQLiteStore:
    """
    KeyValueStorePort implementation on a local SQLite file.

    Handles:
    - Table listing, creation and deletion
    - Full scans
    - Insert-if-absent, update-if-present and delete of a single key
    """

    def __init__(self, db_path: Path | str, busy_timeout_seconds: float = 30.0) -> None:
        """
        Initialize SQLiteStore.

        Args:
            db_path: Path to SQLite database file.
            busy_timeout_seconds: How long a statement waits for another
                connection's write lock before failing.
        """
        self.db_path = Path(db_path)
        self.busy_timeout_seconds = busy_timeout_seconds
        self._conn: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """
        Open the database connection.

        Creates the database file and its parent directory if needed.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(
            self.db_path,
            timeout=self.busy_timeout_seconds,
            isolation_level=None,
        )
        # WAL lets readers proceed while another runner holds the write lock
        await self._conn.execute("PRAGMA journal_mode = WAL")
        logger.debug("SQLiteStore opened at {}", self.db_path)

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _get_conn(self) -> aiosqlite.Connection:
        """Get database connection, raising if not initialized."""
        if not self._conn:
            raise RuntimeError("Store not initialized")
        return self._conn

    async def _execute(self, operation: str, sql: str, params: list[Any] | None = None) -> int:
        """Execute one statement and return its affected row count."""
        conn = self._get_conn()
        try:
            cursor = await conn.execute(sql, params or [])
            return cursor.rowcount
        except aiosqlite.IntegrityError:
            raise
        except aiosqlite.Error as e:
            raise StorageError(f"failed to {operation}: {e}") from e

    # =========================================================================
    # Tables
    # =========================================================================

    async def list_tables(self) -> set[str]:
        conn = self._get_conn()
        try:
            cursor = await conn.execute(
                """
                SELECT name FROM sqlite_master
                WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
                """
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(f"failed to list tables: {e}") from e
        return {row[0] for row in rows}

    async def create_table(self, table: str) -> None:
        await self._execute(
            f"create table {table}",
            f"""
            CREATE TABLE IF NOT EXISTS {_quote(table)} (
                id TEXT PRIMARY KEY,
                attributes TEXT NOT NULL DEFAULT '{{}}'
            )
            """,
        )
        logger.debug("Table {} ready", table)

    async def delete_table(self, table: str) -> None:
        # Plain DROP so a missing table surfaces as an error
        await self._execute(f"delete table {table}", f"DROP TABLE {_quote(table)}")
        logger.debug("Table {} dropped", table)

    # =========================================================================
    # Items
    # =========================================================================

    async def scan(self, table: str) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            cursor = await conn.execute(
                f"SELECT id, attributes FROM {_quote(table)} ORDER BY rowid"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(f"failed to scan table {table}: {e}") from e

        items = []
        for key, attributes in rows:
            item = json.loads(attributes)
            item[KEY_ATTRIBUTE] = key
            items.append(item)
        return items

    async def put_item(
        self,
        table: str,
        item: dict[str, Any],
        condition: Condition | None = None,
    ) -> None:
        _require_condition("put_item", condition, Condition.KEY_NOT_EXISTS)
        key, attributes = _split_item(item)
        try:
            await self._execute(
                f"put item {key} into {table}",
                f"INSERT INTO {_quote(table)} (id, attributes) VALUES (?, ?)",
                [key, attributes],
            )
        except aiosqlite.IntegrityError as e:
            raise ConditionFailedError(f"item {key} already exists in {table}", table, key) from e

    async def update_item(
        self,
        table: str,
        key: str,
        changes: dict[str, Any],
        condition: Condition | None = None,
    ) -> None:
        _require_condition("update_item", condition, Condition.KEY_EXISTS)
        if KEY_ATTRIBUTE in changes:
            raise ValueError(f"cannot update the '{KEY_ATTRIBUTE}' attribute")

        changed = await self._execute(
            f"update item {key} in {table}",
            f"UPDATE {_quote(table)} SET attributes = json_patch(attributes, ?) WHERE id = ?",
            [json.dumps(changes), key],
        )
        if changed == 0:
            raise ConditionFailedError(f"item {key} does not exist in {table}", table, key)

    async def delete_item(
        self,
        table: str,
        key: str,
        condition: Condition | None = None,
    ) -> None:
        _require_condition("delete_item", condition, Condition.KEY_EXISTS, None)
        changed = await self._execute(
            f"delete item {key} from {table}", f"DELETE FROM {_quote(table)} WHERE id = ?", [key]
        )
        if condition is Condition.KEY_EXISTS and changed == 0:
            raise ConditionFailedError(f"item {key} does not exist in {table}", table, key)
