"""DynamoDB-backed key-value store.

Implements KeyValueStorePort on top of the boto3 DynamoDB client. Blocking
client calls run in worker threads so the asyncio loop stays responsive
while another runner holds the lock.
"""

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from migledger.config.models import DynamoDBConfig
from migledger.errors import ConditionFailedError, StorageError
from migledger.ports.store import KEY_ATTRIBUTE, Condition

T = TypeVar("T")

_CONDITION_EXPRESSIONS = {
    Condition.KEY_NOT_EXISTS: f"attribute_not_exists({KEY_ATTRIBUTE})",
    Condition.KEY_EXISTS: f"attribute_exists({KEY_ATTRIBUTE})",
}

_WAITER_CONFIG = {"Delay": 1, "MaxAttempts": 120}

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def _serialize(item: dict[str, Any]) -> dict[str, Any]:
    return {name: _serializer.serialize(value) for name, value in item.items()}


def _deserialize(item: dict[str, Any]) -> dict[str, Any]:
    return {name: _deserializer.deserialize(value) for name, value in item.items()}


def _key(key: str) -> dict[str, Any]:
    return {KEY_ATTRIBUTE: {"S": key}}


class DynamoDBStore:
    """
    DynamoDB implementation of KeyValueStorePort.

    Tables are created with a single string hash key ``id`` and
    provisioned throughput taken from DynamoDBConfig. Scans are strongly
    consistent and follow pagination to the end of the table.
    """

    def __init__(self, config: DynamoDBConfig, client: Any = None) -> None:
        self._config = config
        self._client: Any = client

    async def initialize(self) -> None:
        """Create the boto3 client unless one was injected."""
        if self._client is not None:
            return
        session = boto3.Session(region_name=self._config.region)
        self._client = session.client(
            "dynamodb",
            region_name=self._config.region,
            endpoint_url=self._config.endpoint_url,
            config=BotoConfig(
                connect_timeout=self._config.connect_timeout_seconds,
                read_timeout=self._config.read_timeout_seconds,
                retries={"max_attempts": self._config.max_attempts, "mode": "standard"},
            ),
        )
        logger.debug(
            "DynamoDBStore initialized (region={}, endpoint={})",
            self._config.region,
            self._config.endpoint_url,
        )

    async def close(self) -> None:
        """Close the boto3 client."""
        if self._client is not None:
            await asyncio.to_thread(self._client.close)
            self._client = None

    def _get_client(self) -> Any:
        if self._client is None:
            raise RuntimeError("Store not initialized")
        return self._client

    async def _call(self, operation: str, fn: Callable[[], T]) -> T:
        """Run a blocking client call in a thread, wrapping backend faults."""
        try:
            return await asyncio.to_thread(fn)
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                raise
            raise StorageError(f"failed to {operation}: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"failed to {operation}: {e}") from e

    # =========================================================================
    # Tables
    # =========================================================================

    async def list_tables(self) -> set[str]:
        client = self._get_client()

        def list_all() -> set[str]:
            names: set[str] = set()
            for page in client.get_paginator("list_tables").paginate():
                names.update(page.get("TableNames", []))
            return names

        return await self._call("list tables", list_all)

    async def create_table(self, table: str) -> None:
        client = self._get_client()

        def create() -> None:
            try:
                client.create_table(
                    TableName=table,
                    AttributeDefinitions=[{"AttributeName": KEY_ATTRIBUTE, "AttributeType": "S"}],
                    KeySchema=[{"AttributeName": KEY_ATTRIBUTE, "KeyType": "HASH"}],
                    ProvisionedThroughput={
                        "ReadCapacityUnits": self._config.read_capacity_units,
                        "WriteCapacityUnits": self._config.write_capacity_units,
                    },
                )
            except ClientError as e:
                # Another runner created it first
                if _error_code(e) != "ResourceInUseException":
                    raise
                logger.debug("Table {} already exists", table)
            if self._config.wait_for_tables:
                client.get_waiter("table_exists").wait(
                    TableName=table, WaiterConfig=_WAITER_CONFIG
                )

        await self._call(f"create table {table}", create)
        logger.debug("Table {} ready", table)

    async def delete_table(self, table: str) -> None:
        client = self._get_client()

        def delete() -> None:
            client.delete_table(TableName=table)
            if self._config.wait_for_tables:
                client.get_waiter("table_not_exists").wait(
                    TableName=table, WaiterConfig=_WAITER_CONFIG
                )

        await self._call(f"delete table {table}", delete)
        logger.debug("Table {} deleted", table)

    # =========================================================================
    # Items
    # =========================================================================

    async def scan(self, table: str) -> list[dict[str, Any]]:
        client = self._get_client()

        def scan_all() -> list[dict[str, Any]]:
            items: list[dict[str, Any]] = []
            paginator = client.get_paginator("scan")
            for page in paginator.paginate(TableName=table, ConsistentRead=True):
                items.extend(_deserialize(item) for item in page.get("Items", []))
            return items

        return await self._call(f"scan table {table}", scan_all)

    async def put_item(
        self,
        table: str,
        item: dict[str, Any],
        condition: Condition | None = None,
    ) -> None:
        client = self._get_client()
        key = item.get(KEY_ATTRIBUTE)
        if not isinstance(key, str):
            raise ValueError(f"item must carry a string '{KEY_ATTRIBUTE}' attribute")

        params: dict[str, Any] = {"TableName": table, "Item": _serialize(item)}
        if condition is not None:
            params["ConditionExpression"] = _CONDITION_EXPRESSIONS[condition]

        await self._conditional(
            f"put item {key} into {table}",
            table,
            key,
            condition,
            lambda: client.put_item(**params),
        )

    async def update_item(
        self,
        table: str,
        key: str,
        changes: dict[str, Any],
        condition: Condition | None = None,
    ) -> None:
        client = self._get_client()
        if KEY_ATTRIBUTE in changes:
            raise ValueError(f"cannot update the '{KEY_ATTRIBUTE}' attribute")
        if not changes:
            raise ValueError("update requires at least one attribute")

        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        assignments = []
        for i, (name, value) in enumerate(changes.items()):
            names[f"#a{i}"] = name
            values[f":v{i}"] = _serializer.serialize(value)
            assignments.append(f"#a{i} = :v{i}")

        params: dict[str, Any] = {
            "TableName": table,
            "Key": _key(key),
            "UpdateExpression": "SET " + ", ".join(assignments),
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
        }
        if condition is not None:
            params["ConditionExpression"] = _CONDITION_EXPRESSIONS[condition]

        await self._conditional(
            f"update item {key} in {table}",
            table,
            key,
            condition,
            lambda: client.update_item(**params),
        )

    async def delete_item(
        self,
        table: str,
        key: str,
        condition: Condition | None = None,
    ) -> None:
        client = self._get_client()
        params: dict[str, Any] = {"TableName": table, "Key": _key(key)}
        if condition is not None:
            params["ConditionExpression"] = _CONDITION_EXPRESSIONS[condition]

        await self._conditional(
            f"delete item {key} from {table}",
            table,
            key,
            condition,
            lambda: client.delete_item(**params),
        )

    async def _conditional(
        self,
        operation: str,
        table: str,
        key: str,
        condition: Condition | None,
        fn: Callable[[], Any],
    ) -> None:
        """Run a write and translate a failed condition check."""
        try:
            await self._call(operation, fn)
        except ClientError as e:
            state = "already exists" if condition is Condition.KEY_NOT_EXISTS else "does not exist"
            raise ConditionFailedError(f"item {key} {state} in {table}", table, key) from e
