"""DynamoDB-backed key-value store."""

import asyncio
import logging
from typing import Any, Iterable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StoreFailureError
from .store import KeyValueStore

logger = logging.getLogger(__name__)

KEY_ATTRIBUTE = "key"
VALUE_ATTRIBUTE = "value"


def get_table(table_name: str, resource: Optional[Any] = None):
    """Get DynamoDB table resource."""
    dynamodb = resource or boto3.resource("dynamodb")
    return dynamodb.Table(table_name)


class DynamoKeyValueStore(KeyValueStore):
    """
    Key-value store on a DynamoDB table.

    Items look like {"key": "<store key>", "value": "<string value>"}, with
    "key" as the table's partition key. boto3 calls are blocking and run in
    a worker thread.
    """

    def __init__(self, table_name: str, table: Optional[Any] = None):
        self.table_name = table_name
        self._table = table

    @property
    def table(self):
        if self._table is None:
            self._table = get_table(self.table_name)
        return self._table

    def _get(self, key: str) -> Optional[str]:
        try:
            response = self.table.get_item(Key={KEY_ATTRIBUTE: key})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error getting key {key} from {self.table_name}: {e}")
            raise StoreFailureError(f"Failed to read {key}") from e
        item = response.get("Item")
        if not item:
            return None
        return item.get(VALUE_ATTRIBUTE)

    def _set(self, key: str, value: str) -> None:
        try:
            self.table.put_item(Item={KEY_ATTRIBUTE: key, VALUE_ATTRIBUTE: value})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error writing key {key} to {self.table_name}: {e}")
            raise StoreFailureError(f"Failed to write {key}") from e

    def _remove(self, key: str) -> None:
        try:
            self.table.delete_item(Key={KEY_ATTRIBUTE: key})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting key {key} from {self.table_name}: {e}")
            raise StoreFailureError(f"Failed to delete {key}") from e

    def _remove_many(self, keys: list[str]) -> None:
        try:
            with self.table.batch_writer() as batch:
                for key in keys:
                    batch.delete_item(Key={KEY_ATTRIBUTE: key})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting keys {keys} from {self.table_name}: {e}")
            raise StoreFailureError("Failed to delete keys") from e

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)

    async def multi_remove(self, keys: Iterable[str]) -> None:
        await asyncio.to_thread(self._remove_many, list(keys))
