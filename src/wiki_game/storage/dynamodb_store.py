import asyncio
import logging
from typing import Any, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from wiki_game.exceptions import StoreError
from wiki_game.models import RecordKind, StoreRecord
from .base import MemoStore, record_from_dict, record_kind

logger = logging.getLogger(__name__)


class DynamoDBStore(MemoStore):
    """
    Memo store backed by DynamoDB tables with a string partition key `id`.

    Documents and routes may share one table; their ids never collide since
    route ids contain '::' and document URLs cannot. boto3 is blocking, so
    every call runs in a worker thread.
    """

    def __init__(self, client: Any, documents_table: str, routes_table: Optional[str] = None):
        self.client = client
        self.tables = {
            RecordKind.DOCUMENT: documents_table,
            RecordKind.ROUTE: routes_table or documents_table,
        }
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    async def get(self, kind: RecordKind, key: str) -> Optional[StoreRecord]:
        table = self.tables[kind]
        try:
            response = await asyncio.to_thread(
                self.client.get_item,
                TableName=table,
                Key={"id": {"S": key}},
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to read {kind.value} '{key}' from {table}: {e}") from e

        item = response.get("Item")
        if not item:
            return None
        data = {name: self._deserializer.deserialize(value) for name, value in item.items()}
        return record_from_dict(kind, data)

    async def put(self, record: StoreRecord) -> None:
        kind = record_kind(record)
        table = self.tables[kind]
        item = {
            name: self._serializer.serialize(value)
            for name, value in record.model_dump(mode="json").items()
        }
        try:
            await asyncio.to_thread(self.client.put_item, TableName=table, Item=item)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to write {kind.value} '{record.id}' to {table}: {e}") from e
        logger.debug(f"Stored {kind.value} '{record.id}' in {table}")
