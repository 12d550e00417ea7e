import asyncio
import logging
from typing import Any, Iterable, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from wiki_game.exceptions import QueueError
from wiki_game.models import WorkMessage
from .base import Delivery, WorkQueue

logger = logging.getLogger(__name__)

# SQS accepts at most 10 entries per batch request
SQS_BATCH_SIZE = 10
# Long polling is capped at 20 seconds
SQS_MAX_WAIT_SECONDS = 20


class SQSQueue(WorkQueue):
    """Work queue backed by an SQS queue. boto3 calls run in worker threads."""

    def __init__(self, client: Any, queue_url: str):
        self.client = client
        self.queue_url = queue_url

    async def _call(self, operation: str, **kwargs) -> dict:
        try:
            return await asyncio.to_thread(getattr(self.client, operation), QueueUrl=self.queue_url, **kwargs)
        except (ClientError, BotoCoreError) as e:
            raise QueueError(f"SQS {operation} failed for {self.queue_url}: {e}") from e

    async def send(self, message: WorkMessage) -> None:
        await self._call("send_message", MessageBody=message.model_dump_json())

    async def send_all(self, messages: Iterable[WorkMessage]) -> None:
        """Send in batches of ten, all batches concurrently."""
        messages = list(messages)
        batches = [messages[i:i + SQS_BATCH_SIZE] for i in range(0, len(messages), SQS_BATCH_SIZE)]
        await asyncio.gather(*[self._send_batch(batch) for batch in batches])

    async def _send_batch(self, batch: List[WorkMessage]) -> None:
        entries = [
            {"Id": str(i), "MessageBody": message.model_dump_json()}
            for i, message in enumerate(batch)
        ]
        response = await self._call("send_message_batch", Entries=entries)
        failed = response.get("Failed") or []
        if failed:
            reasons = ", ".join(f"{entry.get('Code')}: {entry.get('Message', '')}" for entry in failed)
            raise QueueError(f"SQS rejected {len(failed)} of {len(batch)} messages ({reasons})")

    async def receive(self, wait_seconds: float = 1.0) -> Optional[Delivery]:
        response = await self._call(
            "receive_message",
            MaxNumberOfMessages=1,
            WaitTimeSeconds=min(int(wait_seconds), SQS_MAX_WAIT_SECONDS),
            AttributeNames=["ApproximateReceiveCount"],
        )
        messages = response.get("Messages") or []
        if not messages:
            return None

        raw = messages[0]
        return Delivery(
            delivery_id=raw["MessageId"],
            body=raw["Body"],
            receipt=raw["ReceiptHandle"],
            receive_count=int(raw.get("Attributes", {}).get("ApproximateReceiveCount", "1")),
        )

    async def ack(self, delivery: Delivery) -> None:
        await self._call("delete_message", ReceiptHandle=delivery.receipt)

    async def release(self, delivery: Delivery) -> None:
        await self._call("change_message_visibility", ReceiptHandle=delivery.receipt, VisibilityTimeout=0)
