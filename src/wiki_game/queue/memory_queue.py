import asyncio
import itertools
import logging
from typing import Dict, List, Optional, Tuple

from wiki_game.models import WorkMessage
from .base import Delivery, WorkQueue


class InMemoryQueue(WorkQueue):
    """
    In-process queue with the same visibility semantics as a hosted queue.

    Bodies travel as JSON so consumers get a fresh message on every delivery.
    `join()` resolves once everything sent has been acknowledged, which lets a
    local search know it has run out of frontier.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._ready: asyncio.Queue[Tuple[str, str]] = asyncio.Queue()
        self._in_flight: Dict[str, Delivery] = {}
        self._receive_counts: Dict[str, int] = {}
        self._ids = itertools.count(1)
        self.sent: List[WorkMessage] = []

    async def send(self, message: WorkMessage) -> None:
        delivery_id = f"msg-{next(self._ids)}"
        self.sent.append(message)
        await self._ready.put((delivery_id, message.model_dump_json()))

    async def receive(self, wait_seconds: float = 1.0) -> Optional[Delivery]:
        try:
            delivery_id, body = await asyncio.wait_for(self._ready.get(), timeout=wait_seconds)
        except asyncio.TimeoutError:
            return None

        count = self._receive_counts.get(delivery_id, 0) + 1
        self._receive_counts[delivery_id] = count
        delivery = Delivery(
            delivery_id=delivery_id,
            body=body,
            receipt=f"{delivery_id}#{count}",
            receive_count=count,
        )
        self._in_flight[delivery.receipt] = delivery
        return delivery

    async def ack(self, delivery: Delivery) -> None:
        if self._in_flight.pop(delivery.receipt, None) is None:
            self.logger.warning(f"Ack for unknown receipt {delivery.receipt}")
            return
        self._receive_counts.pop(delivery.delivery_id, None)
        self._ready.task_done()

    async def release(self, delivery: Delivery) -> None:
        if self._in_flight.pop(delivery.receipt, None) is None:
            self.logger.warning(f"Release for unknown receipt {delivery.receipt}")
            return
        # Requeue before task_done so join() never sees a false zero
        await self._ready.put((delivery.delivery_id, delivery.body))
        self._ready.task_done()

    async def join(self) -> None:
        await self._ready.join()

    @property
    def pending(self) -> int:
        """Messages waiting or in flight."""
        return self._ready.qsize() + len(self._in_flight)
