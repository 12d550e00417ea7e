import asyncio
import logging
from typing import List, Optional

from wiki_game.queue import Delivery, WorkQueue
from wiki_game.worker import Worker

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Runs a pool of consumer loops that feed queue deliveries to a worker.

    A delivery is acknowledged only after the worker processed it without
    raising; otherwise it is released for redelivery. Deliveries received
    more than `max_receives` times are dropped as dead letters.
    """

    def __init__(
        self,
        worker: Worker,
        queue: WorkQueue,
        concurrency: int = 8,
        max_receives: int = 5,
        poll_seconds: float = 1.0,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.worker = worker
        self.queue = queue
        self.concurrency = concurrency
        self.max_receives = max_receives
        self.poll_seconds = poll_seconds

        self.processed = 0
        self.failed = 0
        self.dead_lettered = 0

    async def handle(self, delivery: Delivery) -> bool:
        """Process one delivery. Returns True if it was acknowledged."""
        if delivery.receive_count > self.max_receives:
            logger.error(
                f"Dead-lettering {delivery.delivery_id} after {delivery.receive_count - 1} failed attempts"
            )
            self.dead_lettered += 1
            await self.queue.ack(delivery)
            return True

        message = delivery.message
        if message is None:
            await self.queue.ack(delivery)
            return True

        try:
            await self.worker.process(message)
        except Exception as e:
            self.failed += 1
            logger.warning(f"Processing {delivery.delivery_id} failed, releasing for redelivery: {e}")
            await self.queue.release(delivery)
            return False

        self.processed += 1
        await self.queue.ack(delivery)
        return True

    async def _consume(self, index: int):
        logger.debug(f"Consumer {index} started")
        while True:
            delivery = await self.queue.receive(self.poll_seconds)
            if delivery is None:
                continue
            try:
                await self.handle(delivery)
            except Exception as e:
                # ack/release itself failed; the queue's visibility timeout redelivers
                logger.error(f"Consumer {index} could not settle {delivery.delivery_id}: {e}", exc_info=True)

    def _start(self) -> List[asyncio.Task]:
        return [asyncio.create_task(self._consume(i)) for i in range(self.concurrency)]

    async def run_until_idle(self, timeout: Optional[float] = None) -> None:
        """Consume until every message sent to the queue has been acknowledged."""
        consumers = self._start()
        try:
            await asyncio.wait_for(self.queue.join(), timeout=timeout)
        finally:
            for consumer in consumers:
                consumer.cancel()
            await asyncio.gather(*consumers, return_exceptions=True)
        logger.info(
            f"Queue drained: {self.processed} processed, {self.failed} failed attempts, "
            f"{self.dead_lettered} dead-lettered"
        )

    async def run_forever(self) -> None:
        """Consume until cancelled."""
        logger.info(f"Dispatching with {self.concurrency} consumers")
        consumers = self._start()
        try:
            await asyncio.gather(*consumers)
        finally:
            for consumer in consumers:
                consumer.cancel()
