import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from pydantic import ValidationError

from wiki_game.models import WorkMessage

logger = logging.getLogger(__name__)


def parse_body(body: str) -> Optional[WorkMessage]:
    """Parse a wire-format body, or None if it is not a work message at all."""
    try:
        return WorkMessage.model_validate_json(body)
    except ValidationError as e:
        logger.info(f"Dropping unparseable work item: {e.error_count()} error(s) in {body[:200]!r}")
        return None


@dataclass
class Delivery:
    """One receipt of a message from a queue. The same message may be delivered again."""
    delivery_id: str
    body: str
    receipt: str
    receive_count: int = 1

    @property
    def message(self) -> Optional[WorkMessage]:
        return parse_body(self.body)


class WorkQueue(ABC):
    """
    At-least-once, unordered transport for work messages.

    A received delivery stays invisible to other consumers until it is
    acknowledged (gone for good) or released (delivered again later).
    """

    @abstractmethod
    async def send(self, message: WorkMessage) -> None:
        pass

    async def send_all(self, messages: Iterable[WorkMessage]) -> None:
        """Send every message concurrently. Raises if any send fails."""
        await asyncio.gather(*[self.send(message) for message in messages])

    @abstractmethod
    async def receive(self, wait_seconds: float = 1.0) -> Optional[Delivery]:
        """Wait up to `wait_seconds` for a delivery."""
        pass

    @abstractmethod
    async def ack(self, delivery: Delivery) -> None:
        pass

    @abstractmethod
    async def release(self, delivery: Delivery) -> None:
        pass

    async def join(self) -> None:
        """Wait until every message sent so far has been acknowledged."""
        raise NotImplementedError(f"{type(self).__name__} cannot tell when it is drained")
