import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from wiki_game.events import EventBus, SearchEvent
from wiki_game.exceptions import PublishError
from wiki_game.models import FoundEvent

logger = logging.getLogger(__name__)


class Publisher(ABC):
    """Best-effort delivery of found-route notifications to subscribers."""

    @abstractmethod
    async def publish(self, topic: str, event: FoundEvent) -> None:
        pass


class EventBusPublisher(Publisher):
    """Publishes found routes as `route_found` events on an in-process EventBus."""

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus

    async def publish(self, topic: str, event: FoundEvent) -> None:
        await self.event_bus.publish(SearchEvent.route_found(event, topic))


class SNSPublisher(Publisher):
    """Publishes the rendered path text to an SNS topic."""

    def __init__(self, client: Any):
        self.client = client

    async def publish(self, topic: str, event: FoundEvent) -> None:
        try:
            await asyncio.to_thread(self.client.publish, TopicArn=topic, Message=event.text)
        except (ClientError, BotoCoreError) as e:
            raise PublishError(f"Failed to publish to {topic}: {e}") from e
        logger.debug(f"Published route {event.origin} -> {event.target} to {topic}")
