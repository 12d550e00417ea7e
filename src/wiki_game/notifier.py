import asyncio
import logging
from typing import List

from wiki_game.models import FoundEvent, Route, WorkMessage, format_path
from wiki_game.publisher import Publisher
from wiki_game.storage import MemoStore

logger = logging.getLogger(__name__)


class Notifier:
    """
    Reports solved routes.

    Persisting the Route record and publishing the notification happen
    concurrently. The Route is authoritative: a store failure propagates so
    the message is retried, while a publish failure is only logged.
    """

    def __init__(self, store: MemoStore, publisher: Publisher, topic: str = ""):
        self.store = store
        self.publisher = publisher
        self.topic = topic

    async def found_route(self, message: WorkMessage, cached: bool = False) -> FoundEvent:
        """
        Announce that `message.path` connects origin and target.

        Args:
            message: Message whose path runs from origin to target inclusive.
            cached: The path was read from the route memo. The Route record
                already exists, so only the notification is sent.

        Returns:
            The FoundEvent that was published.
        """
        path: List[str] = list(message.path)
        event = FoundEvent(
            origin=message.origin,
            target=message.target,
            path=path,
            text=format_path(path),
            cached=cached,
        )
        logger.info(f"FOUND => {event.text}")

        if cached:
            await self._publish(event)
            return event

        route = Route.for_pair(message.origin, message.target, path)
        store_result, _ = await asyncio.gather(
            self.store.put_route(route),
            self._publish(event),
            return_exceptions=True,
        )
        if isinstance(store_result, BaseException):
            raise store_result
        return event

    async def _publish(self, event: FoundEvent) -> None:
        try:
            await self.publisher.publish(self.topic, event)
        except Exception as e:
            logger.warning(f"Notification for {event.origin} -> {event.target} failed: {e}")
