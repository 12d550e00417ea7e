"""
In-process notification channel for search results.

Used when no hosted topic is configured: the local `find` command and the
tests subscribe to `route_found` and read the path from the event payload.
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List

from pydantic import BaseModel, Field

from wiki_game.models import FoundEvent, route_id

ROUTE_FOUND = "route_found"

logger = logging.getLogger(__name__)


class RouteFoundPayload(BaseModel):
    """Body of a `route_found` event."""
    topic: str = Field("", description="Topic the notification was addressed to")
    path: List[str] = Field(..., min_length=1, description="Document ids from origin to target inclusive")
    text: str = Field(..., description="Rendering of the path, 'a -> b -> c'")
    cached: bool = Field(False, description="Whether the path came from the route memo")


class SearchEvent(BaseModel):
    """Something that happened to a search, keyed by its route key."""
    type: str = Field(..., min_length=1, description="Event type, e.g. 'route_found'")
    search_id: str = Field(..., min_length=1, description="Route key of the search, 'origin::target'")
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.now)

    @classmethod
    def route_found(cls, found: FoundEvent, topic: str = "") -> "SearchEvent":
        payload = RouteFoundPayload(topic=topic, path=list(found.path), text=found.text, cached=found.cached)
        return cls(
            type=ROUTE_FOUND,
            search_id=route_id(found.origin, found.target),
            data=payload.model_dump(),
            timestamp=found.timestamp,
        )

    def route_found_payload(self) -> RouteFoundPayload:
        """Typed view of `data` for `route_found` events."""
        if self.type != ROUTE_FOUND:
            raise ValueError(f"{self.type} event carries no route")
        return RouteFoundPayload.model_validate(self.data)


Handler = Callable[[SearchEvent], Awaitable[None]]


class EventBus:
    """
    Delivers each published event to every handler subscribed to its type.

    Handlers run concurrently. A failing handler is logged and does not stop
    the others, and `publish` itself never raises on handler errors.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: Handler):
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to {event_type}")

    async def publish(self, event: SearchEvent) -> int:
        """Run every handler for `event.type` and return how many of them failed."""
        handlers = list(self._handlers.get(event.type, ()))
        if not handlers:
            logger.debug(f"Nobody listens for {event.type} ({event.search_id})")
            return 0

        results = await asyncio.gather(*(handler(event) for handler in handlers), return_exceptions=True)
        failures = 0
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                failures += 1
                logger.error(
                    f"Handler {getattr(handler, '__name__', handler)} failed on {event.type} "
                    f"for {event.search_id}: {result}",
                    exc_info=result,
                )
        return failures

    def subscriber_count(self, event_type: str) -> int:
        return len(self._handlers.get(event_type, ()))
