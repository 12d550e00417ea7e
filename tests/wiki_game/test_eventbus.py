"""
EventBus tests: the in-process notification channel, no external dependencies.
"""

import pytest
import logging

from wiki_game import EventBus, FoundEvent, SearchEvent
from wiki_game.events import ROUTE_FOUND

logger = logging.getLogger(__name__)

@pytest.mark.unit
class TestEventBus:
    """Unit tests for EventBus functionality."""

    @pytest.mark.asyncio
    async def test_basic_event_flow(self, event_bus: EventBus):
        received_events = []

        async def test_handler(event: SearchEvent):
            received_events.append(event)
            logger.info(f"Handler received event: {event.type} for search {event.search_id}")

        event_bus.subscribe("route_found", test_handler)
        await event_bus.publish(SearchEvent(
            type="route_found",
            search_id="a::c",
            data={"path": ["a", "b", "c"]}
        ))

        assert len(received_events) == 1
        assert received_events[0].search_id == "a::c"
        assert received_events[0].data["path"] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_error_isolation(self, event_bus: EventBus):
        """A failing handler doesn't stop the others."""
        good_handler_calls = []

        async def failing_handler(event: SearchEvent):
            raise ValueError("Intentional test failure")

        async def good_handler(event: SearchEvent):
            good_handler_calls.append(event.search_id)

        event_bus.subscribe("route_found", failing_handler)
        event_bus.subscribe("route_found", good_handler)

        failures = await event_bus.publish(SearchEvent(type="route_found", search_id="x::y"))

        assert failures == 1
        assert good_handler_calls == ["x::y"]
        assert event_bus.subscriber_count("route_found") == 2

    @pytest.mark.asyncio
    async def test_no_subscribers(self, event_bus: EventBus):
        # Should not raise any exception
        await event_bus.publish(SearchEvent(type="nobody_listens", search_id="a::b"))
        assert event_bus.subscriber_count("nobody_listens") == 0

    @pytest.mark.asyncio
    async def test_route_found_event_carries_typed_payload(self, event_bus: EventBus):
        received = []

        async def handler(event: SearchEvent):
            received.append(event.route_found_payload())

        event_bus.subscribe(ROUTE_FOUND, handler)
        found = FoundEvent(origin="a", target="c", path=["a", "b", "c"], text="a -> b -> c", cached=True)
        event = SearchEvent.route_found(found, topic="arn:topic")

        assert await event_bus.publish(event) == 0
        assert event.search_id == "a::c"
        assert event.timestamp == found.timestamp
        [payload] = received
        assert payload.path == ["a", "b", "c"]
        assert payload.cached is True
        assert payload.topic == "arn:topic"

    def test_other_events_have_no_route_payload(self):
        with pytest.raises(ValueError):
            SearchEvent(type="search_started", search_id="a::c").route_found_payload()
