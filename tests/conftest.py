"""
Pytest configuration and shared fixtures.
"""

import pytest
import logging
from typing import Dict, List, Optional, Set

from wiki_game import EventBus, SearchEvent
from wiki_game.events import ROUTE_FOUND
from wiki_game.exceptions import FetchError
from wiki_game.notifier import Notifier
from wiki_game.publisher import EventBusPublisher
from wiki_game.queue import InMemoryQueue
from wiki_game.storage import InMemoryStore
from wiki_game.worker import Worker

# Configure logging for tests
logging.basicConfig(level=logging.INFO)

SITE = "https://wiki.example"


def url(name: str) -> str:
    """Canonical URL of a test article."""
    return f"{SITE}/{name}"


def render_page(hrefs: List[str]) -> str:
    anchors = "\n".join(f'<p>See <a href="{href}" title="x">{href}</a>.</p>' for href in hrefs)
    return f"<html><body>{anchors}</body></html>"


class FakeFetcher:
    """Serves a fixed link graph as HTML and records every fetch."""

    def __init__(self, graph: Dict[str, List[str]], failing: Optional[Set[str]] = None):
        self.graph = graph
        self.failing = failing or set()
        self.calls: List[str] = []

    async def fetch(self, page_url: str) -> str:
        self.calls.append(page_url)
        if page_url in self.failing:
            raise FetchError(f"Timed out fetching '{page_url}'", url=page_url)
        if page_url not in self.graph:
            raise FetchError(f"Bad status 404 fetching '{page_url}'", url=page_url)
        return render_page(self.graph[page_url])


class FoundCollector:
    """Subscribes to route_found events and keeps them."""

    def __init__(self, event_bus: EventBus):
        self.events: List[SearchEvent] = []
        event_bus.subscribe(ROUTE_FOUND, self.handle)

    async def handle(self, event: SearchEvent):
        self.events.append(event)

    @property
    def paths(self) -> List[List[str]]:
        return [event.route_found_payload().path for event in self.events]


@pytest.fixture
def graph() -> Dict[str, List[str]]:
    """A -> B -> C, plus some noise links that must be filtered out."""
    return {
        url("A"): ["/B", "https://other.example/Elsewhere", "/Category:Letters", "/B#History"],
        url("B"): ["//wiki.example/C", "/A?action=edit"],
        url("C"): [],
    }

@pytest.fixture
def fetcher(graph) -> FakeFetcher:
    return FakeFetcher(graph)

@pytest.fixture
def event_bus() -> EventBus:
    """Create a fresh EventBus for each test."""
    return EventBus()

@pytest.fixture
def found(event_bus: EventBus) -> FoundCollector:
    return FoundCollector(event_bus)

@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()

@pytest.fixture
def queue() -> InMemoryQueue:
    return InMemoryQueue()

@pytest.fixture
def notifier(store: InMemoryStore, event_bus: EventBus) -> Notifier:
    return Notifier(store, EventBusPublisher(event_bus), topic="found-topic")

@pytest.fixture
def worker(store: InMemoryStore, queue: InMemoryQueue, fetcher: FakeFetcher, notifier: Notifier) -> Worker:
    return Worker(store, queue, fetcher, notifier)
