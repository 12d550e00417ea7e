"""
Worker - processes one work message of a distributed wiki path search.

Every step either reads a memo, performs an idempotent upsert, or enqueues
child messages that can be derived again from the same input. Processing a
duplicate delivery therefore costs redundant work at worst and never leaves
the store in a wrong state.
"""

import logging
from typing import Callable, Iterable, Set

from wiki_game.exceptions import FetchError, ParseError
from wiki_game.fetcher import DocumentFetcher
from wiki_game.links import canonicalize_all, find_links
from wiki_game.models import (
    Document,
    FoundEvent,
    Outcome,
    ProcessResult,
    Route,
    WorkMessage,
    format_path,
)
from wiki_game.notifier import Notifier
from wiki_game.queue import WorkQueue
from wiki_game.storage import MemoStore

logger = logging.getLogger(__name__)

LinkExtractor = Callable[[str], Iterable[str]]


class Worker:
    """Applies the search policy to a single message. Holds no search state of its own."""

    def __init__(
        self,
        store: MemoStore,
        queue: WorkQueue,
        fetcher: DocumentFetcher,
        notifier: Notifier,
        extract_links: LinkExtractor = find_links,
    ):
        self.store = store
        self.queue = queue
        self.fetcher = fetcher
        self.notifier = notifier
        self.extract_links = extract_links

    async def process(self, message: WorkMessage) -> ProcessResult:
        """
        Process one delivery of `message`.

        Store, queue and notification failures propagate so the delivery is
        retried as a whole. Fetch and parse failures never do.
        """
        if not message.origin:
            logger.info("empty ORIGIN field")
            return ProcessResult(outcome=Outcome.INVALID)
        if not message.target:
            logger.info("empty TARGET field")
            return ProcessResult(outcome=Outcome.INVALID)

        is_seed = message.is_seed
        message = message.normalized()

        route = await self.store.get_route(message.route_id)
        if route is not None:
            logger.info(f"CACHED => {format_path(route.path)}")
            if not is_seed:
                return ProcessResult(outcome=Outcome.CACHED_DROPPED)
            event = await self.notifier.found_route(
                message.model_copy(update={"path": list(route.path)}),
                cached=True,
            )
            return ProcessResult(outcome=Outcome.CACHED, notification=event)

        if message.current == message.target:
            event = await self.notifier.found_route(message)
            return self._found(Outcome.FOUND, event)

        if message.depth <= 0:
            logger.info(f"STOP => ignoring URL '{message.current}' because we have reached the maximum depth")
            return ProcessResult(outcome=Outcome.DEPTH_EXHAUSTED)

        store_writes = []
        document = await self.store.get_document(message.current)
        if document is None:
            document = Document(id=message.current, links=await self._discover_links(message.current))
            await self.store.put_document(document)
            store_writes.append(document)

        if message.target in document.links:
            event = await self.notifier.found_route(
                message.model_copy(update={"path": [*message.path, message.target]})
            )
            result = self._found(Outcome.DIRECT_HIT, event)
            result.store_writes[:0] = store_writes
            return result

        children = [message.child(link) for link in sorted(document.links)]
        logger.debug(f"EXPAND => {len(children)} links from '{message.current}' (depth {message.depth})")
        await self.queue.send_all(children)
        return ProcessResult(outcome=Outcome.EXPANDED, enqueued=children, store_writes=store_writes)

    async def _discover_links(self, url: str) -> Set[str]:
        """Fetch `url` and return its canonical links. Fetch or parse failure yields an empty set."""
        try:
            html = await self.fetcher.fetch(url)
            return self._parse_links(html, url)
        except (FetchError, ParseError) as e:
            # the empty document gets memoized so this page is never retried
            logger.warning(f"{type(e).__name__} for '{url}', storing it without links: {e.message}")
            return set()

    def _parse_links(self, html: str, url: str) -> Set[str]:
        try:
            return canonicalize_all(self.extract_links(html), url)
        except Exception as e:
            raise ParseError(f"Could not extract links from '{url}': {e}") from e

    @staticmethod
    def _found(outcome: Outcome, event: FoundEvent) -> ProcessResult:
        route = Route.for_pair(event.origin, event.target, event.path)
        return ProcessResult(outcome=outcome, store_writes=[route], notification=event)
