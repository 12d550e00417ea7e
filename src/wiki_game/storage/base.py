from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from wiki_game.models import Document, RecordKind, Route, StoreRecord


def record_kind(record: StoreRecord) -> RecordKind:
    if isinstance(record, Document):
        return RecordKind.DOCUMENT
    if isinstance(record, Route):
        return RecordKind.ROUTE
    raise TypeError(f"Not a store record: {type(record).__name__}")


def record_from_dict(kind: RecordKind, data: Dict[str, Any]) -> StoreRecord:
    if kind is RecordKind.DOCUMENT:
        return Document.model_validate(data)
    return Route.model_validate(data)


class MemoStore(ABC):
    """
    Key-value memo of documents and solved routes.

    Writes are upserts with no read-modify-write cycle. Documents are keyed by
    canonical URL and routes by 'origin::target'; the two key spaces never
    overlap. Concurrent writers to the same key are safe because the content
    written for a key is deterministic.
    """

    @abstractmethod
    async def get(self, kind: RecordKind, key: str) -> Optional[StoreRecord]:
        """Return the record stored under `key`, or None."""
        pass

    @abstractmethod
    async def put(self, record: StoreRecord) -> None:
        """Insert or overwrite `record` under its own id."""
        pass

    async def initialize(self) -> None:
        """Prepare backing resources. No-op unless a backend needs it."""
        pass

    async def close(self) -> None:
        pass

    async def get_document(self, url: str) -> Optional[Document]:
        return await self.get(RecordKind.DOCUMENT, url)

    async def get_route(self, key: str) -> Optional[Route]:
        return await self.get(RecordKind.ROUTE, key)

    async def put_document(self, document: Document) -> None:
        await self.put(document)

    async def put_route(self, route: Route) -> None:
        await self.put(route)
