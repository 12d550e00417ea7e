import json
import logging
from typing import Dict, List, Optional

from wiki_game.models import RecordKind, StoreRecord
from .base import MemoStore, record_from_dict, record_kind


class InMemoryStore(MemoStore):
    """
    Process-local memo store.

    Records are kept as JSON strings so callers never share mutable state with
    the store, which mirrors the isolation a remote store gives.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._records: Dict[RecordKind, Dict[str, str]] = {kind: {} for kind in RecordKind}
        self.writes: List[StoreRecord] = []

    async def get(self, kind: RecordKind, key: str) -> Optional[StoreRecord]:
        raw = self._records[kind].get(key)
        if raw is None:
            return None
        return record_from_dict(kind, json.loads(raw))

    async def put(self, record: StoreRecord) -> None:
        kind = record_kind(record)
        self._records[kind][record.id] = record.model_dump_json()
        self.writes.append(record.model_copy(deep=True))
        self.logger.debug(f"Stored {kind.value} '{record.id}'")

    def count(self, kind: RecordKind) -> int:
        """Number of distinct keys stored for `kind` (useful for testing)."""
        return len(self._records[kind])
