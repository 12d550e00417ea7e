"""
SQLiteStore - durable memo store for single-host runs, backed by aiosqlite.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from wiki_game.exceptions import StoreError
from wiki_game.models import RecordKind, StoreRecord
from .base import MemoStore, record_from_dict, record_kind

logger = logging.getLogger(__name__)

_TABLES = {
    RecordKind.DOCUMENT: "documents",
    RecordKind.ROUTE: "routes",
}


class SQLiteStore(MemoStore):
    """
    Memo store persisted to a SQLite file.

    One table per record kind, each holding the record id and its JSON
    payload. Every call opens its own connection, so concurrent workers in
    one process never share a cursor.
    """

    def __init__(self, db_path: str = "wiki_game.sqlite"):
        self.db_path = Path(db_path)

    async def initialize(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("PRAGMA journal_mode=WAL")
                for table in _TABLES.values():
                    await db.execute(
                        f"CREATE TABLE IF NOT EXISTS {table} ("
                        " id TEXT PRIMARY KEY,"
                        " payload TEXT NOT NULL"
                        ")"
                    )
                await db.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to initialize SQLite store at {self.db_path}: {e}") from e
        logger.info(f"SQLite store ready at {self.db_path.resolve()}")

    async def get(self, kind: RecordKind, key: str) -> Optional[StoreRecord]:
        query = f"SELECT payload FROM {_TABLES[kind]} WHERE id = ?"
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute(query, (key,)) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to read {kind.value} '{key}': {e}") from e

        if row is None:
            return None
        return record_from_dict(kind, json.loads(row[0]))

    async def put(self, record: StoreRecord) -> None:
        kind = record_kind(record)
        query = f"INSERT OR REPLACE INTO {_TABLES[kind]} (id, payload) VALUES (?, ?)"
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(query, (record.id, record.model_dump_json()))
                await db.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to write {kind.value} '{record.id}': {e}") from e
