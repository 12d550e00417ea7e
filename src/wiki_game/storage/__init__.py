from .base import MemoStore
from .memory_store import InMemoryStore
from .sqlite_store import SQLiteStore
from .dynamodb_store import DynamoDBStore

__all__ = ["MemoStore", "InMemoryStore", "SQLiteStore", "DynamoDBStore"]
