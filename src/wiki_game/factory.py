"""
Builds the collaborators a worker needs from a WikiGameConfig.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import boto3
import httpx

from wiki_game.config import WikiGameConfig
from wiki_game.events import EventBus
from wiki_game.fetcher import DocumentFetcher
from wiki_game.notifier import Notifier
from wiki_game.publisher import EventBusPublisher, Publisher, SNSPublisher
from wiki_game.queue import InMemoryQueue, SQSQueue, WorkQueue
from wiki_game.storage import DynamoDBStore, InMemoryStore, MemoStore, SQLiteStore
from wiki_game.worker import Worker

logger = logging.getLogger(__name__)


def build_store(config: WikiGameConfig) -> MemoStore:
    if config.store_backend == "sqlite":
        return SQLiteStore(config.sqlite_path)
    if config.store_backend == "dynamodb":
        client = boto3.client("dynamodb", region_name=config.aws_region)
        return DynamoDBStore(client, config.documents_table, config.routes_table)
    return InMemoryStore()


def build_queue(config: WikiGameConfig) -> WorkQueue:
    if config.queue_backend == "sqs":
        client = boto3.client("sqs", region_name=config.aws_region)
        return SQSQueue(client, config.queue_url)
    return InMemoryQueue()


def build_publisher(config: WikiGameConfig, event_bus: EventBus) -> Publisher:
    if config.publisher_backend == "sns":
        client = boto3.client("sns", region_name=config.aws_region)
        return SNSPublisher(client)
    return EventBusPublisher(event_bus)


@dataclass
class Runtime:
    """Everything one process shares between its workers."""
    config: WikiGameConfig
    store: MemoStore
    queue: WorkQueue
    event_bus: EventBus
    http_client: httpx.AsyncClient
    worker: Worker

    async def aclose(self) -> None:
        await self.http_client.aclose()
        await self.store.close()


async def build_runtime(
    config: WikiGameConfig,
    queue: Optional[WorkQueue] = None,
    event_bus: Optional[EventBus] = None,
) -> Runtime:
    """Create and initialize every collaborator. The caller must `aclose()` the runtime."""
    config.validate_backends()
    event_bus = event_bus or EventBus()
    store = build_store(config)
    await store.initialize()
    queue = queue or build_queue(config)

    http_client = DocumentFetcher.create_client(timeout=config.http_timeout, user_agent=config.user_agent)
    notifier = Notifier(store, build_publisher(config, event_bus), topic=config.topic_arn or "")
    worker = Worker(store, queue, DocumentFetcher(http_client), notifier)
    logger.info(
        f"Runtime ready: store={config.store_backend}, queue={config.queue_backend}, "
        f"publisher={config.publisher_backend}"
    )
    return Runtime(config, store, queue, event_bus, http_client, worker)


@asynccontextmanager
async def open_runtime(
    config: WikiGameConfig,
    queue: Optional[WorkQueue] = None,
    event_bus: Optional[EventBus] = None,
) -> AsyncIterator[Runtime]:
    runtime = await build_runtime(config, queue=queue, event_bus=event_bus)
    try:
        yield runtime
    finally:
        await runtime.aclose()
