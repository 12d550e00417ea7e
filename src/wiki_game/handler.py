"""
Queue-triggered function entry point.

The function runtime invokes `handler(event, context)` with a batch of SQS
records. Records whose processing raised are reported back in
`batchItemFailures` so only they are redelivered.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from wiki_game.config import WikiGameConfig
from wiki_game.factory import Runtime, build_runtime
from wiki_game.logging_config import setup_prod_logging
from wiki_game.queue import parse_body
from wiki_game.worker import Worker

logger = logging.getLogger(__name__)


async def process_records(worker: Worker, records: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, str]]]:
    """Process SQS records concurrently and report the ids of those that failed."""

    async def process_record(record: Dict[str, Any]) -> None:
        message = parse_body(record.get("body") or "")
        if message is None:
            return
        await worker.process(message)

    results = await asyncio.gather(
        *[process_record(record) for record in records],
        return_exceptions=True,
    )

    failures = []
    for record, result in zip(records, results):
        if isinstance(result, Exception):
            logger.error(f"Record {record.get('messageId')} failed: {result}")
            failures.append({"itemIdentifier": record.get("messageId", "")})
    return {"batchItemFailures": failures}


class QueueFunction:
    """
    Owns the runtime of one function instance.

    The runtime (HTTP client, AWS clients) is created on the first invocation
    and reused by later invocations on the same event loop.
    """

    def __init__(self, config: Optional[WikiGameConfig] = None):
        self.config = config
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._runtime: Optional[Runtime] = None

    async def _get_runtime(self) -> Runtime:
        if self._runtime is None:
            config = self.config or WikiGameConfig.from_env()
            setup_prod_logging(config.log_level)
            self._runtime = await build_runtime(config)
        return self._runtime

    async def handle_async(self, event: Dict[str, Any]) -> Dict[str, List[Dict[str, str]]]:
        runtime = await self._get_runtime()
        records = event.get("Records") or []
        logger.debug(f"Received batch of {len(records)} records")
        return await process_records(runtime.worker, records)

    def __call__(self, event: Dict[str, Any], context: Any = None) -> Dict[str, List[Dict[str, str]]]:
        if self._loop is None:
            self._loop = asyncio.new_event_loop()
        return self._loop.run_until_complete(self.handle_async(event))

    def close(self) -> None:
        if self._loop is None:
            return
        if self._runtime is not None:
            self._loop.run_until_complete(self._runtime.aclose())
            self._runtime = None
        self._loop.close()
        self._loop = None


handler = QueueFunction()
