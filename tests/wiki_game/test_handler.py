import json
import pytest

from conftest import FakeFetcher, url
from wiki_game import WorkMessage
from wiki_game.config import WikiGameConfig
from wiki_game.fetcher import DocumentFetcher
from wiki_game.handler import QueueFunction, process_records
from wiki_game.queue import InMemoryQueue


def record(message_id: str, body: str) -> dict:
    return {"messageId": message_id, "receiptHandle": f"rh-{message_id}", "body": body}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_batch_reports_only_failed_records(worker, found):
    class ExplodingQueue(InMemoryQueue):
        async def send(self, message):
            raise RuntimeError("queue down")

    seed = WorkMessage.seed(url("A"), url("C"), depth=5)
    hit = WorkMessage(origin=url("A"), target=url("C"), current=url("B"), depth=3, path=[url("A"), url("B")])
    worker.queue = ExplodingQueue()

    result = await process_records(worker, [
        record("seed", seed.model_dump_json()),
        record("hit", hit.model_dump_json()),
        record("garbage", "{{{"),
        record("invalid", json.dumps({"origin": "", "target": url("C"), "depth": 1})),
    ])

    assert result == {"batchItemFailures": [{"itemIdentifier": "seed"}]}
    assert found.paths == [[url("A"), url("B"), url("C")]]


@pytest.mark.integration
def test_queue_function_reuses_runtime(monkeypatch, graph):
    fake = FakeFetcher(graph)
    monkeypatch.setattr(DocumentFetcher, "fetch", lambda self, page_url: fake.fetch(page_url))
    monkeypatch.setattr("wiki_game.handler.setup_prod_logging", lambda level: None)

    function = QueueFunction(WikiGameConfig())
    try:
        body = WorkMessage(origin=url("A"), target=url("C"), current=url("B"), depth=2,
                           path=[url("A"), url("B")]).model_dump_json()
        first = function({"Records": [record("1", body)]})
        runtime = function._runtime
        second = function({"Records": []})

        assert first == {"batchItemFailures": []}
        assert second == {"batchItemFailures": []}
        assert function._runtime is runtime
        assert isinstance(runtime.queue, InMemoryQueue)
        assert fake.calls == [url("B")]
    finally:
        function.close()
