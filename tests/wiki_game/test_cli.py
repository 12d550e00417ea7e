import boto3
import pytest
from botocore.stub import Stubber
from typer.testing import CliRunner

from conftest import FakeFetcher, url
from wiki_game import WorkMessage
from wiki_game.fetcher import DocumentFetcher
from wiki_game.main import app

runner = CliRunner()

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/AnalyzeQueue"

pytestmark = pytest.mark.integration


@pytest.fixture
def local_cli(monkeypatch, graph, tmp_path):
    """Run the CLI against the fake graph with in-memory backends."""
    fake = FakeFetcher(graph)
    monkeypatch.setattr(DocumentFetcher, "fetch", lambda self, page_url: fake.fetch(page_url))
    monkeypatch.setattr("wiki_game.main.setup_logging", lambda **kwargs: None)
    monkeypatch.setattr("wiki_game.config.load_dotenv", lambda: False)
    for name in ("WIKI_GAME_STORE", "WIKI_GAME_QUEUE", "WIKI_GAME_PUBLISHER"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return fake


def test_find_prints_route(local_cli):
    result = runner.invoke(app, ["find", url("A"), url("C"), "--depth", "5", "--concurrency", "2"])

    assert result.exit_code == 0, result.output
    assert f"{url('A')} -> {url('B')} -> {url('C')}" in result.output


def test_find_without_route_exits_nonzero(local_cli):
    result = runner.invoke(app, ["find", url("A"), url("C"), "--depth", "1"])

    assert result.exit_code == 1
    assert "No route" in result.output
    assert local_cli.calls == [url("A")]


def test_seed_refuses_process_local_queue(local_cli):
    result = runner.invoke(app, ["seed", url("A"), url("C"), "--depth", "3"])

    assert result.exit_code == 1
    assert "WIKI_GAME_QUEUE=sqs" in result.output
    assert "Seeded" not in result.output


def test_seed_sends_to_sqs(local_cli, monkeypatch):
    sqs_client = boto3.client(
        "sqs",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    monkeypatch.setattr("wiki_game.factory.boto3.client", lambda service, **kwargs: sqs_client)
    monkeypatch.setenv("WIKI_GAME_QUEUE", "sqs")
    monkeypatch.setenv("WIKI_GAME_QUEUE_URL", QUEUE_URL)
    expected = WorkMessage.seed(url("A"), url("C"), 3)

    with Stubber(sqs_client) as stubber:
        stubber.add_response(
            "send_message",
            {"MessageId": "m-1"},
            {"QueueUrl": QUEUE_URL, "MessageBody": expected.model_dump_json()},
        )
        result = runner.invoke(app, ["seed", url("A"), url("C"), "--depth", "3"])
        stubber.assert_no_pending_responses()

    assert result.exit_code == 0, result.output
    assert f"Seeded {url('A')}::{url('C')} with depth 3" in result.output
