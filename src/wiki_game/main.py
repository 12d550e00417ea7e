import asyncio
import logging
from typing import List, Optional

import typer

from wiki_game.config import WikiGameConfig
from wiki_game.dispatcher import Dispatcher
from wiki_game.events import ROUTE_FOUND, SearchEvent
from wiki_game.factory import build_queue, open_runtime
from wiki_game.logging_config import setup_logging
from wiki_game.models import WorkMessage, format_path
from wiki_game.queue import InMemoryQueue

app = typer.Typer(help="Find hyperlink paths between wiki articles with a pool of queue-driven workers.")
logger = logging.getLogger(__name__)


@app.command()
def find(
    origin: str = typer.Argument(..., help="URL of the article to start from."),
    target: str = typer.Argument(..., help="URL of the article to reach."),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", help="Maximum number of hops (default: WIKI_GAME_MAX_DEPTH)."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-c", help="Number of concurrent workers."),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Give up after this many seconds."),
):
    """
    Run a complete search locally with an in-process queue.
    """
    config = WikiGameConfig.from_env().model_copy(update={"queue_backend": "memory"})
    setup_logging(level=config.log_level)
    paths = asyncio.run(run_search_async(
        config,
        origin,
        target,
        depth=config.max_depth if depth is None else depth,
        concurrency=concurrency or config.concurrency,
        timeout=timeout,
    ))

    if not paths:
        typer.echo(f"No route from {origin} to {target} within the depth limit.")
        raise typer.Exit(code=1)
    for path in sorted(paths, key=len):
        typer.echo(format_path(path))


async def run_search_async(
    config: WikiGameConfig,
    origin: str,
    target: str,
    depth: int,
    concurrency: int,
    timeout: Optional[float] = None,
) -> List[List[str]]:
    """Seed a local search, drain the queue, and return every path that was reported."""
    queue = InMemoryQueue()
    found: List[List[str]] = []

    async def collect(event: SearchEvent):
        path = event.route_found_payload().path
        if path not in found:
            found.append(path)

    async with open_runtime(config, queue=queue) as runtime:
        runtime.event_bus.subscribe(ROUTE_FOUND, collect)
        dispatcher = Dispatcher(runtime.worker, queue, concurrency=concurrency, max_receives=config.max_receives)
        await queue.send(WorkMessage.seed(origin, target, depth))
        try:
            await dispatcher.run_until_idle(timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Search timed out after {timeout}s with {queue.pending} messages pending")
    return found


@app.command()
def seed(
    origin: str = typer.Argument(..., help="URL of the article to start from."),
    target: str = typer.Argument(..., help="URL of the article to reach."),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", help="Maximum number of hops (default: WIKI_GAME_MAX_DEPTH)."),
):
    """
    Send a seed message to the configured shared queue.
    """
    config = WikiGameConfig.from_env().validate_backends()
    setup_logging(level=config.log_level)
    if config.queue_backend != "sqs":
        # an in-memory queue dies with this process, so no worker would ever see the seed
        typer.echo(
            "seed needs a shared queue: set WIKI_GAME_QUEUE=sqs and WIKI_GAME_QUEUE_URL, "
            "or use 'find' for a local search.",
            err=True,
        )
        raise typer.Exit(code=1)
    message = WorkMessage.seed(origin, target, config.max_depth if depth is None else depth)
    asyncio.run(build_queue(config).send(message))
    typer.echo(f"Seeded {message.route_id} with depth {message.depth}")


@app.command()
def work(
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-c", help="Number of concurrent workers."),
):
    """
    Process messages from the configured queue until interrupted.
    """
    config = WikiGameConfig.from_env()
    setup_logging(level=config.log_level, use_rich=False)
    try:
        asyncio.run(run_workers_async(config, concurrency or config.concurrency))
    except KeyboardInterrupt:
        logger.info("Stopped")


async def run_workers_async(config: WikiGameConfig, concurrency: int):
    async with open_runtime(config) as runtime:
        dispatcher = Dispatcher(
            runtime.worker,
            runtime.queue,
            concurrency=concurrency,
            max_receives=config.max_receives,
            poll_seconds=20.0 if config.queue_backend == "sqs" else 1.0,
        )
        await dispatcher.run_forever()


if __name__ == "__main__":
    app()
