import os
from typing import Literal, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from wiki_game.exceptions import ConfigurationError

class WikiGameConfig(BaseModel):
    """Process configuration, read once at startup."""

    # Backends
    store_backend: Literal["memory", "sqlite", "dynamodb"] = "memory"
    queue_backend: Literal["memory", "sqs"] = "memory"
    publisher_backend: Literal["eventbus", "sns"] = "eventbus"

    # Store settings
    sqlite_path: str = "wiki_game.sqlite"
    documents_table: Optional[str] = None
    routes_table: Optional[str] = Field(None, description="Defaults to the documents table when unset")

    # Queue and notification settings
    queue_url: Optional[str] = None
    topic_arn: Optional[str] = None
    aws_region: str = "us-east-1"

    # Search settings
    max_depth: int = Field(4, ge=0)
    concurrency: int = Field(8, ge=1)
    max_receives: int = Field(5, ge=1)

    # Fetcher settings
    http_timeout: float = Field(10.0, gt=0)
    user_agent: str = "wiki-game/0.1"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "WikiGameConfig":
        """Create config from environment variables (and a .env file if present)."""
        load_dotenv()
        return cls(
            store_backend=os.getenv("WIKI_GAME_STORE", "memory"),
            queue_backend=os.getenv("WIKI_GAME_QUEUE", "memory"),
            publisher_backend=os.getenv("WIKI_GAME_PUBLISHER", "eventbus"),
            sqlite_path=os.getenv("WIKI_GAME_SQLITE_PATH", "wiki_game.sqlite"),
            documents_table=os.getenv("WIKI_GAME_DOCUMENTS_TABLE"),
            routes_table=os.getenv("WIKI_GAME_ROUTES_TABLE"),
            queue_url=os.getenv("WIKI_GAME_QUEUE_URL"),
            topic_arn=os.getenv("WIKI_GAME_TOPIC_ARN"),
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            max_depth=int(os.getenv("WIKI_GAME_MAX_DEPTH", "4")),
            concurrency=int(os.getenv("WIKI_GAME_CONCURRENCY", "8")),
            max_receives=int(os.getenv("WIKI_GAME_MAX_RECEIVES", "5")),
            http_timeout=float(os.getenv("WIKI_GAME_HTTP_TIMEOUT", "10.0")),
            user_agent=os.getenv("WIKI_GAME_USER_AGENT", "wiki-game/0.1"),
            log_level=os.getenv("WIKI_GAME_LOG_LEVEL", "INFO"),
        )

    def validate_backends(self) -> "WikiGameConfig":
        """Raise ConfigurationError if a selected backend is missing its identifier."""
        if self.store_backend == "dynamodb" and not self.documents_table:
            raise ConfigurationError("WIKI_GAME_DOCUMENTS_TABLE is required for the dynamodb store")
        if self.queue_backend == "sqs" and not self.queue_url:
            raise ConfigurationError("WIKI_GAME_QUEUE_URL is required for the sqs queue")
        if self.publisher_backend == "sns" and not self.topic_arn:
            raise ConfigurationError("WIKI_GAME_TOPIC_ARN is required for the sns publisher")
        return self
