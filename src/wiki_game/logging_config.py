"""
Centralized logging configuration for the wiki_game package.
"""

import logging
import sys
from rich.logging import RichHandler
from rich.console import Console

def setup_logging(
    level: str = "INFO",
    use_rich: bool = True,
) -> None:
    """
    Set up consistent logging for workers and the CLI.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        use_rich: Whether to use Rich's colored output. Deployed workers
            should pass False so log lines stay one-per-record.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if use_rich:
        console = Console(file=sys.stderr)

        handler = RichHandler(
            console=console,
            level=numeric_level,
            show_time=True,
            show_level=True,
            show_path=True,
            rich_tracebacks=True,
            markup=False,
            log_time_format="[%H:%M:%S]"
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(levelname)-5s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))

    handler.setLevel(numeric_level)
    root_logger.addHandler(handler)

    # Quiet chatty client libraries
    for noisy in ("urllib3", "httpx", "httpcore", "botocore", "boto3", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured: level={level}, rich={use_rich}")

def setup_prod_logging(level: str = "INFO") -> None:
    """Plain output for deployed workers."""
    setup_logging(level=level, use_rich=False)
