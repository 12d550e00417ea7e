import logging
import httpx

from wiki_game.exceptions import FetchError

DEFAULT_USER_AGENT = "wiki-game/0.1"


class DocumentFetcher:
    """
    Retrieves raw document bodies over HTTP.

    The `httpx.AsyncClient` belongs to whoever builds the fetcher (the CLI,
    the function handler, a test) and is closed by them, so one connection
    pool is shared by every worker in the process.
    """
    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def create_client(timeout: float = 10.0, user_agent: str = DEFAULT_USER_AGENT) -> httpx.AsyncClient:
        """Build a client with the settings workers expect (redirects followed, compressed)."""
        return httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent, "Accept-Encoding": "gzip"},
        )

    async def fetch(self, url: str) -> str:
        """Fetch the body of `url`. Raises FetchError on any transport or status failure."""
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out fetching '{url}': {e}", url=url) from e
        except httpx.HTTPStatusError as e:
            raise FetchError(f"Bad status {e.response.status_code} fetching '{url}'", url=url) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"Request for '{url}' failed: {e}", url=url) from e

        self.logger.debug(f"Fetched {len(response.text)} characters from {url}")
        return response.text
