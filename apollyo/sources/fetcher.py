"""Crawl source descriptors and the async source fetcher."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..errors import SourceFetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrawlSource:
    url: str
    type: str = 'wordlist'  # dictionary | wordlist | domain | api
    priority: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {'url': self.url, 'type': self.type, 'priority': self.priority}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CrawlSource':
        return cls(
            url=str(data['url']),
            type=str(data.get('type', 'wordlist')),
            priority=int(data.get('priority', 1)),
        )


DEFAULT_SOURCES = (
    CrawlSource("https://raw.githubusercontent.com/dwyl/english-words/master/words_alpha.txt", 'wordlist', 1),
    CrawlSource("https://www.mit.edu/~ecprice/wordlist.10000", 'wordlist', 2),
    CrawlSource(
        "https://raw.githubusercontent.com/first20hours/google-10000-english/master/google-10000-english-usa.txt",
        'wordlist',
        3,
    ),
    CrawlSource("https://raw.githubusercontent.com/bitcoin/bips/master/bip-0039/english.txt", 'wordlist', 4),
)


class SourceFetcher:
    """Fetches raw line-delimited word lists over HTTP.

    The underlying client is created lazily and shared across fetches;
    use the fetcher as an async context manager or call ``aclose()``.
    """

    def __init__(self, timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def fetch_lines(self, source: CrawlSource) -> List[str]:
        """Return the source body split into lines.

        Raises SourceFetchError on any transport error or non-2xx status.
        """
        try:
            response = await self._get_client().get(source.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(source.url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(source.url, str(e) or type(e).__name__) from e

        lines = response.text.splitlines()
        logger.debug("Fetched %d lines from %s", len(lines), source.url)
        return lines

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> 'SourceFetcher':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
