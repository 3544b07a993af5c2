"""
RSS/Atom feed fetcher with a hard per-request timeout.

A fetch never raises: timeouts, transport failures, HTTP errors and parser
failures all end up in the ``error`` field of the returned FetchResult.
"""

import asyncio
import codecs
import re
import time
from dataclasses import dataclass, field
from typing import Optional

import httpx

from lightfeed.config import get_config
from lightfeed.core.parser import Article, FeedDocumentParser, FeedSource
from lightfeed.logger import feed_logger, get_logger

logger = get_logger(__name__)

UNKNOWN_FETCH_ERROR = "Unknown feed fetch error"

_XML_ENCODING_RE = re.compile(rb"""^\s*<\?xml[^>]*\bencoding\s*=\s*["']([A-Za-z0-9._\-]+)["']""")


@dataclass
class FetchResult:
    """Result of fetching and parsing one feed."""

    feed_id: str
    feed_title: str
    feed_url: str
    feed_image: Optional[str] = None
    items: list[Article] = field(default_factory=list)
    error: Optional[str] = None
    http_status: Optional[int] = None
    fetch_time_seconds: float = 0.0

    def __post_init__(self):
        """Validate fetch result."""
        if self.error and self.items:
            raise ValueError("Failed fetch cannot carry items")

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def failure(
        cls,
        source: FeedSource,
        error: str,
        http_status: Optional[int] = None,
        fetch_time_seconds: float = 0.0,
    ) -> "FetchResult":
        """Error result for ``source``, titled with the configured title."""
        return cls(
            feed_id=source.feed_id,
            feed_title=source.title,
            feed_url=source.url,
            error=error,
            http_status=http_status,
            fetch_time_seconds=fetch_time_seconds,
        )


def decode_body(content: bytes, charset: Optional[str] = None) -> str:
    """Decode a response body.

    Uses the charset announced by the server, else the encoding named in the
    XML declaration, else UTF-8. Undecodable bytes are replaced.

    Args:
        content: Raw response body
        charset: Charset from the Content-Type header, if any

    Returns:
        Decoded text
    """
    candidates = [charset]

    match = _XML_ENCODING_RE.match(content[:200])
    if match:
        candidates.append(match.group(1).decode("ascii"))

    for encoding in candidates:
        if not encoding:
            continue
        try:
            codecs.lookup(encoding)
        except LookupError:
            logger.debug(f"Ignoring unknown encoding: {encoding}")
            continue
        return content.decode(encoding, errors="replace")

    return content.decode("utf-8", errors="replace")


class FeedFetcher:
    """Async RSS/Atom fetcher with a wall-clock timeout per feed."""

    def __init__(
        self,
        parser: Optional[FeedDocumentParser] = None,
        timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize feed fetcher.

        Args:
            parser: Parser for successful responses
            timeout_seconds: Wall-clock limit for request plus body read
            user_agent: User-Agent header for HTTP requests
            transport: Optional httpx transport (used by tests)
        """
        config = get_config()

        self.parser = parser or FeedDocumentParser()
        self.timeout_seconds = timeout_seconds or config.fetcher.timeout_seconds
        self.user_agent = user_agent or config.fetcher.user_agent
        self.accept = config.fetcher.accept
        self.transport = transport

        # HTTP client configuration
        self.follow_redirects = config.fetcher.follow_redirects
        self.max_redirects = config.fetcher.max_redirects

    @property
    def timeout_message(self) -> str:
        return f"Timed out after {int(round(self.timeout_seconds * 1000))} ms"

    def open_client(self) -> httpx.AsyncClient:
        """Create an HTTP client shared by the fetches of one aggregation."""
        return httpx.AsyncClient(
            headers={
                "User-Agent": self.user_agent,
                "Accept": self.accept,
                "Cache-Control": "no-cache",
                "Pragma": "no-cache",
            },
            timeout=httpx.Timeout(self.timeout_seconds),
            follow_redirects=self.follow_redirects,
            max_redirects=self.max_redirects,
            transport=self.transport,
        )

    async def fetch(
        self,
        source: FeedSource,
        client: Optional[httpx.AsyncClient] = None,
    ) -> FetchResult:
        """Fetch and parse a single feed.

        Args:
            source: Feed to fetch
            client: Shared HTTP client; a private one is opened when omitted

        Returns:
            FetchResult with items or an error message
        """
        if client is None:
            async with self.open_client() as own_client:
                return await self.fetch(source, own_client)

        start_time = time.monotonic()
        log = feed_logger(__name__, source)
        log.debug(f"Fetching feed: {source.title or source.url}")

        try:
            result = await asyncio.wait_for(
                self._fetch_and_parse(client, source, start_time),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            log.warning(f"Timeout fetching {source.url}")
            return FetchResult.failure(
                source, self.timeout_message, fetch_time_seconds=time.monotonic() - start_time
            )
        except httpx.HTTPError as e:
            log.warning(f"Error fetching {source.url}: {e}")
            return FetchResult.failure(
                source, str(e) or UNKNOWN_FETCH_ERROR, fetch_time_seconds=time.monotonic() - start_time
            )
        except Exception as e:
            log.exception(f"Unexpected error fetching {source.url}")
            return FetchResult.failure(
                source,
                f"Unexpected error: {type(e).__name__}: {e}",
                fetch_time_seconds=time.monotonic() - start_time,
            )

        if result.error:
            log.warning(f"Feed {source.url} failed: {result.error}")
        else:
            log.info(
                f"Fetched {len(result.items)} items from {source.title or source.url} "
                f"in {result.fetch_time_seconds:.2f}s"
            )
        return result

    async def _fetch_and_parse(
        self,
        client: httpx.AsyncClient,
        source: FeedSource,
        start_time: float,
    ) -> FetchResult:
        response = await client.get(source.url)

        if not response.is_success:
            error = f"HTTP {response.status_code} {response.reason_phrase}".strip()
            return FetchResult.failure(
                source,
                error,
                http_status=response.status_code,
                fetch_time_seconds=time.monotonic() - start_time,
            )

        body = decode_body(response.content, response.charset_encoding)
        parsed = self.parser.parse(body, source)

        return FetchResult(
            feed_id=source.feed_id,
            feed_title=parsed.feed_title or source.title,
            feed_url=source.url,
            feed_image=parsed.feed_image,
            items=parsed.items,
            http_status=response.status_code,
            fetch_time_seconds=time.monotonic() - start_time,
        )
