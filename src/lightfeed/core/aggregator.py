"""
Concurrent feed aggregation.

Fetches every feed of a mix at once and waits for all of them. A failing
feed only affects its own FetchResult.
"""

import asyncio
import time
from typing import Any, Iterable, Mapping, Optional, Union
from urllib.parse import urlsplit

from lightfeed.core.fetcher import FeedFetcher, FetchResult
from lightfeed.core.parser import FeedSource
from lightfeed.logger import get_logger

logger = get_logger(__name__)

DEFAULT_FEED_TITLE = "Custom Feed"

MixEntry = Union[FeedSource, Mapping[str, Any]]


def infer_feed_title_from_url(url: str) -> str:
    """Derive a display title from a feed URL's hostname.

    Args:
        url: Feed URL

    Returns:
        Hostname without a leading ``www.``, or "Custom Feed"
    """
    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError:
        return DEFAULT_FEED_TITLE

    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname or DEFAULT_FEED_TITLE


def _normalize_entry(entry: MixEntry, index: int) -> FeedSource:
    if isinstance(entry, FeedSource):
        feed_id, title, url = entry.feed_id, entry.title, entry.url
    else:
        feed_id = entry.get("feedId", entry.get("feed_id"))
        title = entry.get("title")
        url = entry.get("url")

    url = str(url if url is not None else "").strip()
    title = str(title if title is not None else "").strip()

    return FeedSource(
        feed_id=str(feed_id if feed_id is not None else f"custom-{index + 1}"),
        title=title or infer_feed_title_from_url(url),
        url=url,
    )


def normalize_feed_mix(mix: Optional[Iterable[MixEntry]]) -> list[FeedSource]:
    """Normalize a feed mix into FeedSources.

    Missing ids become ``custom-{n}`` (1-based position in the input), blank
    titles are inferred from the URL and entries without a URL are dropped.

    Args:
        mix: FeedSources or mappings with ``feedId``/``feed_id``, ``title``, ``url``

    Returns:
        List of FeedSource in input order
    """
    sources = [_normalize_entry(entry, index) for index, entry in enumerate(mix or [])]
    return [source for source in sources if source.url]


class FeedAggregator:
    """Fan-out/fan-in fetcher for a feed mix."""

    def __init__(self, fetcher: Optional[FeedFetcher] = None):
        """Initialize aggregator.

        Args:
            fetcher: FeedFetcher used for every feed of the mix
        """
        self.fetcher = fetcher or FeedFetcher()

    async def aggregate(self, mix: Optional[Iterable[MixEntry]]) -> list[FetchResult]:
        """Fetch all feeds of a mix concurrently.

        Args:
            mix: Feed mix (normalized here)

        Returns:
            One FetchResult per normalized feed, in input order
        """
        sources = normalize_feed_mix(mix)
        if not sources:
            return []

        start_time = time.monotonic()

        async with self.fetcher.open_client() as client:
            outcomes = await asyncio.gather(
                *(self.fetcher.fetch(source, client) for source in sources),
                return_exceptions=True,
            )

        results = []
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(f"Fetch task for {source.url} raised: {outcome}")
                outcome = FetchResult.failure(
                    source, f"Unexpected error: {type(outcome).__name__}: {outcome}"
                )
            results.append(outcome)

        failed = sum(1 for result in results if not result.success)
        logger.info(
            f"Aggregated {len(results)} feeds in {time.monotonic() - start_time:.2f}s "
            f"({failed} failed)"
        )
        return results

    def aggregate_sync(self, mix: Optional[Iterable[MixEntry]]) -> list[FetchResult]:
        """Run :meth:`aggregate` on a fresh event loop."""
        return asyncio.run(self.aggregate(mix))
