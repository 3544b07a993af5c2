"""
Facade for building blended feed streams.

Wires the aggregator, the blender and a feed-mix provider together.
"""

import asyncio
from typing import Any, Iterable, Optional, Protocol

from lightfeed.config import get_config
from lightfeed.core.aggregator import FeedAggregator, MixEntry, infer_feed_title_from_url, normalize_feed_mix
from lightfeed.core.blender import BlendResult, FeedBlender
from lightfeed.core.feed_request import normalize_request_feeds
from lightfeed.core.parser import FeedSource
from lightfeed.logger import get_logger

logger = get_logger(__name__)


class FeedMixProvider(Protocol):
    """Source of the feed mix of a persisted page."""

    def list_page_feed_mix(self, page_id: str) -> list[FeedSource]:
        ...


class FeedStreamService:
    """Facade for blended feed streams.

    Provides the operations the web layer needs: stream for an explicit mix,
    stream for a stored page, and preview of an ad-hoc feed list.
    """

    def __init__(
        self,
        aggregator: Optional[FeedAggregator] = None,
        blender: Optional[FeedBlender] = None,
        feed_mix_provider: Optional[FeedMixProvider] = None,
    ):
        """Initialize feed stream service.

        Args:
            aggregator: Aggregator used to fetch mixes
            blender: Blender used to merge fetch results
            feed_mix_provider: Provider resolving page ids to feed mixes
        """
        from lightfeed.core.factories import create_aggregator, create_blender

        config = get_config()

        self.aggregator = aggregator or create_aggregator()
        self.blender = blender or create_blender()
        self.feed_mix_provider = feed_mix_provider
        self.default_limit = config.stream.default_page_limit
        self.preview_limit = config.stream.preview_limit
        self.max_feeds = config.stream.max_feeds_per_request

    async def get_feed_stream_from_mix(
        self,
        mix: Optional[Iterable[MixEntry]],
        limit: Optional[int] = None,
    ) -> BlendResult:
        """Fetch and blend a feed mix.

        Args:
            mix: Feed mix; entries without a URL are ignored
            limit: Maximum number of articles; non-positive or missing values
                use the default page limit

        Returns:
            BlendResult (empty, without any network call, for an empty mix)
        """
        target = limit if limit and limit > 0 else self.default_limit
        sources = normalize_feed_mix(mix)

        if not sources:
            return BlendResult()

        results = await self.aggregator.aggregate(sources)
        return self.blender.blend(results, target)

    async def get_page_feed_stream(self, page_id: str, limit: Optional[int] = None) -> BlendResult:
        """Blend the feed mix of a stored page."""
        if self.feed_mix_provider is None:
            raise RuntimeError("No feed mix provider configured")

        mix = self.feed_mix_provider.list_page_feed_mix(page_id)
        logger.debug(f"Page {page_id} has {len(mix)} feeds")
        return await self.get_feed_stream_from_mix(mix, limit)

    async def preview_feeds(
        self,
        raw_feeds: Any,
        limit: Optional[int] = None,
    ) -> tuple[list[FeedSource], BlendResult]:
        """Validate and blend an ad-hoc feed list.

        Args:
            raw_feeds: List of ``{"url": ...}`` entries
            limit: Maximum number of articles (defaults to the preview limit)

        Returns:
            Tuple of (feed mix, BlendResult)

        Raises:
            FeedValidationError: If the feed list is invalid
        """
        urls = normalize_request_feeds(raw_feeds, self.max_feeds)
        mix = [
            FeedSource(
                feed_id=f"custom-{index}",
                title=infer_feed_title_from_url(url),
                url=url,
            )
            for index, url in enumerate(urls, start=1)
        ]

        target = limit if limit and limit > 0 else self.preview_limit
        return mix, await self.get_feed_stream_from_mix(mix, target)

    def get_feed_stream_from_mix_sync(
        self,
        mix: Optional[Iterable[MixEntry]],
        limit: Optional[int] = None,
    ) -> BlendResult:
        return asyncio.run(self.get_feed_stream_from_mix(mix, limit))

    def get_page_feed_stream_sync(self, page_id: str, limit: Optional[int] = None) -> BlendResult:
        return asyncio.run(self.get_page_feed_stream(page_id, limit))

    def preview_feeds_sync(
        self,
        raw_feeds: Any,
        limit: Optional[int] = None,
    ) -> tuple[list[FeedSource], BlendResult]:
        return asyncio.run(self.preview_feeds(raw_feeds, limit))


def create_feed_stream_service(
    aggregator: Optional[FeedAggregator] = None,
    blender: Optional[FeedBlender] = None,
    feed_mix_provider: Optional[FeedMixProvider] = None,
) -> FeedStreamService:
    """Create a FeedStreamService instance.

    Args:
        aggregator: Optional aggregator override
        blender: Optional blender override
        feed_mix_provider: Provider for page feed mixes

    Returns:
        Configured FeedStreamService
    """
    return FeedStreamService(
        aggregator=aggregator,
        blender=blender,
        feed_mix_provider=feed_mix_provider,
    )
