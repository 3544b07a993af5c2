"""
Factory functions for creating core components with configuration defaults.

Usage:
    from lightfeed.core.factories import create_aggregator, create_blender

    aggregator = create_aggregator(timeout_seconds=5)
    blender = create_blender()
"""

from typing import Optional

import httpx

from lightfeed.config import get_config
from lightfeed.core.aggregator import FeedAggregator
from lightfeed.core.blender import FeedBlender
from lightfeed.core.fetcher import FeedFetcher
from lightfeed.core.parser import FeedDocumentParser


def create_parser(
    max_items: Optional[int] = None,
    summary_max_length: Optional[int] = None,
) -> FeedDocumentParser:
    """Create a configured FeedDocumentParser instance.

    Args:
        max_items: Override the per-feed item cap
        summary_max_length: Override the summary length

    Returns:
        Configured FeedDocumentParser instance
    """
    config = get_config()
    return FeedDocumentParser(
        max_items=max_items or config.fetcher.max_items_per_feed,
        summary_max_length=summary_max_length or config.fetcher.summary_max_length,
    )


def create_fetcher(
    timeout_seconds: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    parser: Optional[FeedDocumentParser] = None,
    user_agent: Optional[str] = None,
) -> FeedFetcher:
    """Create a configured FeedFetcher instance.

    Args:
        timeout_seconds: Override default timeout
        transport: Optional httpx transport
        parser: Parser instance (a configured one is created when omitted)
        user_agent: Override the User-Agent header

    Returns:
        Configured FeedFetcher instance
    """
    config = get_config()
    return FeedFetcher(
        parser=parser or create_parser(),
        timeout_seconds=timeout_seconds or config.fetcher.timeout_seconds,
        user_agent=user_agent or config.fetcher.user_agent,
        transport=transport,
    )


def create_aggregator(
    timeout_seconds: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FeedAggregator:
    """Create a FeedAggregator over a configured fetcher."""
    return FeedAggregator(
        fetcher=create_fetcher(timeout_seconds=timeout_seconds, transport=transport)
    )


def create_blender(default_limit: Optional[int] = None) -> FeedBlender:
    """Create a FeedBlender using the configured page limit by default."""
    config = get_config()
    return FeedBlender(default_limit=default_limit or config.stream.default_page_limit)
