"""Core feed ingestion and blending pipeline for LightFeed.

External code (web layer, scripts) goes through the service facade:

    from lightfeed.core.services import FeedStreamService

Result and input types are re-exported here for type hints.
"""

from lightfeed.core.services import (
    FeedMixProvider,
    FeedStreamService,
    create_feed_stream_service,
)

# Result and input types
from lightfeed.core.blender import BlendResult, FeedError
from lightfeed.core.feed_request import FeedValidationError
from lightfeed.core.fetcher import FetchResult
from lightfeed.core.parser import Article, FeedSource, ParsedFeed

__all__ = [
    # Service facade
    "FeedMixProvider",
    "FeedStreamService",
    "create_feed_stream_service",
    # Types
    "Article",
    "BlendResult",
    "FeedError",
    "FeedSource",
    "FeedValidationError",
    "FetchResult",
    "ParsedFeed",
]
