"""
Facade services for core modules.

The web layer talks to these services rather than to the fetcher, parser or
blender directly.

Example:
    from lightfeed.core.services import create_feed_stream_service

    service = create_feed_stream_service(feed_mix_provider=provider)
    result = service.get_page_feed_stream_sync("tech")
"""

from lightfeed.core.services.stream_service import (
    FeedMixProvider,
    FeedStreamService,
    create_feed_stream_service,
)

__all__ = [
    "FeedMixProvider",
    "FeedStreamService",
    "create_feed_stream_service",
]
