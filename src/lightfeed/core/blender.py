"""
Blend engine: merges per-feed results into one recency-ordered stream.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from lightfeed.core.fetcher import FetchResult
from lightfeed.core.parser import Article
from lightfeed.core.timeutil import utc_now_iso
from lightfeed.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BLEND_SIZE = 24


@dataclass
class FeedError:
    """A feed that could not be fetched or parsed."""

    feed_id: str
    feed_title: str
    feed_url: str
    message: str


@dataclass
class BlendResult:
    """Blended stream for one feed mix."""

    items: list[Article] = field(default_factory=list)
    feed_errors: list[FeedError] = field(default_factory=list)
    fetched_at: str = field(default_factory=utc_now_iso)


def make_item_key(article: Article) -> tuple[str, str, str]:
    """Dedup key: link, title and published timestamp."""
    return (article.link, article.title, article.published_at or "")


def blend_items_by_recency(results: Iterable[FetchResult], limit: int) -> list[Article]:
    """Merge the items of several feeds.

    Items are tagged with their feed, sorted newest first (ties keep feed
    order), deduplicated by :func:`make_item_key` and cut at ``limit``.

    Args:
        results: Per-feed fetch results
        limit: Maximum number of articles returned

    Returns:
        Blended article list
    """
    all_items = [
        item.with_source(result.feed_id, result.feed_title, result.feed_url, result.feed_image)
        for result in results
        for item in result.items
    ]
    if not all_items:
        return []

    all_items.sort(key=lambda item: item.published_at_ms, reverse=True)

    blended: list[Article] = []
    seen: set[tuple[str, str, str]] = set()

    for item in all_items:
        if len(blended) >= limit:
            break

        key = make_item_key(item)
        if key in seen:
            continue

        seen.add(key)
        blended.append(item)

    return blended


def collect_feed_errors(results: Iterable[FetchResult]) -> list[FeedError]:
    """One FeedError per failed result, in result order."""
    return [
        FeedError(
            feed_id=result.feed_id,
            feed_title=result.feed_title,
            feed_url=result.feed_url,
            message=result.error,
        )
        for result in results
        if result.error
    ]


class FeedBlender:
    """Turns aggregated FetchResults into a BlendResult."""

    def __init__(self, default_limit: Optional[int] = None):
        self.default_limit = default_limit or DEFAULT_BLEND_SIZE

    def blend(self, results: list[FetchResult], limit: Optional[int] = None) -> BlendResult:
        """Blend fetch results.

        Args:
            results: Per-feed fetch results
            limit: Maximum number of articles; non-positive values use the default

        Returns:
            BlendResult stamped with the completion time
        """
        target = limit if limit and limit > 0 else self.default_limit

        items = blend_items_by_recency(results, target)
        feed_errors = collect_feed_errors(results)

        logger.debug(
            f"Blended {len(items)} items from {len(results)} feeds "
            f"({len(feed_errors)} errors)"
        )
        return BlendResult(items=items, feed_errors=feed_errors, fetched_at=utc_now_iso())
