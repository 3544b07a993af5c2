"""Unit tests for the feed stream service."""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from lightfeed.core import (
    Article,
    BlendResult,
    FeedSource,
    FeedStreamService,
    FeedValidationError,
    FetchResult,
    create_feed_stream_service,
)
from lightfeed.core.factories import create_aggregator


class StubProvider:
    """Feed mix provider backed by a dictionary."""

    def __init__(self, mixes: dict):
        self.mixes = mixes

    def list_page_feed_mix(self, page_id: str) -> list[FeedSource]:
        return self.mixes.get(page_id, [])


@pytest.fixture
def mock_aggregator():
    """Aggregator returning one successful and one failed result."""
    aggregator = Mock()
    aggregator.aggregate = AsyncMock(
        return_value=[
            FetchResult(
                feed_id="tech",
                feed_title="Tech",
                feed_url="https://tech.example.com/rss",
                items=[
                    Article(id=f"tech-{i}", title=f"Post {i}", link=f"https://tech.example.com/{i}", published_at_ms=i)
                    for i in range(1, 31)
                ],
            ),
            FetchResult(
                feed_id="down",
                feed_title="Down",
                feed_url="https://down.example.com/rss",
                error="HTTP 503 Service Unavailable",
            ),
        ]
    )
    return aggregator


class TestFeedStreamFromMix:
    """Tests for get_feed_stream_from_mix."""

    def test_empty_mix_skips_network(self, mock_aggregator):
        """Test that an empty mix returns immediately."""
        service = FeedStreamService(aggregator=mock_aggregator)

        stream = service.get_feed_stream_from_mix_sync([])

        assert stream.items == []
        assert stream.feed_errors == []
        mock_aggregator.aggregate.assert_not_called()

    def test_mix_without_urls_skips_network(self, mock_aggregator):
        """Test that entries without URLs are ignored."""
        service = FeedStreamService(aggregator=mock_aggregator)

        stream = service.get_feed_stream_from_mix_sync([{"title": "No URL"}])

        assert isinstance(stream, BlendResult)
        mock_aggregator.aggregate.assert_not_called()

    def test_default_limit(self, mock_aggregator):
        """Test the default page limit."""
        service = FeedStreamService(aggregator=mock_aggregator)
        mix = [{"feedId": "tech", "url": "https://tech.example.com/rss"}]

        stream = service.get_feed_stream_from_mix_sync(mix)

        assert len(stream.items) == 24
        assert stream.items[0].title == "Post 30"
        assert [error.feed_id for error in stream.feed_errors] == ["down"]

    def test_explicit_limit(self, mock_aggregator):
        """Test an explicit limit and the fallback for invalid ones."""
        service = FeedStreamService(aggregator=mock_aggregator)
        mix = [{"url": "https://tech.example.com/rss"}]

        assert len(service.get_feed_stream_from_mix_sync(mix, limit=5).items) == 5
        assert len(service.get_feed_stream_from_mix_sync(mix, limit=0).items) == 24


class TestPageFeedStream:
    """Tests for get_page_feed_stream."""

    def test_uses_provider_mix(self, mock_aggregator):
        """Test that the page mix comes from the provider."""
        mix = [FeedSource(feed_id="tech", title="Tech", url="https://tech.example.com/rss")]
        service = create_feed_stream_service(
            aggregator=mock_aggregator, feed_mix_provider=StubProvider({"tech": mix})
        )

        stream = service.get_page_feed_stream_sync("tech", limit=3)

        assert len(stream.items) == 3
        mock_aggregator.aggregate.assert_awaited_once_with(mix)

    def test_unknown_page_is_empty(self, mock_aggregator):
        """Test that a page without feeds gives an empty stream."""
        service = FeedStreamService(aggregator=mock_aggregator, feed_mix_provider=StubProvider({}))

        assert service.get_page_feed_stream_sync("missing").items == []
        mock_aggregator.aggregate.assert_not_called()

    def test_requires_provider(self, mock_aggregator):
        """Test that page streams need a provider."""
        service = FeedStreamService(aggregator=mock_aggregator)

        with pytest.raises(RuntimeError):
            service.get_page_feed_stream_sync("tech")


class TestPreviewFeeds:
    """Tests for preview_feeds."""

    def test_preview(self, make_rss):
        """Test an ad-hoc preview through the whole pipeline."""
        requested = []

        def handler(request):
            requested.append(str(request.url))
            host = request.url.host
            return httpx.Response(200, text=make_rss([{"title": host, "link": f"https://{host}/post"}]))

        service = FeedStreamService(aggregator=create_aggregator(transport=httpx.MockTransport(handler)))

        mix, stream = service.preview_feeds_sync(
            [{"url": "https://www.one.example.com/rss"}, {"url": "https://two.example.com/rss"}]
        )

        assert [(source.feed_id, source.title) for source in mix] == [
            ("custom-1", "one.example.com"),
            ("custom-2", "two.example.com"),
        ]
        assert sorted(requested) == ["https://two.example.com/rss", "https://www.one.example.com/rss"]
        assert {item.source_feed_id for item in stream.items} == {"custom-1", "custom-2"}
        assert stream.feed_errors == []

    def test_validation_before_network(self, mock_aggregator):
        """Test that an invalid list never reaches the aggregator."""
        service = FeedStreamService(aggregator=mock_aggregator)

        with pytest.raises(FeedValidationError, match="Feed 2 must use http or https."):
            service.preview_feeds_sync(
                [{"url": "https://ok.example.com/rss"}, {"url": "ftp://bad.example.com/rss"}]
            )

        mock_aggregator.aggregate.assert_not_called()

    def test_preview_limit(self, mock_aggregator):
        """Test that previews use the preview limit."""
        service = FeedStreamService(aggregator=mock_aggregator)

        _, stream = service.preview_feeds_sync([{"url": "https://tech.example.com/rss"}])

        assert service.preview_limit == 28
        assert len(stream.items) == 28
