"""Unit tests for concurrent feed aggregation."""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from lightfeed.core import FeedSource
from lightfeed.core.aggregator import (
    DEFAULT_FEED_TITLE,
    FeedAggregator,
    infer_feed_title_from_url,
    normalize_feed_mix,
)
from lightfeed.core.factories import create_aggregator


class TestInferFeedTitle:
    """Tests for hostname-derived titles."""

    def test_strips_www(self):
        """Test that a leading www. is removed."""
        assert infer_feed_title_from_url("https://www.example.com/rss") == "example.com"

    def test_keeps_subdomain(self):
        """Test other subdomains are kept."""
        assert infer_feed_title_from_url("https://blog.example.com/rss") == "blog.example.com"

    @pytest.mark.parametrize("url", ["", "not a url", "https://[broken/rss"])
    def test_fallback(self, url):
        """Test the fallback title for URLs without a hostname."""
        assert infer_feed_title_from_url(url) == DEFAULT_FEED_TITLE


class TestNormalizeFeedMix:
    """Tests for feed mix normalization."""

    def test_defaults(self):
        """Test generated ids, inferred titles and dropped entries."""
        mix = normalize_feed_mix(
            [
                {"url": " https://a.example.com/rss "},
                {"feedId": "b", "title": "  ", "url": "https://www.b.example.com/feed"},
                {"title": "No URL"},
                {"feed_id": "d", "title": "Dee", "url": "https://d.example.com/"},
            ]
        )

        assert mix == [
            FeedSource(feed_id="custom-1", title="a.example.com", url="https://a.example.com/rss"),
            FeedSource(feed_id="b", title="b.example.com", url="https://www.b.example.com/feed"),
            FeedSource(feed_id="d", title="Dee", url="https://d.example.com/"),
        ]

    def test_feed_sources_pass_through(self):
        """Test that complete FeedSources are kept as is."""
        source = FeedSource(feed_id="x", title="X", url="https://x.example.com/rss")
        assert normalize_feed_mix([source]) == [source]

    def test_empty(self):
        """Test empty and missing mixes."""
        assert normalize_feed_mix([]) == []
        assert normalize_feed_mix(None) == []


class TestFeedAggregator:
    """Tests for FeedAggregator."""

    def test_failure_is_isolated(self, make_rss):
        """Test that one failing feed does not affect the others."""

        def handler(request):
            if request.url.host == "bad.example.com":
                return httpx.Response(500)
            return httpx.Response(
                200,
                text=make_rss(
                    [{"title": request.url.host, "link": f"https://{request.url.host}/post"}],
                    title=request.url.host,
                ),
            )

        aggregator = create_aggregator(transport=httpx.MockTransport(handler))
        mix = [
            {"feedId": "one", "title": "One", "url": "https://one.example.com/rss"},
            {"feedId": "bad", "title": "Bad", "url": "https://bad.example.com/rss"},
            {"feedId": "two", "title": "Two", "url": "https://two.example.com/rss"},
        ]

        results = aggregator.aggregate_sync(mix)

        assert [result.feed_id for result in results] == ["one", "bad", "two"]
        assert results[0].success and results[2].success
        assert results[1].error == "HTTP 500 Internal Server Error"
        assert results[1].feed_title == "Bad"
        assert results[0].items[0].title == "one.example.com"

    def test_fetches_concurrently(self, rss_document):
        """Test that all feeds are in flight at the same time."""
        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.05)
            in_flight -= 1
            return httpx.Response(200, text=rss_document)

        aggregator = create_aggregator(transport=httpx.MockTransport(handler))
        mix = [{"url": f"https://feed{i}.example.com/rss"} for i in range(4)]

        results = aggregator.aggregate_sync(mix)

        assert len(results) == 4
        assert peak == 4

    def test_task_exception_becomes_failure(self):
        """Test that an exception escaping a fetch is converted to a result."""
        aggregator = FeedAggregator()

        async def explode(source, client=None):
            raise RuntimeError("fetch crashed")

        with patch.object(aggregator.fetcher, "fetch", side_effect=explode):
            results = aggregator.aggregate_sync([{"url": "https://x.example.com/rss"}])

        assert results[0].error == "Unexpected error: RuntimeError: fetch crashed"

    def test_empty_mix_makes_no_requests(self):
        """Test that an empty mix never opens a client."""
        aggregator = FeedAggregator()

        with patch.object(aggregator.fetcher, "open_client") as open_client:
            results = aggregator.aggregate_sync([{"title": "No URL"}])

        assert results == []
        open_client.assert_not_called()
