"""Unit tests for feed fetcher."""

import asyncio
from unittest.mock import Mock

import httpx
import pytest

from lightfeed.core import FeedSource, FetchResult
from lightfeed.core.factories import create_fetcher
from lightfeed.core.fetcher import FeedFetcher, decode_body
from lightfeed.core.parser import Article


@pytest.fixture
def source():
    """Create a feed source."""
    return FeedSource(feed_id="feed-1", title="Test Feed", url="https://example.com/feed.xml")


def make_fetcher(handler, **kwargs) -> FeedFetcher:
    """Fetcher whose requests are answered by ``handler``."""
    return create_fetcher(transport=httpx.MockTransport(handler), **kwargs)


def run_fetch(fetcher: FeedFetcher, source: FeedSource) -> FetchResult:
    return asyncio.run(fetcher.fetch(source))


class TestFetchResult:
    """Tests for FetchResult dataclass."""

    def test_successful_result(self):
        """Test creating a successful result."""
        result = FetchResult(
            feed_id="feed-1",
            feed_title="Test Feed",
            feed_url="https://example.com/feed.xml",
            items=[Article(id="a", title="A", link="https://example.com/a")],
        )

        assert result.success is True
        assert result.error is None

    def test_failure_factory(self, source):
        """Test building an error result from a source."""
        result = FetchResult.failure(source, "Network error", http_status=502)

        assert result.success is False
        assert result.items == []
        assert result.feed_title == "Test Feed"
        assert result.http_status == 502

    def test_result_validation(self):
        """Test that a failed result cannot carry items."""
        with pytest.raises(ValueError):
            FetchResult(
                feed_id="feed-1",
                feed_title="Test Feed",
                feed_url="https://example.com/feed.xml",
                items=[Article(id="a", title="A", link="https://example.com/a")],
                error="Should not have items",
            )


class TestDecodeBody:
    """Tests for response body decoding."""

    def test_declared_charset(self):
        """Test that the response charset wins."""
        assert decode_body("café".encode("utf-8"), "utf-8") == "café"

    def test_xml_declaration(self):
        """Test the encoding named in the XML declaration."""
        body = '<?xml version="1.0" encoding="ISO-8859-1"?><a>é</a>'.encode("iso-8859-1")
        assert "é" in decode_body(body)

    def test_unknown_charset_falls_back_to_utf8(self):
        """Test that an unknown charset is ignored."""
        assert decode_body("ü".encode("utf-8"), "x-no-such-charset") == "ü"

    def test_invalid_bytes_replaced(self):
        """Test that undecodable bytes do not raise."""
        assert decode_body(b"ok \xff") == "ok �"


class TestFeedFetcher:
    """Tests for FeedFetcher."""

    def test_fetch_success(self, source, rss_document):
        """Test a successful fetch."""
        fetcher = make_fetcher(
            lambda request: httpx.Response(
                200,
                content=rss_document.encode("utf-8"),
                headers={"Content-Type": "application/rss+xml; charset=utf-8"},
            )
        )

        result = run_fetch(fetcher, source)

        assert result.success is True
        assert result.http_status == 200
        assert result.feed_title == "Example & Co"
        assert result.feed_image == "https://example.com/logo.png"
        assert [item.title for item in result.items] == ["Newer post", "Older post"]
        assert result.fetch_time_seconds >= 0

    def test_request_headers(self, source, rss_document):
        """Test the headers sent with every request."""
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, text=rss_document)

        fetcher = make_fetcher(handler, user_agent="TestAgent/1.0")
        run_fetch(fetcher, source)

        assert seen["user-agent"] == "TestAgent/1.0"
        assert "application/rss+xml" in seen["accept"]
        assert seen["cache-control"] == "no-cache"

    def test_untitled_feed_keeps_configured_title(self, source):
        """Test that the configured title is used when the feed has none."""
        fetcher = make_fetcher(
            lambda request: httpx.Response(
                200, text="<rss><channel><item><link>https://example.com/a</link></item></channel></rss>"
            )
        )

        result = run_fetch(fetcher, source)
        assert result.feed_title == "Test Feed"

    def test_http_error_status(self, source):
        """Test a non-success status."""
        fetcher = make_fetcher(lambda request: httpx.Response(500, text="oops"))

        result = run_fetch(fetcher, source)

        assert result.success is False
        assert result.error == "HTTP 500 Internal Server Error"
        assert result.http_status == 500
        assert result.items == []
        assert result.feed_title == "Test Feed"

    def test_not_found_status(self, source):
        """Test a 404 status."""
        fetcher = make_fetcher(lambda request: httpx.Response(404))
        assert run_fetch(fetcher, source).error == "HTTP 404 Not Found"

    def test_network_error(self, source):
        """Test a transport failure."""

        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        result = run_fetch(make_fetcher(handler), source)

        assert result.success is False
        assert result.error == "Connection refused"
        assert result.http_status is None

    def test_timeout(self, source):
        """Test that a slow feed is cut off at the timeout."""

        async def handler(request):
            await asyncio.sleep(2)
            return httpx.Response(200, text="<rss/>")

        fetcher = make_fetcher(handler, timeout_seconds=0.05)
        result = run_fetch(fetcher, source)

        assert result.success is False
        assert result.error == "Timed out after 50 ms"
        assert result.fetch_time_seconds < 2

    def test_timeout_message_default(self):
        """Test the message for the default timeout."""
        fetcher = FeedFetcher()

        assert fetcher.timeout_seconds == 9.0
        assert fetcher.timeout_message == "Timed out after 9000 ms"

    def test_httpx_timeout_exception(self, source):
        """Test a timeout raised by the transport itself."""

        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        result = run_fetch(make_fetcher(handler), source)
        assert result.error == "Timed out after 9000 ms"

    def test_parser_failure(self, source):
        """Test that a parser crash becomes an error result."""
        parser = Mock()
        parser.parse.side_effect = RuntimeError("boom")

        fetcher = make_fetcher(lambda request: httpx.Response(200, text="<rss/>"), parser=parser)
        result = run_fetch(fetcher, source)

        assert result.success is False
        assert result.error == "Unexpected error: RuntimeError: boom"

    def test_shared_client(self, source, rss_document):
        """Test fetching through a caller-provided client."""
        calls = []

        def handler(request):
            calls.append(str(request.url))
            return httpx.Response(200, text=rss_document)

        fetcher = make_fetcher(handler)

        async def fetch_twice():
            async with fetcher.open_client() as client:
                return [await fetcher.fetch(source, client) for _ in range(2)]

        results = asyncio.run(fetch_twice())

        assert all(result.success for result in results)
        assert calls == [source.url, source.url]
