"""
Validation of caller-supplied feed lists.

Everything here runs before any network activity; a single invalid entry
rejects the whole request.
"""

from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

from lightfeed.config import get_config


class FeedValidationError(ValueError):
    """Raised when a request's feed list or page payload is invalid."""


def ensure_non_empty_text(value: Any, field_name: str) -> str:
    """Return the stripped text, or raise when it is empty."""
    normalized = str(value if value is not None else "").strip()
    if not normalized:
        raise FeedValidationError(f"{field_name} is required.")
    return normalized


def to_nullable_text(value: Any) -> Optional[str]:
    """Stripped text, or None when empty."""
    normalized = str(value if value is not None else "").strip()
    return normalized or None


def normalize_feed_url(
    value: Any,
    field_name: str = "Feed URL",
    missing_message: Optional[str] = None,
) -> str:
    """Validate and normalize an http(s) feed URL.

    Args:
        value: Raw URL
        field_name: Label used in error messages
        missing_message: Message used when the URL is empty

    Returns:
        URL with lowercased scheme and host and a ``/`` path when empty

    Raises:
        FeedValidationError: If the URL is empty, malformed or not http(s)
    """
    url = str(value if value is not None else "").strip()
    if not url:
        raise FeedValidationError(missing_message or f"{field_name} is required.")

    try:
        parts = urlsplit(url)
        parts.port  # raises on a malformed port
    except ValueError:
        raise FeedValidationError(f"{field_name} must be a valid URL.")

    if not parts.scheme:
        raise FeedValidationError(f"{field_name} must be a valid URL.")

    scheme = parts.scheme.lower()
    if scheme not in ("http", "https"):
        raise FeedValidationError(f"{field_name} must use http or https.")

    if not parts.hostname:
        raise FeedValidationError(f"{field_name} must be a valid URL.")

    userinfo, at, hostport = parts.netloc.rpartition("@")
    return urlunsplit(
        (scheme, f"{userinfo}{at}{hostport.lower()}", parts.path or "/", parts.query, parts.fragment)
    )


def normalize_request_feeds(raw_feeds: Any, max_feeds: Optional[int] = None) -> list[str]:
    """Validate an ad-hoc feed list.

    Args:
        raw_feeds: List of ``{"url": ...}`` mappings or plain URL strings
        max_feeds: Maximum number of feeds (defaults to the configured cap)

    Returns:
        Normalized URLs in request order

    Raises:
        FeedValidationError: If the list is empty, too long, contains an
            invalid URL or repeats a URL
    """
    max_feeds = max_feeds or get_config().stream.max_feeds_per_request
    feeds = raw_feeds if isinstance(raw_feeds, (list, tuple)) else []

    if not feeds:
        raise FeedValidationError("Provide at least one RSS feed.")

    if len(feeds) > max_feeds:
        raise FeedValidationError(f"A maximum of {max_feeds} feeds is allowed.")

    urls = []
    for index, feed in enumerate(feeds, start=1):
        raw_url = feed.get("url") if isinstance(feed, dict) else feed
        urls.append(
            normalize_feed_url(
                raw_url,
                field_name=f"Feed {index}",
                missing_message=f"Feed {index} is missing an RSS URL.",
            )
        )

    if len(set(urls)) != len(urls):
        raise FeedValidationError("Duplicate feed URLs are not allowed.")

    return urls
