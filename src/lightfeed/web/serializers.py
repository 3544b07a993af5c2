"""
Serializer functions for converting models and core results to dictionaries.

API payloads use camelCase keys.
"""

from datetime import datetime
from typing import Any, Optional

from lightfeed.core.blender import BlendResult, FeedError
from lightfeed.core.parser import Article, FeedSource


def serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Convert a naive UTC datetime to an ISO string with a ``Z`` suffix.

    Args:
        dt: Datetime object or None

    Returns:
        ISO format string or None
    """
    if not dt:
        return None
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def article_to_dict(article: Article) -> dict:
    """Convert a blended Article to a dictionary."""
    return {
        "id": article.id,
        "title": article.title,
        "link": article.link,
        "summary": article.summary,
        "imageUrl": article.image_url,
        "publishedAt": article.published_at,
        "publishedAtMs": article.published_at_ms,
        "publishedLabel": article.published_label,
        "sourceFeedId": article.source_feed_id,
        "sourceTitle": article.source_title,
        "sourceUrl": article.source_url,
        "sourceImage": article.source_image,
    }


def feed_error_to_dict(error: FeedError) -> dict:
    return {
        "feedId": error.feed_id,
        "feedTitle": error.feed_title,
        "feedUrl": error.feed_url,
        "message": error.message,
    }


def feed_source_to_dict(source: FeedSource) -> dict:
    return {
        "feedId": source.feed_id,
        "title": source.title,
        "url": source.url,
    }


def blend_result_to_dict(result: BlendResult) -> dict:
    """Convert a BlendResult to a dictionary.

    Args:
        result: BlendResult instance

    Returns:
        Dictionary with items, feedErrors and fetchedAt
    """
    return {
        "items": [article_to_dict(item) for item in result.items],
        "feedErrors": [feed_error_to_dict(error) for error in result.feed_errors],
        "fetchedAt": result.fetched_at,
    }


def page_to_dict(page, feed_count: Optional[int] = None) -> dict:
    """Convert Page model to dictionary.

    Args:
        page: PageModel instance
        feed_count: Optional number of feeds in the page

    Returns:
        Dictionary representation
    """
    data = {
        "id": page.id,
        "name": page.name,
        "isHomepage": bool(page.is_homepage),
        "sortOrder": page.sort_order or 0,
        "createdAt": serialize_datetime(page.created_at),
    }
    if feed_count is not None:
        data["feedCount"] = feed_count
    return data


def saved_article_to_dict(article) -> dict:
    """Convert SavedArticle model to dictionary.

    Args:
        article: SavedArticleModel instance

    Returns:
        Dictionary representation
    """
    return {
        "id": article.id,
        "articleId": article.article_id,
        "title": article.title,
        "link": article.link,
        "summary": article.summary,
        "imageUrl": article.image_url,
        "sourceFeedId": article.source_feed_id,
        "sourceTitle": article.source_title,
        "sourceUrl": article.source_url,
        "publishedAt": article.published_at,
        "publishedLabel": article.published_label,
        "pageId": article.page_id,
        "pageName": article.page_name,
        "savedAt": serialize_datetime(article.saved_at),
    }


def api_response(
    success: bool = True,
    data: Any = None,
    message: str = None,
    error: str = None,
    status: int = 200
) -> tuple:
    """Standard API response format.

    Args:
        success: Whether the request was successful
        data: Response data
        message: Success message
        error: Error message
        status: HTTP status code

    Returns:
        Flask response with JSON data
    """
    from flask import jsonify

    response_data = {
        "success": success,
        "data": data,
        "message": message,
        "error": error,
    }
    return jsonify(response_data), status
