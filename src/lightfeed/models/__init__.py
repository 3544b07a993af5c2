"""Data models for LightFeed."""

from lightfeed.models.base import Base
from lightfeed.models.page import (
    FeedInput,
    FeedModel,
    PageCreate,
    PageModel,
    PageUpdate,
    page_feeds,
)
from lightfeed.models.saved_article import SavedArticleCreate, SavedArticleModel

__all__ = [
    "Base",
    "PageModel",
    "FeedModel",
    "page_feeds",
    "FeedInput",
    "PageCreate",
    "PageUpdate",
    "SavedArticleModel",
    "SavedArticleCreate",
]
