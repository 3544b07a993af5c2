"""Repository pattern implementations for data access."""

from lightfeed.storage.repositories.page_repo import PageNotFoundError, PageRepository
from lightfeed.storage.repositories.saved_article_repo import SavedArticleRepository

__all__ = [
    "PageNotFoundError",
    "PageRepository",
    "SavedArticleRepository",
]
