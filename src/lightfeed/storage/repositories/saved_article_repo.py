"""
Saved article repository for database operations.
"""

import hashlib
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from lightfeed.core.feed_request import ensure_non_empty_text, to_nullable_text
from lightfeed.logger import get_logger
from lightfeed.models import SavedArticleCreate, SavedArticleModel

logger = get_logger(__name__)

DEFAULT_LIST_LIMIT = 500


def make_saved_article_id(link: str) -> str:
    """Stable saved-article id derived from the article link."""
    return hashlib.sha256(link.encode("utf-8")).hexdigest()[:24]


class SavedArticleRepository:
    """Repository for saved article snapshots, unique by link."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with a database session.

        Args:
            session: SQLAlchemy Session instance
        """
        self.session = session

    def get_by_link(self, link: str) -> Optional[SavedArticleModel]:
        return (
            self.session.query(SavedArticleModel)
            .filter(SavedArticleModel.link == link)
            .first()
        )

    def list(self, limit: int = DEFAULT_LIST_LIMIT) -> list[SavedArticleModel]:
        """List saved articles, most recently saved first.

        Args:
            limit: Maximum number of results

        Returns:
            List of SavedArticleModel instances
        """
        return (
            self.session.query(SavedArticleModel)
            .order_by(SavedArticleModel.saved_at.desc())
            .limit(limit)
            .all()
        )

    def list_saved_links(self, links: Iterable[str]) -> set[str]:
        """Subset of ``links`` that are saved.

        Args:
            links: Article links to check

        Returns:
            Set of saved links
        """
        normalized = {str(link).strip() for link in links or [] if link and str(link).strip()}
        if not normalized:
            return set()

        rows = (
            self.session.query(SavedArticleModel.link)
            .filter(SavedArticleModel.link.in_(normalized))
            .all()
        )
        return {row.link for row in rows}

    def save(self, data: SavedArticleCreate) -> SavedArticleModel:
        """Save an article snapshot; saving the same link again replaces it.

        Args:
            data: Article snapshot

        Returns:
            Saved SavedArticleModel instance

        Raises:
            FeedValidationError: If the link or title is empty
        """
        link = ensure_non_empty_text(data.link, "Article link")
        title = ensure_non_empty_text(data.title, "Article title")

        fields = {
            "article_id": to_nullable_text(data.article_id),
            "title": title,
            "summary": to_nullable_text(data.summary),
            "image_url": to_nullable_text(data.image_url),
            "source_feed_id": to_nullable_text(data.source_feed_id),
            "source_title": to_nullable_text(data.source_title),
            "source_url": to_nullable_text(data.source_url),
            "published_at": to_nullable_text(data.published_at),
            "published_label": to_nullable_text(data.published_label),
            "page_id": to_nullable_text(data.page_id),
            "page_name": to_nullable_text(data.page_name),
            "saved_at": datetime.utcnow(),
        }

        article = self.get_by_link(link)
        if article is None:
            article = SavedArticleModel(id=make_saved_article_id(link), link=link, **fields)
            self.session.add(article)
        else:
            for key, value in fields.items():
                setattr(article, key, value)

        self.session.flush()
        logger.debug(f"Saved article {link}")
        return article

    def remove_by_link(self, link: Optional[str]) -> bool:
        """Remove a saved article.

        Args:
            link: Article link

        Returns:
            True if removed, False if it was not saved
        """
        link = ensure_non_empty_text(link, "Article link")

        removed = (
            self.session.query(SavedArticleModel)
            .filter(SavedArticleModel.link == link)
            .delete(synchronize_session="fetch")
        )
        return removed > 0
