"""
Page repository for database operations.
"""

import hashlib
import re
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lightfeed.core.aggregator import infer_feed_title_from_url
from lightfeed.core.feed_request import (
    FeedValidationError,
    ensure_non_empty_text,
    normalize_feed_url,
    to_nullable_text,
)
from lightfeed.core.parser import FeedSource
from lightfeed.logger import get_logger
from lightfeed.models import FeedInput, FeedModel, PageCreate, PageModel, PageUpdate, page_feeds

logger = get_logger(__name__)

UNKNOWN_FEED_TITLE = "Unknown Feed"
MAX_SLUG_LENGTH = 48

_SLUG_RE = re.compile(r"[^a-z0-9]+")


class PageNotFoundError(LookupError):
    """Raised when a page id does not exist."""


def slugify(value: Optional[str]) -> str:
    """Lowercase ``[a-z0-9]`` runs joined by dashes, at most 48 characters."""
    slug = _SLUG_RE.sub("-", str(value or "").lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH]


def make_feed_id(url: str) -> str:
    """Stable feed id derived from the feed URL."""
    return f"feed-{hashlib.sha256(url.encode('utf-8')).hexdigest()[:24]}"


def _normalize_feed_inputs(feeds: list[FeedInput]) -> list[tuple[str, str]]:
    """Validate a page's feed list into ``(url, title)`` pairs."""
    if not feeds:
        raise FeedValidationError("At least one feed is required.")

    normalized = []
    seen_urls = set()
    for index, feed in enumerate(feeds, start=1):
        url = normalize_feed_url(feed.url, f"Feed {index} URL")
        if url in seen_urls:
            raise FeedValidationError("Duplicate feed URLs are not allowed.")
        seen_urls.add(url)
        normalized.append((url, to_nullable_text(feed.title) or infer_feed_title_from_url(url)))

    return normalized


class PageRepository:
    """Repository for Page CRUD operations and page feed mixes."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with a database session.

        Args:
            session: SQLAlchemy Session instance
        """
        self.session = session

    def list_pages(self) -> list[PageModel]:
        """List pages in display order."""
        return (
            self.session.query(PageModel)
            .order_by(PageModel.sort_order.asc(), PageModel.created_at.asc(), PageModel.id.asc())
            .all()
        )

    def list_pages_with_stats(self) -> list[tuple[PageModel, int]]:
        """List pages in display order with their feed counts.

        Returns:
            List of (PageModel, feed_count) tuples
        """
        rows = (
            self.session.query(PageModel, func.count(page_feeds.c.feed_id))
            .outerjoin(page_feeds, page_feeds.c.page_id == PageModel.id)
            .group_by(PageModel.id)
            .order_by(PageModel.sort_order.asc(), PageModel.created_at.asc(), PageModel.id.asc())
            .all()
        )
        return [(page, int(feed_count or 0)) for page, feed_count in rows]

    def get_by_id(self, page_id: Optional[str]) -> Optional[PageModel]:
        """Get a page by id.

        Args:
            page_id: Page id

        Returns:
            PageModel instance or None
        """
        page_id = str(page_id or "").strip()
        if not page_id:
            return None
        return self.session.get(PageModel, page_id)

    def get_homepage(self) -> Optional[PageModel]:
        """The homepage, or the first page when none is flagged."""
        return (
            self.session.query(PageModel)
            .order_by(
                PageModel.is_homepage.desc(),
                PageModel.sort_order.asc(),
                PageModel.created_at.asc(),
            )
            .first()
        )

    def list_page_feed_mix(self, page_id: Optional[str]) -> list[FeedSource]:
        """Feed mix of a page, ordered by title (case-insensitive) then feed id.

        Args:
            page_id: Page id

        Returns:
            List of FeedSource (empty for unknown pages)
        """
        page_id = str(page_id or "").strip()
        if not page_id:
            return []

        rows = (
            self.session.query(FeedModel)
            .join(page_feeds, page_feeds.c.feed_id == FeedModel.id)
            .filter(page_feeds.c.page_id == page_id)
            .order_by(func.lower(FeedModel.title).asc(), FeedModel.id.asc())
            .all()
        )
        return [
            FeedSource(feed_id=feed.id, title=feed.title or UNKNOWN_FEED_TITLE, url=feed.url or "")
            for feed in rows
        ]

    def create(self, data: PageCreate) -> PageModel:
        """Create a page with its feed mix.

        Args:
            data: Page creation payload

        Returns:
            Created PageModel instance

        Raises:
            FeedValidationError: If the name or feed list is invalid
        """
        name = ensure_non_empty_text(data.name, "Page name")
        feeds = _normalize_feed_inputs(data.feeds)

        page_id = self._make_page_id(data.id, name)
        max_sort_order = self.session.query(func.max(PageModel.sort_order)).scalar()

        if data.is_homepage:
            self._clear_homepage()

        page = PageModel(
            id=page_id,
            name=name,
            is_homepage=data.is_homepage,
            sort_order=(max_sort_order or 0) + 1,
            created_at=datetime.utcnow(),
        )
        page.feeds = self._upsert_feeds(feeds)

        self.session.add(page)
        self.session.flush()

        logger.info(f"Created page '{page.id}' with {len(feeds)} feeds")
        return page

    def update(self, page_id: str, data: PageUpdate) -> PageModel:
        """Update a page; only fields present in the payload are applied.

        Args:
            page_id: Page id
            data: Page update payload

        Returns:
            Updated PageModel instance

        Raises:
            PageNotFoundError: If the page does not exist
            FeedValidationError: If the payload is empty or invalid
        """
        page = self.get_by_id(page_id)
        if page is None:
            raise PageNotFoundError("Page not found.")

        provided = data.model_fields_set & {"name", "is_homepage", "feeds"}
        if not provided:
            raise FeedValidationError("No updates were provided.")

        name = ensure_non_empty_text(data.name, "Page name") if "name" in provided else page.name
        is_homepage = bool(data.is_homepage) if "is_homepage" in provided else page.is_homepage
        feeds = _normalize_feed_inputs(data.feeds or []) if "feeds" in provided else None

        if is_homepage:
            self._clear_homepage(except_id=page.id)

        page.name = name
        page.is_homepage = is_homepage

        if feeds is not None:
            page.feeds = self._upsert_feeds(feeds)
            self.session.flush()
            self._cleanup_orphan_feeds()

        self.session.flush()
        logger.info(f"Updated page '{page.id}'")
        return page

    def reorder(self, page_ids: Optional[list]) -> list[PageModel]:
        """Set the display order of all pages.

        Args:
            page_ids: Every page id, in the new order

        Returns:
            Pages in their new order

        Raises:
            FeedValidationError: If the order is empty, repeats or misses pages
        """
        normalized = [
            str(page_id).strip()
            for page_id in (page_ids if isinstance(page_ids, list) else [])
            if page_id is not None and str(page_id).strip()
        ]

        if not normalized:
            raise FeedValidationError("Page order is required.")

        if len(set(normalized)) != len(normalized):
            raise FeedValidationError("Page order contains duplicate entries.")

        pages = {page.id: page for page in self.session.query(PageModel).all()}
        if not pages:
            return []

        if len(normalized) != len(pages):
            raise FeedValidationError("Page order must include all pages.")

        for page_id in normalized:
            if page_id not in pages:
                raise FeedValidationError(f'Page "{page_id}" was not found.')

        for index, page_id in enumerate(normalized, start=1):
            pages[page_id].sort_order = index

        self.session.flush()
        return self.list_pages()

    def delete(self, page_id: str) -> bool:
        """Delete a page and the feeds no other page uses.

        Args:
            page_id: Page id

        Returns:
            True if deleted, False if not found
        """
        page = self.get_by_id(page_id)
        if page is None:
            return False

        self.session.delete(page)
        self.session.flush()
        self._cleanup_orphan_feeds()

        logger.info(f"Deleted page '{page_id}'")
        return True

    def _make_page_id(self, requested_id: Optional[str], name: str) -> str:
        base = slugify(requested_id) or slugify(name) or "page"
        candidate = base
        suffix = 2

        while self.session.get(PageModel, candidate) is not None:
            candidate = f"{base}-{suffix}"
            suffix += 1

        return candidate

    def _clear_homepage(self, except_id: Optional[str] = None) -> None:
        query = self.session.query(PageModel).filter(PageModel.is_homepage.is_(True))
        if except_id is not None:
            query = query.filter(PageModel.id != except_id)

        for page in query.all():
            page.is_homepage = False

    def _upsert_feeds(self, feeds: list[tuple[str, str]]) -> list[FeedModel]:
        models = []
        for url, title in feeds:
            feed_id = make_feed_id(url)
            feed = self.session.get(FeedModel, feed_id)
            if feed is None:
                feed = FeedModel(id=feed_id, url=url, title=title, created_at=datetime.utcnow())
                self.session.add(feed)
            else:
                feed.title = title or feed.title
            models.append(feed)
        return models

    def _cleanup_orphan_feeds(self) -> None:
        linked_feed_ids = select(page_feeds.c.feed_id).distinct()
        removed = (
            self.session.query(FeedModel)
            .filter(FeedModel.id.not_in(linked_feed_ids))
            .delete(synchronize_session="fetch")
        )
        if removed:
            logger.debug(f"Removed {removed} orphan feeds")
