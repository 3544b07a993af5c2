"""
Pages API blueprint.

Page CRUD, page reordering and the live stream of a single page.
"""

from flask import Blueprint, request
from pydantic import ValidationError

from lightfeed.config import get_config
from lightfeed.core.feed_request import FeedValidationError, normalize_request_feeds
from lightfeed.core.services import FeedStreamService
from lightfeed.logger import get_logger
from lightfeed.models import PageCreate, PageUpdate
from lightfeed.storage.database import DatabaseManager
from lightfeed.storage.repositories import PageNotFoundError, PageRepository
from lightfeed.web.serializers import (
    api_response,
    blend_result_to_dict,
    feed_source_to_dict,
    page_to_dict,
)

logger = get_logger(__name__)


class PageBlueprint:
    """Blueprint for page operations."""

    def __init__(self, db: DatabaseManager, stream_service: FeedStreamService):
        """Initialize the pages blueprint.

        Args:
            db: Shared database manager
            stream_service: Service producing live page streams
        """
        self.db = db
        self.stream_service = stream_service
        self.max_feeds = get_config().stream.max_feeds_per_request
        self.blueprint = Blueprint("pages", __name__, url_prefix="/api/pages")
        self._register_routes()

    def _register_routes(self):
        """Register all page routes."""
        self.blueprint.add_url_rule("", view_func=self._list, methods=["GET"])
        self.blueprint.add_url_rule("", view_func=self._create, methods=["POST"])
        self.blueprint.add_url_rule("", view_func=self._reorder, methods=["PATCH"])
        self.blueprint.add_url_rule("/<page_id>", view_func=self._get, methods=["GET"])
        self.blueprint.add_url_rule("/<page_id>", view_func=self._update, methods=["PATCH"])
        self.blueprint.add_url_rule("/<page_id>", view_func=self._delete, methods=["DELETE"])

    def _list(self):
        """List pages with their feed counts."""
        with self.db.session() as session:
            rows = PageRepository(session).list_pages_with_stats()
            data = [page_to_dict(page, feed_count=count) for page, count in rows]

        return api_response(success=True, data=data)

    def _create(self):
        """Create a page from ``{name, isHomepage, feeds}``."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return api_response(success=False, error="Invalid request payload.", status=400)

        try:
            normalize_request_feeds(payload.get("feeds"), self.max_feeds)
            data = PageCreate.model_validate(payload)

            with self.db.session() as session:
                repo = PageRepository(session)
                page = repo.create(data)
                result = {
                    "page": page_to_dict(page),
                    "feedMix": [feed_source_to_dict(s) for s in repo.list_page_feed_mix(page.id)],
                }
        except (FeedValidationError, ValidationError) as e:
            logger.warning(f"Rejected page creation: {e}")
            return api_response(success=False, error=str(e), status=400)

        return api_response(success=True, data=result, message="Page created", status=201)

    def _reorder(self):
        """Reorder pages from ``{pageIds: [...]}``."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return api_response(success=False, error="Invalid request payload.", status=400)

        try:
            with self.db.session() as session:
                pages = PageRepository(session).reorder(payload.get("pageIds"))
                data = [page_to_dict(page) for page in pages]
        except FeedValidationError as e:
            return api_response(success=False, error=str(e), status=400)

        return api_response(success=True, data=data)

    def _get(self, page_id: str):
        """Page details, feed mix and live stream."""
        with self.db.session() as session:
            repo = PageRepository(session)
            page = repo.get_by_id(page_id)

            if not page:
                return api_response(success=False, error="Page not found.", status=404)

            page_data = page_to_dict(page)
            feed_mix = repo.list_page_feed_mix(page.id)

        stream = self.stream_service.get_feed_stream_from_mix_sync(
            feed_mix, limit=self.stream_service.default_limit
        )

        data = {
            **page_data,
            "feedMix": [feed_source_to_dict(source) for source in feed_mix],
            **blend_result_to_dict(stream),
        }
        return api_response(success=True, data=data)

    def _update(self, page_id: str):
        """Partially update a page."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return api_response(success=False, error="Invalid request payload.", status=400)

        try:
            if "feeds" in payload:
                normalize_request_feeds(payload.get("feeds"), self.max_feeds)
            data = PageUpdate.model_validate(payload)

            with self.db.session() as session:
                repo = PageRepository(session)
                page = repo.update(page_id, data)
                result = {
                    "page": page_to_dict(page),
                    "feedMix": [feed_source_to_dict(s) for s in repo.list_page_feed_mix(page.id)],
                }
        except PageNotFoundError as e:
            return api_response(success=False, error=str(e), status=404)
        except (FeedValidationError, ValidationError) as e:
            logger.warning(f"Rejected update of page {page_id}: {e}")
            return api_response(success=False, error=str(e), status=400)

        return api_response(success=True, data=result, message="Page updated")

    def _delete(self, page_id: str):
        """Delete a page."""
        with self.db.session() as session:
            removed = PageRepository(session).delete(page_id)

        if not removed:
            return api_response(success=False, error="Page not found.", status=404)

        return api_response(success=True, message="Page deleted")
