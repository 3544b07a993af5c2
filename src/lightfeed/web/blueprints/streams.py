"""
Stream API blueprint.

Homepage stream and ad-hoc feed previews.
"""

from flask import Blueprint, request

from lightfeed.core.blender import BlendResult
from lightfeed.core.feed_request import FeedValidationError
from lightfeed.core.services import FeedStreamService
from lightfeed.logger import get_logger
from lightfeed.storage.database import DatabaseManager
from lightfeed.storage.repositories import PageRepository
from lightfeed.web.serializers import (
    api_response,
    blend_result_to_dict,
    feed_source_to_dict,
    page_to_dict,
)

logger = get_logger(__name__)


class StreamBlueprint:
    """Blueprint for homepage and preview streams."""

    def __init__(self, db: DatabaseManager, stream_service: FeedStreamService):
        """Initialize the stream blueprint.

        Args:
            db: Shared database manager
            stream_service: Service producing blended streams
        """
        self.db = db
        self.stream_service = stream_service
        self.blueprint = Blueprint("streams", __name__, url_prefix="/api")
        self._register_routes()

    def _register_routes(self):
        """Register stream routes."""
        self.blueprint.add_url_rule("/home", view_func=self._home, methods=["GET"])
        self.blueprint.add_url_rule("/preview-feed", view_func=self._preview, methods=["POST"])

    def _home(self):
        """Blended stream of the homepage (or the first page)."""
        with self.db.session() as session:
            repo = PageRepository(session)
            page = repo.get_homepage()
            page_data = page_to_dict(page) if page else None
            feed_mix = repo.list_page_feed_mix(page.id) if page else []

        if page_data is None:
            stream = BlendResult()
        else:
            stream = self.stream_service.get_page_feed_stream_sync(
                page_data["id"], limit=self.stream_service.preview_limit
            )

        data = {
            "page": page_data,
            "feedMix": [feed_source_to_dict(source) for source in feed_mix],
            **blend_result_to_dict(stream),
        }
        return api_response(success=True, data=data)

    def _preview(self):
        """Blend an unsaved feed list from ``{feeds: [{url}, ...]}``."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return api_response(success=False, error="Invalid request payload.", status=400)

        try:
            feed_mix, stream = self.stream_service.preview_feeds_sync(payload.get("feeds"))
        except FeedValidationError as e:
            logger.warning(f"Rejected preview request: {e}")
            return api_response(success=False, error=str(e), status=400)

        data = {
            "feedMix": [feed_source_to_dict(source) for source in feed_mix],
            **blend_result_to_dict(stream),
        }
        return api_response(success=True, data=data)
