"""
Saved articles API blueprint.
"""

from flask import Blueprint, request
from pydantic import ValidationError

from lightfeed.core.feed_request import FeedValidationError
from lightfeed.logger import get_logger
from lightfeed.models import SavedArticleCreate
from lightfeed.storage.database import DatabaseManager
from lightfeed.storage.repositories import SavedArticleRepository
from lightfeed.web.serializers import api_response, saved_article_to_dict

logger = get_logger(__name__)


class SavedArticleBlueprint:
    """Blueprint for saved article operations."""

    def __init__(self, db: DatabaseManager):
        """Initialize the saved articles blueprint.

        Args:
            db: Shared database manager
        """
        self.db = db
        self.blueprint = Blueprint("saved_articles", __name__, url_prefix="/api/saved-articles")
        self._register_routes()

    def _register_routes(self):
        """Register saved article routes."""
        self.blueprint.add_url_rule("", view_func=self._list, methods=["GET"])
        self.blueprint.add_url_rule("", view_func=self._save, methods=["POST"])
        self.blueprint.add_url_rule("", view_func=self._remove, methods=["DELETE"])

    def _list(self):
        """List saved articles, newest first.

        ``?link=`` (repeatable) restricts the answer to the saved subset of
        those links.
        """
        links = request.args.getlist("link")

        with self.db.session() as session:
            repo = SavedArticleRepository(session)
            if links:
                data = sorted(repo.list_saved_links(links))
            else:
                data = [saved_article_to_dict(article) for article in repo.list()]

        return api_response(success=True, data=data)

    def _save(self):
        """Save ``{article: {...}, page: {id, name}}``."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return api_response(success=False, error="Invalid request payload.", status=400)

        article = payload.get("article") or {}
        page = payload.get("page") or {}
        if not isinstance(article, dict) or not isinstance(page, dict):
            return api_response(success=False, error="Invalid request payload.", status=400)

        try:
            data = SavedArticleCreate.model_validate(
                {**article, "page_id": page.get("id"), "page_name": page.get("name")}
            )
            with self.db.session() as session:
                saved = saved_article_to_dict(SavedArticleRepository(session).save(data))
        except (FeedValidationError, ValidationError) as e:
            return api_response(success=False, error=str(e), status=400)

        return api_response(success=True, data=saved, message="Article saved", status=201)

    def _remove(self):
        """Remove the saved article with ``{link}``."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return api_response(success=False, error="Invalid request payload.", status=400)

        try:
            with self.db.session() as session:
                removed = SavedArticleRepository(session).remove_by_link(payload.get("link"))
        except FeedValidationError as e:
            return api_response(success=False, error=str(e), status=400)

        if not removed:
            return api_response(success=False, error="Article not found.", status=404)

        return api_response(success=True, message="Article removed")
