"""
Flask application for the LightFeed JSON API.
"""

from typing import Optional

from flask import Flask

from lightfeed.config import get_config
from lightfeed.core.services import FeedStreamService, create_feed_stream_service
from lightfeed.logger import get_logger
from lightfeed.storage.database import DatabaseFeedMixProvider, DatabaseManager
from lightfeed.web.serializers import api_response

logger = get_logger(__name__)


def create_app(
    db_path: Optional[str] = None,
    debug: bool = False,
    stream_service: Optional[FeedStreamService] = None,
) -> Flask:
    """Create and configure Flask application.

    Args:
        db_path: Path to database file
        debug: Enable debug mode
        stream_service: Optional stream service (one backed by the database
            is created when omitted)

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    config = get_config()
    app.config["SECRET_KEY"] = config.web.secret_key
    app.config["DEBUG"] = debug or config.web.debug

    # Database path
    if db_path is None:
        db_path = config.database.path

    app.config["DB_PATH"] = db_path

    db_manager = DatabaseManager(db_path)
    db_manager.init_db()

    if stream_service is None:
        stream_service = create_feed_stream_service(
            feed_mix_provider=DatabaseFeedMixProvider(db_manager)
        )

    app.extensions["lightfeed_db"] = db_manager
    app.extensions["lightfeed_stream"] = stream_service

    # ========================================================================
    # Register API Blueprints
    # ========================================================================

    from lightfeed.web.blueprints import PageBlueprint, SavedArticleBlueprint, StreamBlueprint

    app.register_blueprint(PageBlueprint(db_manager, stream_service).blueprint)
    app.register_blueprint(StreamBlueprint(db_manager, stream_service).blueprint)
    app.register_blueprint(SavedArticleBlueprint(db_manager).blueprint)

    # ========================================================================
    # Error Handlers
    # ========================================================================

    @app.errorhandler(404)
    def not_found(e):
        """Handle 404 errors."""
        return api_response(success=False, error="Not found.", status=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        """Handle 405 errors."""
        return api_response(success=False, error="Method not allowed.", status=405)

    @app.errorhandler(500)
    def server_error(e):
        """Handle 500 errors."""
        logger.error(f"Server error: {e}")
        return api_response(success=False, error="Internal server error.", status=500)

    logger.info(f"Web app created with database: {db_path}")

    return app
