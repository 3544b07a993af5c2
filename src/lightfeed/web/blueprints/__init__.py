"""API blueprints for the LightFeed web app."""

from lightfeed.web.blueprints.pages import PageBlueprint
from lightfeed.web.blueprints.saved_articles import SavedArticleBlueprint
from lightfeed.web.blueprints.streams import StreamBlueprint

__all__ = [
    "PageBlueprint",
    "SavedArticleBlueprint",
    "StreamBlueprint",
]
