"""JSON HTTP API for LightFeed."""

from lightfeed.web.app import create_app

__all__ = ["create_app"]
