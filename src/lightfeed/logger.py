"""
Logging for LightFeed.

All modules log through loguru. Records carry the module name and, for
fetch-time messages, the feed they concern (``feed_id``, ``feed_url``), so a
serialized log can be filtered per feed.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

from lightfeed.config import get_config

# Defaults for the extra fields, so formats may reference them on any record
FEED_EXTRA_DEFAULTS = {"feed_id": "-", "feed_url": "-"}


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    rotation: Optional[str] = None,
    retention: Optional[str] = None,
    format: Optional[str] = None,
    serialize: Optional[bool] = None,
) -> list[int]:
    """Replace loguru's handlers with the configured console and file sinks.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, etc.)
        log_file: Path to a log file; enables file logging when given
        rotation: File rotation setting (e.g., "50 MB", "1 day")
        retention: File retention setting (e.g., "14 days")
        format: Log format string
        serialize: Emit JSON records instead of formatted lines

    Returns:
        Ids of the handlers that were added
    """
    log_config = get_config().logging
    level = level or log_config.level
    format = format or log_config.format
    serialize = log_config.serialize if serialize is None else serialize

    _logger.remove()
    _logger.configure(extra=FEED_EXTRA_DEFAULTS)

    handler_ids = []
    if log_config.console_enabled:
        handler_ids.append(
            _logger.add(
                sys.stderr,
                format=format,
                level=level,
                colorize=not serialize,
                serialize=serialize,
                backtrace=True,
                diagnose=False,
            )
        )

    if log_file or log_config.file_enabled:
        log_path = Path(log_file or log_config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(
            _logger.add(
                str(log_path),
                format=format,
                level=level,
                serialize=serialize,
                rotation=rotation or log_config.rotation,
                retention=retention or log_config.retention,
                compression="zip",
                encoding="utf-8",
                enqueue=True,
                backtrace=True,
                diagnose=False,
            )
        )

    return handler_ids


def get_logger(name: Optional[str] = None):
    """Logger bound to a module name (typically ``__name__``)."""
    if name:
        return _logger.bind(name=name)
    return _logger


def feed_logger(name: str, source):
    """Logger for messages about one feed.

    Args:
        name: Module name
        source: FeedSource the messages concern

    Returns:
        Logger with ``feed_id`` and ``feed_url`` bound
    """
    return _logger.bind(name=name, feed_id=source.feed_id, feed_url=source.url)


logger = _logger

__all__ = ["setup_logger", "get_logger", "feed_logger", "logger"]
