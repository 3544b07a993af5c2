"""
Time helpers: published-date parsing, ISO rendering and display labels.
"""

import calendar
import math
import time
from datetime import datetime, timezone
from typing import Optional

from feedparser.datetimes import _parse_date as parse_feed_date

UNKNOWN_PUBLISH_TIME = "Unknown publish time"

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_ABSOLUTE_THRESHOLD_SECONDS = 14 * _DAY

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Values that read better as words when numeric output is not required
_AUTO_PHRASES = {
    ("second", 0): "now",
    ("minute", 0): "this minute",
    ("hour", 0): "this hour",
    ("day", 0): "today",
    ("day", -1): "yesterday",
    ("day", 1): "tomorrow",
}


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def to_iso_string(epoch_ms: int) -> str:
    """Render epoch milliseconds as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC)."""
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{epoch_ms % 1000:03d}Z"


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string."""
    return to_iso_string(now_ms())


def parse_published_at(raw_value: Optional[str]) -> tuple[Optional[str], int]:
    """Parse a feed date into ``(iso_string, epoch_ms)``.

    RFC 822, W3C/ISO 8601 and the other formats feedparser knows about are
    accepted. Unparsable input yields ``(None, 0)``.
    """
    raw_value = (raw_value or "").strip()
    if not raw_value:
        return None, 0

    try:
        parsed = parse_feed_date(raw_value)
        if parsed is None:
            return None, 0
        epoch_ms = calendar.timegm(parsed) * 1000
        return to_iso_string(epoch_ms), epoch_ms
    except (ValueError, OverflowError, OSError, TypeError):
        return None, 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _relative_phrase(value: int, unit: str) -> str:
    phrase = _AUTO_PHRASES.get((unit, value))
    if phrase:
        return phrase

    count = abs(value)
    label = unit if count == 1 else f"{unit}s"
    if value > 0:
        return f"in {count} {label}"
    return f"{count} {label} ago"


def _absolute_label(epoch_ms: int) -> str:
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{_MONTHS[moment.month - 1]} {moment.day}, {hour}:{moment.minute:02d} {meridiem}"


def format_published_label(published_at_ms: int, now: Optional[int] = None) -> str:
    """Human-readable publish time relative to ``now``.

    Args:
        published_at_ms: Publish time in epoch milliseconds, 0 when unknown
        now: Reference time in epoch milliseconds (defaults to the clock)

    Returns:
        Label such as "3 hours ago", "in 2 days" or "Jan 5, 3:07 PM"
    """
    if not published_at_ms:
        return UNKNOWN_PUBLISH_TIME

    reference = now_ms() if now is None else now
    delta_seconds = _round_half_up((published_at_ms - reference) / 1000)
    absolute_seconds = abs(delta_seconds)

    if absolute_seconds > _ABSOLUTE_THRESHOLD_SECONDS:
        return _absolute_label(published_at_ms)
    if absolute_seconds < _MINUTE:
        return _relative_phrase(delta_seconds, "second")
    if absolute_seconds < _HOUR:
        return _relative_phrase(_round_half_up(delta_seconds / _MINUTE), "minute")
    if absolute_seconds < _DAY:
        return _relative_phrase(_round_half_up(delta_seconds / _HOUR), "hour")

    return _relative_phrase(_round_half_up(delta_seconds / _DAY), "day")
