"""
Text helpers for raw feed markup.

Turns XML fragments into display text and resolves the relative URLs feeds
are full of. None of these helpers raise: empty or missing input degrades
to an empty string.
"""

import re
from typing import Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

ELLIPSIS = "…"
DEFAULT_SUMMARY_LENGTH = 220

_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_ENTITY_RE = re.compile(r"&(#x[0-9a-f]+|#\d+|amp|lt|gt|quot|apos);", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")

_NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}


def remove_cdata(value: Optional[str]) -> str:
    """Replace every CDATA section with its inner content."""
    return _CDATA_RE.sub(r"\1", value or "")


def _replace_entity(match: re.Match) -> str:
    token = match.group(1).lower()

    if token in _NAMED_ENTITIES:
        return _NAMED_ENTITIES[token]

    try:
        if token.startswith("#x"):
            return chr(int(token[2:], 16))
        return chr(int(token[1:], 10))
    except (ValueError, OverflowError):
        # Out of the Unicode range, keep the reference as written
        return match.group(0)


def decode_entities(value: Optional[str]) -> str:
    """Decode the five XML entities and numeric character references.

    CDATA wrappers are removed first. Entities outside that set (``&nbsp;``,
    ``&copy;`` ...) are left untouched.

    Args:
        value: Raw XML text

    Returns:
        Decoded text
    """
    return _ENTITY_RE.sub(_replace_entity, remove_cdata(value))


def to_plain_text(value: Optional[str]) -> str:
    """Decode entities, strip tags and collapse whitespace.

    Args:
        value: Raw XML or HTML fragment

    Returns:
        Single-line plain text
    """
    text = _TAG_RE.sub(" ", decode_entities(value))
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(value: Optional[str], max_length: int = DEFAULT_SUMMARY_LENGTH) -> str:
    """Shorten text to ``max_length`` characters, ellipsis included.

    Text of exactly ``max_length`` characters is returned as is.
    """
    clean_value = (value or "").strip()
    if len(clean_value) <= max_length:
        return clean_value
    return clean_value[: max_length - 1].rstrip() + ELLIPSIS


def _is_absolute_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False

    if not parts.scheme:
        return False
    if parts.scheme in ("http", "https"):
        return bool(parts.netloc)
    return True


def _resolve(raw_url: Optional[str], base_url: str) -> Optional[str]:
    raw_url = (raw_url or "").strip()
    if not raw_url:
        return None

    try:
        resolved = urljoin(base_url, raw_url)
    except ValueError:
        return None

    return resolved if _is_absolute_url(resolved) else None


def resolve_url(raw_url: Optional[str], base_url: str) -> str:
    """Resolve ``raw_url`` against ``base_url``.

    Args:
        raw_url: Possibly relative URL taken from the feed
        base_url: Feed URL used as the base

    Returns:
        Absolute URL, or ``base_url`` when ``raw_url`` is empty or unusable
    """
    return _resolve(raw_url, base_url) or base_url


def resolve_article_url(raw_url: Optional[str], base_url: str) -> Optional[str]:
    """Resolve an article link, returning None when it cannot be resolved."""
    return _resolve(raw_url, base_url)


def extract_image_from_html(raw_html: Optional[str], base_url: str) -> str:
    """Find the first ``<img src>`` in an HTML fragment.

    The fragment may still be wrapped in CDATA or entity-escaped, as feeds
    usually ship it.

    Args:
        raw_html: Raw description/content markup
        base_url: Feed URL used to resolve relative sources

    Returns:
        Resolved image URL, or ``base_url`` when the fragment has no image
    """
    html = decode_entities(raw_html)
    if "<img" not in html.lower():
        return base_url

    soup = BeautifulSoup(html, "html.parser")
    for img in soup.find_all("img"):
        src = (img.get("src") or "").strip()
        if src:
            return resolve_url(src, base_url)

    return base_url
